"""
Unit tests for Note and ShareToken models.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from notegate.core.models.note import Note, ShareToken

NOW = datetime(2025, 9, 14, 12, 0, tzinfo=timezone.utc)


class TestShareToken:
    """ShareToken value object."""

    def test_naive_expiry_is_utc(self):
        token = ShareToken("abc", datetime(2025, 9, 14, 12, 0))
        assert token.expires_at == NOW

    def test_expiry_boundary(self):
        token = ShareToken("abc", NOW)

        assert token.is_expired(NOW - timedelta(microseconds=1)) is False
        assert token.is_expired(NOW) is True

    def test_matches_exact_value_only(self):
        token = ShareToken("abc", NOW + timedelta(days=1))

        assert token.matches("abc", NOW) is True
        assert token.matches("ABC", NOW) is False
        assert token.matches(None, NOW) is False

    def test_is_immutable(self):
        token = ShareToken("abc", NOW)
        with pytest.raises(AttributeError):
            token.value = "other"


class TestNoteModel:
    """Test Note model functionality."""

    async def test_create_note_defaults(self, test_session, owner):
        """Fresh notes start unrated and unshared."""
        note = Note(title="Test Note", content="This is test content", owner_id=owner.id)

        test_session.add(note)
        await test_session.commit()
        await test_session.refresh(note)

        assert isinstance(note.id, uuid.UUID)
        assert note.is_public is False
        assert note.view_count == 0
        assert note.average_rating == 0.0
        assert note.rating_count == 0
        assert note.share is None
        assert note.version == 1

    def test_share_property_sets_both_columns(self):
        note = Note(title="t", content="c", owner_id=uuid.uuid4())
        token = ShareToken("abc", NOW)

        note.share = token
        assert (note.share_token, note.share_token_expires_at) == ("abc", NOW)
        assert note.share == token

        note.share = None
        assert (note.share_token, note.share_token_expires_at) == (None, None)

    def test_preview(self):
        short = Note(title="t", content="short", owner_id=uuid.uuid4())
        long = Note(title="t", content="x" * 200, owner_id=uuid.uuid4())

        assert short.preview == "short"
        assert len(long.preview) == 150
        assert long.preview.endswith("...")

    async def test_to_dict(self, make_note, owner):
        note = await make_note(owner, title="Dict me")

        data = note.to_dict()

        assert data["title"] == "Dict me"
        assert data["owner_id"] == str(owner.id)
        assert data["share_token"] is None
        assert isinstance(data["created_at"], str)

    async def test_half_set_share_token_rejected(self, test_session, owner):
        note = Note(title="t", content="c", owner_id=owner.id, share_token="abc")
        test_session.add(note)

        with pytest.raises(IntegrityError):
            await test_session.commit()
        await test_session.rollback()

    async def test_average_outside_range_rejected(self, test_session, owner):
        note = Note(
            title="t", content="c", owner_id=owner.id, average_rating=0.5, rating_count=1
        )
        test_session.add(note)

        with pytest.raises(IntegrityError):
            await test_session.commit()
        await test_session.rollback()

    async def test_share_token_unique(self, test_session, make_note, owner):
        token = ShareToken("same-token", NOW)
        await make_note(owner, share=token)
        duplicate = Note(title="t", content="c", owner_id=owner.id)
        duplicate.share = token
        test_session.add(duplicate)

        with pytest.raises(IntegrityError):
            await test_session.commit()
        await test_session.rollback()
