"""Tests for AccessPolicy read/write/rate decisions."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from notegate.core.models.note import Note, ShareToken
from notegate.core.policy import AccessPolicy, Requester

NOW = datetime(2025, 9, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def owner(owner_id):
    return Requester(user_id=owner_id)


@pytest.fixture
def stranger():
    return Requester(user_id=uuid.uuid4())


@pytest.fixture
def admin():
    return Requester(user_id=uuid.uuid4(), is_admin=True)


def build_note(owner_id, is_public=False, share=None) -> Note:
    note = Note(
        id=uuid.uuid4(),
        title="Quarterly plan",
        content="Details",
        is_public=is_public,
        owner_id=owner_id,
    )
    note.share = share
    return note


class TestCanRead:
    def test_public_note_readable_by_anyone(self, owner_id, stranger):
        note = build_note(owner_id, is_public=True)

        assert AccessPolicy.can_read(note, None) is True
        assert AccessPolicy.can_read(note, stranger) is True

    def test_private_note_readable_by_owner(self, owner_id, owner):
        note = build_note(owner_id)
        assert AccessPolicy.can_read(note, owner) is True

    def test_private_note_readable_by_admin(self, owner_id, admin):
        note = build_note(owner_id)
        assert AccessPolicy.can_read(note, admin) is True

    def test_private_note_denied_to_anonymous_and_strangers(self, owner_id, stranger):
        note = build_note(owner_id)

        assert AccessPolicy.can_read(note, None) is False
        assert AccessPolicy.can_read(note, stranger) is False

    def test_valid_token_grants_read(self, owner_id):
        note = build_note(owner_id, share=ShareToken("abc123", NOW + timedelta(days=1)))
        assert AccessPolicy.can_read(note, None, "abc123", now=NOW) is True

    def test_mismatched_token_denied(self, owner_id):
        note = build_note(owner_id, share=ShareToken("abc123", NOW + timedelta(days=1)))

        assert AccessPolicy.can_read(note, None, "abc124", now=NOW) is False
        assert AccessPolicy.can_read(note, None, "abc12", now=NOW) is False
        assert AccessPolicy.can_read(note, None, "", now=NOW) is False

    def test_expired_token_equals_no_token(self, owner_id):
        note = build_note(owner_id, share=ShareToken("abc123", NOW - timedelta(seconds=1)))

        assert AccessPolicy.can_read(note, None, "abc123", now=NOW) is False

    def test_token_expiring_exactly_now_is_expired(self, owner_id):
        note = build_note(owner_id, share=ShareToken("abc123", NOW))
        assert AccessPolicy.can_read(note, None, "abc123", now=NOW) is False

    def test_token_on_unshared_note_denied(self, owner_id):
        note = build_note(owner_id)
        assert AccessPolicy.can_read(note, None, "anything", now=NOW) is False

    def test_naive_expiry_treated_as_utc(self, owner_id):
        naive = (NOW + timedelta(hours=1)).replace(tzinfo=None)
        note = build_note(owner_id)
        note.share_token = "abc123"
        note.share_token_expires_at = naive

        assert AccessPolicy.can_read(note, None, "abc123", now=NOW) is True


class TestCanWrite:
    def test_owner_and_admin_can_write(self, owner_id, owner, admin):
        note = build_note(owner_id)

        assert AccessPolicy.can_write(note, owner) is True
        assert AccessPolicy.can_write(note, admin) is True

    def test_public_note_not_writable_by_others(self, owner_id, stranger):
        note = build_note(owner_id, is_public=True)

        assert AccessPolicy.can_write(note, stranger) is False
        assert AccessPolicy.can_write(note, None) is False

    def test_share_token_never_grants_write(self, owner_id, stranger):
        note = build_note(owner_id, share=ShareToken("abc123", NOW + timedelta(days=1)))

        assert AccessPolicy.can_read(note, stranger, "abc123", now=NOW) is True
        assert AccessPolicy.can_write(note, stranger) is False


class TestCanRate:
    def test_anonymous_cannot_rate_public_note(self, owner_id):
        note = build_note(owner_id, is_public=True)
        assert AccessPolicy.can_rate(note, None) is False

    def test_any_user_can_rate_public_note(self, owner_id, stranger, owner):
        note = build_note(owner_id, is_public=True)

        assert AccessPolicy.can_rate(note, stranger) is True
        assert AccessPolicy.can_rate(note, owner) is True

    def test_stranger_cannot_rate_private_note_even_with_token(self, owner_id, stranger):
        note = build_note(owner_id, share=ShareToken("abc123", NOW + timedelta(days=1)))
        assert AccessPolicy.can_rate(note, stranger) is False

    def test_admin_can_rate_private_note(self, owner_id, admin):
        note = build_note(owner_id)
        assert AccessPolicy.can_rate(note, admin) is True


def test_check_note_access_summarises_all_decisions(owner_id, stranger):
    note = build_note(owner_id, is_public=True)

    access = AccessPolicy.check_note_access(note, stranger)

    assert access == {"can_read": True, "can_write": False, "can_rate": True, "is_owner": False}


def test_ownership_is_identity_equality(owner_id):
    note = build_note(owner_id)
    lookalike = Requester(user_id=uuid.UUID(str(owner_id)))

    assert AccessPolicy.is_owner(note, lookalike) is True
    assert AccessPolicy.is_owner(note, Requester(user_id=uuid.uuid4())) is False
    assert AccessPolicy.is_owner(note, None) is False
