"""NoteAccessService guard paths with the repositories faked out."""

import uuid
from datetime import datetime, timezone

import pytest

import notegate.core.services.note_service as ns
from notegate.core.exceptions import ForbiddenError, NotFoundError, StorageError
from notegate.core.policy import Requester
from notegate.core.schemas.notes import NoteUpdate
from notegate.core.services.note_service import NoteAccessService


class Dummy:
    def __init__(self, **kw):
        self.__dict__.update(kw)


class FakeNoteRepo:
    def __init__(self, note):
        self.note = note
        self.updated = None
        self.deleted = False
        self.views = 0
    async def get_by_id(self, nid):
        return self.note if self.note and self.note.id == nid else None
    async def update_note(self, note, data):
        self.updated = data
        return note
    async def delete_note(self, nid):
        self.deleted = True
        return True
    async def increment_view_count(self, nid):
        self.views += 1
    async def refresh(self, note):
        return note


class FakeAttachmentRepo:
    def __init__(self, attachments=None):
        self.attachments = attachments or []
        self.deleted_for = None
    async def list_for_note(self, nid):
        return self.attachments
    async def delete_for_note(self, nid):
        self.deleted_for = nid
        return len(self.attachments)


class FakeRatingRepo:
    def __init__(self):
        self.deleted_for = None
    async def delete_for_note(self, nid):
        self.deleted_for = nid
        return 0


class FakeUserRepo:
    async def get_by_id(self, uid):
        return Dummy(id=uid, username="owner", display_name="Owner")


class FakeSession:
    def __init__(self):
        self.committed = 0
        self.rolled_back = 0
    async def commit(self):
        self.committed += 1
    async def rollback(self):
        self.rolled_back += 1
    async def flush(self):
        pass


class BrokenStorage:
    def __init__(self):
        self.calls = []
    async def delete(self, path):
        self.calls.append(path)
        raise OSError("read-only file system")


def make_dummy_note(owner_id, is_public=False):
    now = datetime.now(timezone.utc)
    return Dummy(
        id=uuid.uuid4(),
        owner_id=owner_id,
        title="T",
        content="c",
        is_public=is_public,
        share=None,
        view_count=0,
        average_rating=0.0,
        rating_count=0,
        created_at=now,
        updated_at=now,
    )


def make_dummy_attachment(path):
    return Dummy(
        id=uuid.uuid4(),
        filename=path,
        original_name=path,
        mimetype="application/octet-stream",
        size=10,
        path=path,
        created_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def wired(monkeypatch, owner_id, test_settings):
    """Service with fake repositories around one private note."""
    note = make_dummy_note(owner_id)
    repos = Dummy(
        note=FakeNoteRepo(note),
        attachment=FakeAttachmentRepo(
            [make_dummy_attachment("a.bin"), make_dummy_attachment("b.bin")]
        ),
        rating=FakeRatingRepo(),
    )
    monkeypatch.setattr(ns, "NoteRepository", lambda s: repos.note, raising=True)
    monkeypatch.setattr(ns, "AttachmentRepository", lambda s: repos.attachment, raising=True)
    monkeypatch.setattr(ns, "RatingRepository", lambda s: repos.rating, raising=True)
    monkeypatch.setattr(ns, "UserRepository", lambda s: FakeUserRepo(), raising=True)

    session = FakeSession()
    storage = BrokenStorage()
    svc = NoteAccessService(session=session, file_storage=storage, settings=test_settings)
    return Dummy(svc=svc, session=session, storage=storage, note=note, repos=repos)


async def test_unknown_note_never_touches_session(wired, owner_id):
    with pytest.raises(NotFoundError):
        await wired.svc.get_note(uuid.uuid4(), Requester(user_id=owner_id))

    assert wired.session.committed == 0
    assert wired.repos.note.views == 0


async def test_view_is_counted_for_owner(wired, owner_id):
    resp = await wired.svc.get_note(wired.note.id, Requester(user_id=owner_id))

    assert wired.repos.note.views == 1
    assert wired.session.committed == 1
    assert resp.is_owned is True
    assert resp.owner_username == "owner"


async def test_stranger_denied_before_view_count(wired):
    with pytest.raises(ForbiddenError):
        await wired.svc.get_note(wired.note.id, Requester(user_id=uuid.uuid4()))

    assert wired.repos.note.views == 0


async def test_empty_update_does_not_commit(wired, owner_id):
    await wired.svc.update_note(wired.note.id, Requester(user_id=owner_id), NoteUpdate())

    assert wired.repos.note.updated is None
    assert wired.session.committed == 0


async def test_update_passes_only_set_fields(wired, owner_id):
    await wired.svc.update_note(
        wired.note.id, Requester(user_id=owner_id), NoteUpdate(is_public=False)
    )

    assert wired.repos.note.updated == {"is_public": False}


async def test_storage_failure_stops_before_rows_are_deleted(wired, owner_id):
    with pytest.raises(StorageError):
        await wired.svc.delete_note(wired.note.id, Requester(user_id=owner_id))

    assert wired.storage.calls == ["a.bin"]
    assert wired.repos.note.deleted is False
    assert wired.repos.rating.deleted_for is None
    assert wired.repos.attachment.deleted_for is None
    assert wired.session.committed == 0


async def test_anonymous_callers_rejected_for_identity_operations(wired):
    with pytest.raises(ForbiddenError):
        await wired.svc.list_notes(None)
    with pytest.raises(ForbiddenError):
        await wired.svc.list_user_ratings(None)
    with pytest.raises(ForbiddenError):
        await wired.svc.delete_rating(uuid.uuid4(), None)


async def test_reassign_requires_admin(wired, owner_id):
    with pytest.raises(ForbiddenError):
        await wired.svc.reassign_owner(wired.note.id, Requester(user_id=owner_id), uuid.uuid4())
    with pytest.raises(ForbiddenError):
        await wired.svc.reassign_owner(wired.note.id, None, uuid.uuid4())

    assert wired.repos.note.updated is None
