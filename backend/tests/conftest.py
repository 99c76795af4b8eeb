"""Shared pytest fixtures configured to use SQLite in-memory for unit tests."""

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Tell app lifespan to skip real DB init
os.environ["NOTEGATE_SKIP_LIFESPAN_DB"] = "1"

from notegate.config import Settings  # noqa: E402
from notegate.core.models import Attachment, BaseModel, Note, ShareToken, User  # noqa: E402
from notegate.core.policy import Requester  # noqa: E402
from notegate.core.storage import FileStorage, get_file_storage  # noqa: E402
from notegate.database import get_db_session  # noqa: E402
from notegate.security.jwt import create_access_token  # noqa: E402

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


def _enable_sqlite_fks(engine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()


class FakeFileStorage(FileStorage):
    """Records deletions instead of touching disk."""

    def __init__(self, fail_on: Optional[str] = None):
        self.deleted: List[str] = []
        self.fail_on = fail_on

    async def delete(self, path: str) -> None:
        if path == self.fail_on:
            raise OSError(f"disk error on {path}")
        self.deleted.append(path)


@pytest.fixture
def test_settings():
    """Settings for services under test."""
    return Settings(
        database_url=TEST_DB_URL,
        secret_key="test-secret-key",
        public_base_url="http://test",
        debug=True,
    )


@pytest.fixture
async def test_engine():
    """Fresh SQLite in-memory engine per test."""
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        poolclass=StaticPool,  # keep the same memory DB across connections
        connect_args={"check_same_thread": False},
    )
    _enable_sqlite_fks(engine)

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Database session per test."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def file_storage():
    return FakeFileStorage()


@pytest.fixture
def make_user(test_session):
    """Factory for persisted users."""

    async def _make(username: Optional[str] = None, is_admin: bool = False, is_active: bool = True):
        user = User(
            username=username or f"user_{uuid4().hex[:8]}",
            full_name="Test User",
            is_active=is_active,
            is_admin=is_admin,
        )
        test_session.add(user)
        await test_session.commit()
        return user

    return _make


@pytest.fixture
def make_note(test_session):
    """Factory for persisted notes."""

    async def _make(
        owner: User,
        is_public: bool = False,
        title: str = "Test Note",
        content: str = "This is a test note content",
        share: Optional[ShareToken] = None,
    ):
        note = Note(
            title=title,
            content=content,
            is_public=is_public,
            owner_id=owner.id,
            view_count=0,
            average_rating=0.0,
            rating_count=0,
        )
        note.share = share
        test_session.add(note)
        await test_session.commit()
        return note

    return _make


@pytest.fixture
def make_attachment(test_session):
    async def _make(note: Note, path: Optional[str] = None):
        name = path or f"{uuid4().hex}.pdf"
        attachment = Attachment(
            note_id=note.id,
            filename=name,
            original_name="report.pdf",
            mimetype="application/pdf",
            size=1024,
            path=name,
        )
        test_session.add(attachment)
        await test_session.commit()
        return attachment

    return _make


@pytest.fixture
async def owner(make_user):
    return await make_user("owner")


@pytest.fixture
async def other_user(make_user):
    return await make_user("other")


@pytest.fixture
async def admin_user(make_user):
    return await make_user("admin", is_admin=True)


def as_requester(user: User) -> Requester:
    return Requester(user_id=user.id, is_admin=user.is_admin)


def live_token(value: str = "live-token-value", days: int = 7) -> ShareToken:
    return ShareToken(value, datetime.now(timezone.utc) + timedelta(days=days))


def auth_headers_for(user: User) -> dict:
    """Create authentication headers with a valid JWT token."""
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def test_app(test_session, file_storage):
    """FastAPI app wired to the test session and fake file storage."""
    from notegate.main import app

    async def _override_get_db():
        yield test_session

    app.dependency_overrides[get_db_session] = _override_get_db
    app.dependency_overrides[get_file_storage] = lambda: file_storage
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(test_app):
    """Async client running the app in the test's event loop."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
