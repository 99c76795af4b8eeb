"""Concurrent writers on one note, each with its own session and connection."""

import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from conftest import FakeFileStorage, as_requester
from notegate.core.models import BaseModel, Note, Rating, User
from notegate.core.services.note_service import NoteAccessService
from notegate.core.services.rating_aggregator import compute_average


@pytest.fixture
async def file_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_maker(file_engine):
    return async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def seeded(session_maker):
    """One public note and twenty users."""
    async with session_maker() as session:
        owner = User(username="owner")
        session.add(owner)
        await session.flush()
        note = Note(title="Hot", content="Everyone rates this", is_public=True, owner_id=owner.id)
        raters = [User(username=f"rater{i}") for i in range(20)]
        session.add(note)
        session.add_all(raters)
        await session.commit()
        return note, raters


async def rate_in_own_session(session_maker, test_settings, note_id, user, value):
    async with session_maker() as session:
        service = NoteAccessService(
            session, file_storage=FakeFileStorage(), settings=test_settings
        )
        return await service.rate_note(note_id, as_requester(user), value)


async def test_parallel_ratings_keep_aggregate_exact(session_maker, seeded, test_settings):
    note, raters = seeded
    values = [(i % 5) + 1 for i in range(len(raters))]

    await asyncio.gather(
        *(
            rate_in_own_session(session_maker, test_settings, note.id, user, value)
            for user, value in zip(raters, values)
        )
    )

    async with session_maker() as session:
        stored = await session.get(Note, note.id)
        count = await session.scalar(
            select(func.count(Rating.id)).where(Rating.note_id == note.id)
        )

    assert count == len(raters)
    assert stored.rating_count == len(raters)
    assert stored.average_rating == compute_average(sum(values), len(values))


async def test_parallel_rerates_by_one_user_leave_one_rating(session_maker, seeded, test_settings):
    note, raters = seeded
    user = raters[0]

    results = await asyncio.gather(
        *(rate_in_own_session(session_maker, test_settings, note.id, user, v) for v in (1, 2, 3, 4, 5))
    )

    async with session_maker() as session:
        stored = await session.get(Note, note.id)
        rating = await session.scalar(select(Rating).where(Rating.note_id == note.id))

    assert stored.rating_count == 1
    # the last writer wins and the aggregate agrees with it
    assert stored.average_rating == float(rating.value)
    assert {r.rating.id for r in results} == {rating.id}


async def test_parallel_views_are_all_counted(session_maker, seeded, test_settings):
    note, raters = seeded

    async def view(user):
        async with session_maker() as session:
            service = NoteAccessService(session, settings=test_settings)
            await service.get_note(note.id, as_requester(user))

    await asyncio.gather(*(view(user) for user in raters))

    async with session_maker() as session:
        stored = await session.get(Note, note.id)

    assert stored.view_count == len(raters)
