# Async engine, session factory and the per-request session dependency
from typing import AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .config import get_settings
from .core.models.base import BaseModel

settings = get_settings()


def _engine_options(database_url: str) -> dict:
    options = {"echo": settings.database_echo}
    # pooled server databases drop idle connections, sqlite files do not
    if make_url(database_url).get_backend_name() != "sqlite":
        options["pool_pre_ping"] = True
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# objects stay readable after commit, services build responses from them
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """One session per request; services own the commits."""
    async with AsyncSessionLocal() as session:
        yield session


async def create_tables() -> None:
    """Create missing tables (development only, migrations run in production)."""
    from .core import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)


async def dispose_engine() -> None:
    await engine.dispose()
