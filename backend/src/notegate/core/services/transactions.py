"""Commit boundary shared by all write paths."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..exceptions import ConflictError, NoteGateError, StorageError
from ..logging import get_logger

logger = get_logger("transactions")


@asynccontextmanager
async def committing(session: AsyncSession, action: str) -> AsyncIterator[AsyncSession]:
    """Run a block and commit it, or roll back and translate the failure.

    Version mismatches and unique-key races become ConflictError (the caller
    may retry). Any other database failure becomes StorageError; the driver
    message is logged, never returned.
    """
    try:
        yield session
        await session.commit()
    except NoteGateError:
        await session.rollback()
        raise
    except (StaleDataError, IntegrityError) as e:
        await session.rollback()
        logger.warning(f"Concurrent modification during {action}: {type(e).__name__}")
        raise ConflictError() from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Storage failure during {action}", exc_info=True)
        raise StorageError() from e
