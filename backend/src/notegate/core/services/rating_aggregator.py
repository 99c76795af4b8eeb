"""
Rating aggregator.

Owns every write that can change a note's rating set and keeps the cached
``(average_rating, rating_count)`` on the note equal to what the rating
rows say. After any committed write:

    note.rating_count   == number of ratings on the note
    note.average_rating == round_half_even(mean(values), 1)   (0.0 when empty)

Writers on the same note are serialised twice: an in-process
``asyncio.Lock`` per note id, and a ``SELECT ... FOR UPDATE`` row lock plus
the note's ``version`` column across processes. The rating write and the
aggregate write always share one commit.
"""

import asyncio
import weakref
from contextlib import asynccontextmanager
from decimal import ROUND_HALF_EVEN, Decimal
from typing import AsyncIterator, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import Settings, get_settings
from ..exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..logging import get_logger
from ..models.note import Note
from ..models.rating import MAX_RATING, MIN_RATING, Rating
from ..policy import Requester
from ..repositories.note_repository import NoteRepository
from ..repositories.rating_repository import RatingRepository
from .transactions import committing

logger = get_logger("ratings")

_ONE_DECIMAL = Decimal("0.1")

# entries disappear once no coroutine holds the lock
_note_locks: "weakref.WeakValueDictionary[UUID, asyncio.Lock]" = weakref.WeakValueDictionary()


def note_lock(note_id: UUID) -> asyncio.Lock:
    """The process-wide lock guarding writes to one note's ratings."""
    lock = _note_locks.get(note_id)
    if lock is None:
        lock = asyncio.Lock()
        _note_locks[note_id] = lock
    return lock


def compute_average(total: int, count: int) -> float:
    """Mean of integer stars rounded half-to-even to one decimal. 0.0 when empty.

    >>> compute_average(9, 4)
    2.2
    >>> compute_average(7, 4)
    1.8
    """
    if count == 0:
        return 0.0
    mean = Decimal(total) / Decimal(count)
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_EVEN))


class RatingAggregator:
    """Rating writes plus aggregate maintenance for one session."""

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.note_repo = NoteRepository(session)
        self.rating_repo = RatingRepository(session)

    def validate(self, value, comment) -> None:
        """Reject bad input before anything is touched."""
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(
                f"Rating value must be an integer between {MIN_RATING} and {MAX_RATING}",
                details={"field": "value"},
            )
        if not MIN_RATING <= value <= MAX_RATING:
            raise ValidationError(
                f"Rating value must be an integer between {MIN_RATING} and {MAX_RATING}",
                details={"field": "value"},
            )
        if comment is not None:
            if not isinstance(comment, str):
                raise ValidationError("Comment must be text", details={"field": "comment"})
            max_len = self.settings.rating_comment_max_length
            if len(comment) > max_len:
                raise ValidationError(
                    f"Comment must be at most {max_len} characters",
                    details={"field": "comment"},
                )

    @asynccontextmanager
    async def _locked_note(self, note_id: UUID, action: str) -> AsyncIterator[Note]:
        """Hold the note lock, re-read the note FOR UPDATE, commit on exit."""
        async with note_lock(note_id):
            async with committing(self.session, action):
                note = await self.note_repo.get_for_update(note_id)
                if note is None:
                    raise NotFoundError("Note not found")
                yield note

    async def _write_aggregate(self, note: Note) -> Tuple[float, int]:
        total, count = await self.rating_repo.aggregate(note.id)
        average = compute_average(total, count)
        note.average_rating = average
        note.rating_count = count
        await self.session.flush()
        return average, count

    async def upsert(
        self, note_id: UUID, user_id: UUID, value: int, comment: Optional[str] = None
    ) -> Tuple[Rating, Note]:
        """Create or replace the (note, user) rating and refresh the aggregate.

        A repeat rating keeps its id and created_at; the count does not move.
        """
        self.validate(value, comment)

        async with self._locked_note(note_id, "rating upsert") as note:
            rating = await self.rating_repo.get_for_user(note_id, user_id)
            if rating is None:
                rating = await self.rating_repo.add(
                    {"note_id": note_id, "user_id": user_id, "value": value, "comment": comment}
                )
                created = True
            else:
                await self.rating_repo.update(rating, value, comment)
                created = False
            average, count = await self._write_aggregate(note)

        logger.info(
            f"Rating {'created' if created else 'updated'} on note {note_id}",
            extra={"note_id": str(note_id), "average_rating": average, "rating_count": count},
        )
        return rating, note

    async def remove(self, rating_id: UUID, requester: Requester) -> Note:
        """Delete a rating (author or admin) and refresh the aggregate."""
        rating = await self.rating_repo.get_by_id(rating_id)
        if rating is None:
            raise NotFoundError("Rating not found")
        if not (rating.is_authored_by(requester.user_id) or requester.is_admin):
            logger.warning(f"Denied rating delete {rating_id} for user {requester.user_id}")
            raise ForbiddenError()

        note_id = rating.note_id
        async with self._locked_note(note_id, "rating delete") as note:
            await self.rating_repo.delete(rating)
            average, count = await self._write_aggregate(note)

        logger.info(
            f"Rating removed from note {note_id}",
            extra={"note_id": str(note_id), "average_rating": average, "rating_count": count},
        )
        return note

    async def recompute(self, note_id: UUID) -> Tuple[float, int]:
        """Rebuild the cached aggregate from the rating rows. Idempotent.

        Retried on ConflictError up to ``aggregate_recompute_retries`` times.
        """
        attempts = max(1, self.settings.aggregate_recompute_retries)
        for attempt in range(1, attempts + 1):
            try:
                async with self._locked_note(note_id, "aggregate recompute") as note:
                    average, count = await self._write_aggregate(note)
                return average, count
            except ConflictError:
                if attempt == attempts:
                    raise
                logger.warning(f"Aggregate recompute conflict on note {note_id}, retry {attempt}")
        raise ConflictError()
