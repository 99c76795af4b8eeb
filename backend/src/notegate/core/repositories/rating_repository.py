"""Rating store - persistence for individual rating rows."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.rating import Rating


class RatingRepository:
    """Repository for rating database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, rating_id: UUID) -> Optional[Rating]:
        stmt = select(Rating).where(Rating.id == rating_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_user(self, note_id: UUID, user_id: UUID) -> Optional[Rating]:
        """The (note, user) rating, if any. At most one exists."""
        stmt = select(Rating).where(and_(Rating.note_id == note_id, Rating.user_id == user_id))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, rating_data: dict) -> Rating:
        rating = Rating(**rating_data)
        self.session.add(rating)
        await self.session.flush()
        return rating

    async def update(self, rating: Rating, value: int, comment: Optional[str]) -> Rating:
        """Content-only update; id and created_at stay."""
        rating.value = value
        rating.comment = comment
        await self.session.flush()
        return rating

    async def delete(self, rating: Rating) -> None:
        await self.session.delete(rating)
        await self.session.flush()

    async def delete_for_note(self, note_id: UUID) -> int:
        result = await self.session.execute(delete(Rating).where(Rating.note_id == note_id))
        return result.rowcount

    async def aggregate(self, note_id: UUID) -> tuple[int, int]:
        """(sum of values, number of ratings) for a note."""
        stmt = select(
            func.coalesce(func.sum(Rating.value), 0), func.count(Rating.id)
        ).where(Rating.note_id == note_id)
        result = await self.session.execute(stmt)
        total, count = result.one()
        return int(total), int(count)

    async def list_for_note(
        self, note_id: UUID, page: int = 1, per_page: int = 20
    ) -> tuple[List[Rating], int]:
        """Ratings on a note, newest first."""
        return await self._paginate(Rating.note_id == note_id, page, per_page)

    async def list_for_user(
        self, user_id: UUID, page: int = 1, per_page: int = 20
    ) -> tuple[List[Rating], int]:
        """Ratings written by a user, newest first."""
        return await self._paginate(Rating.user_id == user_id, page, per_page)

    async def _paginate(self, condition, page: int, per_page: int) -> tuple[List[Rating], int]:
        offset = (page - 1) * per_page

        count_stmt = select(func.count(Rating.id)).where(condition)
        total_result = await self.session.execute(count_stmt)
        total_count = total_result.scalar() or 0

        stmt = (
            select(Rating)
            .where(condition)
            .order_by(desc(Rating.created_at))
            .offset(offset)
            .limit(per_page)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars()), total_count
