"""Note repository for database operations."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, case, delete, desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.note import Note


class NoteRepository:
    """Repository for note database operations.

    Methods flush but never commit; the calling service owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_note(self, note_data: dict) -> Note:
        """Create new note."""
        note = Note(**note_data)
        self.session.add(note)
        await self.session.flush()
        return note

    async def get_by_id(self, note_id: UUID) -> Optional[Note]:
        """Get note by ID."""
        stmt = select(Note).where(Note.id == note_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_update(self, note_id: UUID) -> Optional[Note]:
        """Re-read a note with a row lock, overwriting any stale identity-map copy."""
        stmt = (
            select(Note)
            .where(Note.id == note_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def refresh(self, note: Note) -> Note:
        await self.session.refresh(note)
        return note

    async def increment_view_count(self, note_id: UUID) -> None:
        """Atomic +1 in SQL so concurrent views never lose an increment."""
        stmt = (
            update(Note)
            .where(Note.id == note_id)
            .values(view_count=Note.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def update_note(self, note: Note, update_data: dict) -> Note:
        """Apply field updates to a loaded note."""
        for key, value in update_data.items():
            setattr(note, key, value)
        await self.session.flush()
        return note

    async def delete_note(self, note_id: UUID) -> bool:
        """Delete the note row."""
        result = await self.session.execute(delete(Note).where(Note.id == note_id))
        return result.rowcount > 0

    @staticmethod
    def _readable_condition(user_id: UUID, is_admin: bool = False, only_mine: bool = False):
        """WHERE clause for notes readable without a share token; None means all rows."""
        if only_mine:
            return Note.owner_id == user_id
        if is_admin:
            return None
        return or_(Note.owner_id == user_id, Note.is_public.is_(True))

    async def _paginate(self, condition, order_by, page: int, per_page: int) -> tuple[List[Note], int]:
        offset = (page - 1) * per_page

        count_stmt = select(func.count(Note.id))
        stmt = select(Note)
        if condition is not None:
            count_stmt = count_stmt.where(condition)
            stmt = stmt.where(condition)

        total_result = await self.session.execute(count_stmt)
        total_count = total_result.scalar() or 0

        stmt = stmt.order_by(*order_by).offset(offset).limit(per_page)
        result = await self.session.execute(stmt)
        return list(result.scalars()), total_count

    async def list_readable_notes(
        self,
        user_id: UUID,
        is_admin: bool = False,
        only_mine: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[List[Note], int]:
        """Notes the user can read without a share token: own + public (admins: all)."""
        condition = self._readable_condition(user_id, is_admin, only_mine)
        return await self._paginate(condition, [desc(Note.created_at)], page, per_page)

    async def search_notes(
        self,
        user_id: UUID,
        query: str,
        is_admin: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[List[Note], int]:
        """Readable notes whose title or content contains ``query`` (case-insensitive).

        Title matches sort before content-only matches, newest first within each.
        """
        text_match = or_(
            Note.title.icontains(query, autoescape=True),
            Note.content.icontains(query, autoescape=True),
        )
        readable = self._readable_condition(user_id, is_admin)
        condition = text_match if readable is None else and_(readable, text_match)

        title_first = case((Note.title.icontains(query, autoescape=True), 0), else_=1)
        return await self._paginate(
            condition, [title_first, desc(Note.created_at)], page, per_page
        )

    async def top_rated(self, limit: int = 10) -> List[Note]:
        """Public notes with at least one rating, best first."""
        stmt = (
            select(Note)
            .where(Note.is_public.is_(True), Note.rating_count > 0)
            .order_by(desc(Note.average_rating), desc(Note.rating_count))
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())
