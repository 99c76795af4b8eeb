"""Attachment repository for database operations."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.attachment import Attachment


class AttachmentRepository:
    """Repository for attachment metadata."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_attachment(self, attachment_data: dict) -> Attachment:
        attachment = Attachment(**attachment_data)
        self.session.add(attachment)
        await self.session.flush()
        return attachment

    async def get_for_note(self, note_id: UUID, attachment_id: UUID) -> Optional[Attachment]:
        """An attachment, only if it belongs to the given note."""
        stmt = select(Attachment).where(
            and_(Attachment.id == attachment_id, Attachment.note_id == note_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_note(self, note_id: UUID) -> List[Attachment]:
        stmt = select(Attachment).where(Attachment.note_id == note_id).order_by(
            Attachment.created_at
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def delete(self, attachment: Attachment) -> None:
        await self.session.delete(attachment)
        await self.session.flush()

    async def delete_for_note(self, note_id: UUID) -> int:
        result = await self.session.execute(
            delete(Attachment).where(Attachment.note_id == note_id)
        )
        return result.rowcount
