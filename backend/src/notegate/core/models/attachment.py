# Attachment metadata - the bytes live in external file storage
import uuid

from sqlalchemy import ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel


class Attachment(BaseModel):
    """File attached to a note."""

    __tablename__ = "attachments"

    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mimetype: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    # storage key, relative to the storage root
    path: Mapped[str] = mapped_column(String(500), nullable=False)

    __table_args__ = (Index("idx_attachments_note_id", "note_id"),)

    def __repr__(self) -> str:
        return f"<Attachment(original_name='{self.original_name}', note_id={self.note_id})>"
