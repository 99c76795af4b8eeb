# Star rating left by a user on a note
import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel

MIN_RATING = 1
MAX_RATING = 5
MAX_COMMENT_LENGTH = 500


class Rating(BaseModel):
    """One rating per user per note; a second rate is an update."""

    __tablename__ = "ratings"

    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    value: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(String(MAX_COMMENT_LENGTH), nullable=True)

    __table_args__ = (
        UniqueConstraint("note_id", "user_id", name="uq_ratings_note_user"),
        CheckConstraint(
            f"value >= {MIN_RATING} AND value <= {MAX_RATING}", name="ck_ratings_value_range"
        ),
        CheckConstraint(
            f"comment IS NULL OR length(comment) <= {MAX_COMMENT_LENGTH}",
            name="ck_ratings_comment_len",
        ),
        Index("idx_ratings_note_id", "note_id"),
        Index("idx_ratings_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Rating(note_id={self.note_id}, user_id={self.user_id}, value={self.value})>"

    def is_authored_by(self, user_id: Optional[uuid.UUID]) -> bool:
        return user_id is not None and self.user_id == user_id
