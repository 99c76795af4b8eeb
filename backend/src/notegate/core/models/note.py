# Note model for user content
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, as_utc, utcnow


@dataclass(frozen=True)
class ShareToken:
    """Bearer secret granting read access to one note until it expires.

    The token value and its expiry only ever exist together: a note either
    has a complete ShareToken or none at all.
    """

    value: str
    expires_at: datetime

    def __post_init__(self):
        object.__setattr__(self, "expires_at", as_utc(self.expires_at))

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = as_utc(now) if now else utcnow()
        return now >= self.expires_at

    def matches(self, candidate: Optional[str], now: Optional[datetime] = None) -> bool:
        """Exact, constant-time match of an unexpired token."""
        if not candidate:
            return False
        if self.is_expired(now):
            return False
        return secrets.compare_digest(self.value.encode(), candidate.encode())


class Note(BaseModel):
    """Note with visibility, share link and cached rating aggregate."""

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_public: Mapped[bool] = mapped_column(default=False, nullable=False)

    # owner reference - exactly one owner
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    # use Note.share, never these two directly
    share_token: Mapped[Optional[str]] = mapped_column(String(128), unique=True, nullable=True)
    share_token_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # cached aggregate, only written by RatingAggregator
    average_rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    rating_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # optimistic concurrency for aggregate writes across processes
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_notes_owner_id", "owner_id"),
        Index("idx_notes_public", "is_public"),
        Index("idx_notes_public_rating", "is_public", "average_rating"),
        CheckConstraint("length(title) <= 200", name="ck_notes_title_len"),
        CheckConstraint("view_count >= 0", name="ck_notes_view_count"),
        CheckConstraint("rating_count >= 0", name="ck_notes_rating_count"),
        CheckConstraint(
            "average_rating = 0 OR (average_rating >= 1 AND average_rating <= 5)",
            name="ck_notes_average_rating",
        ),
        CheckConstraint(
            "(share_token IS NULL) = (share_token_expires_at IS NULL)",
            name="ck_notes_share_token_pair",
        ),
    )

    def __repr__(self) -> str:
        truncated = self.title if len(self.title) <= 30 else (self.title[:30] + "...")
        return f"<Note(title='{truncated}', owner_id={self.owner_id})>"

    @property
    def share(self) -> Optional[ShareToken]:
        if self.share_token is None or self.share_token_expires_at is None:
            return None
        return ShareToken(self.share_token, self.share_token_expires_at)

    @share.setter
    def share(self, token: Optional[ShareToken]) -> None:
        if token is None:
            self.share_token = None
            self.share_token_expires_at = None
        else:
            self.share_token = token.value
            self.share_token_expires_at = token.expires_at

    @property
    def preview(self) -> str:
        """Get content preview."""
        if len(self.content) <= 150:
            return self.content
        return self.content[:147] + "..."
