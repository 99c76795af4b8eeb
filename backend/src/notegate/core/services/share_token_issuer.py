"""Share token issuer - bearer links that grant read access to one note."""

import secrets
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import Settings, get_settings
from ..exceptions import ForbiddenError, ValidationError
from ..logging import get_logger
from ..models.base import as_utc, utcnow
from ..models.note import Note, ShareToken
from ..policy import AccessPolicy, Requester
from .transactions import committing

logger = get_logger("sharing")


class ShareTokenIssuer:
    """Issue, revoke and check share tokens.

    A note holds at most one token. Issuing again replaces it, which
    invalidates every link handed out before.
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()

    def _resolve_ttl(self, ttl_days) -> int:
        if ttl_days is None:
            return self.settings.share_token_default_ttl_days
        if isinstance(ttl_days, bool) or not isinstance(ttl_days, int) or ttl_days <= 0:
            raise ValidationError(
                "ttl_days must be a positive whole number of days", details={"field": "ttl_days"}
            )
        return ttl_days

    def new_token(self, ttl_days: int, now: Optional[datetime] = None) -> ShareToken:
        now = as_utc(now) if now else utcnow()
        return ShareToken(
            value=secrets.token_urlsafe(self.settings.share_token_bytes),
            expires_at=now + timedelta(days=ttl_days),
        )

    async def issue(
        self,
        note: Note,
        requester: Optional[Requester],
        ttl_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ShareToken:
        """Put a fresh token on the note. Only writers may share."""
        if not AccessPolicy.can_write(note, requester):
            raise ForbiddenError()
        ttl = self._resolve_ttl(ttl_days)

        token = self.new_token(ttl, now)
        async with committing(self.session, "share token issue"):
            note.share = token
            await self.session.flush()

        logger.info(
            f"Share link issued for note {note.id}",
            extra={"note_id": str(note.id), "expires_at": token.expires_at.isoformat()},
        )
        return token

    async def revoke(self, note: Note, requester: Optional[Requester]) -> None:
        """Clear the note's token. Revoking an unshared note is a no-op."""
        if not AccessPolicy.can_write(note, requester):
            raise ForbiddenError()
        if note.share is None:
            return

        async with committing(self.session, "share token revoke"):
            note.share = None
            await self.session.flush()

        logger.info(f"Share link revoked for note {note.id}", extra={"note_id": str(note.id)})

    @staticmethod
    def validate(note: Note, token: Optional[str], now: Optional[datetime] = None) -> bool:
        return AccessPolicy.validate_token(note, token, now)

    def build_share_url(self, note_id: UUID, token: str) -> str:
        base = self.settings.public_base_url.rstrip("/")
        return f"{base}/api/notes/{note_id}?token={token}"
