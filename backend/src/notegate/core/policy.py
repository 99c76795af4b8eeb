"""
Access policy for notes.

Every read/write/rate decision in the app goes through AccessPolicy.
It is pure: no I/O, no session, the clock is injectable.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from .models.note import Note


@dataclass(frozen=True)
class Requester:
    """Resolved caller identity."""

    user_id: uuid.UUID
    is_admin: bool = False


class AccessPolicy:
    """Read/write/rate rules for a note."""

    @staticmethod
    def is_owner(note: Note, requester: Optional[Requester]) -> bool:
        return requester is not None and note.owner_id == requester.user_id

    @staticmethod
    def validate_token(
        note: Note, share_token: Optional[str], now: Optional[datetime] = None
    ) -> bool:
        """True iff the note has a live share token equal to share_token."""
        token = note.share
        if token is None:
            return False
        return token.matches(share_token, now)

    @classmethod
    def can_read(
        cls,
        note: Note,
        requester: Optional[Requester] = None,
        share_token: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        if note.is_public:
            return True
        if cls.is_owner(note, requester):
            return True
        if requester is not None and requester.is_admin:
            return True
        # expired or mismatched tokens fall through to DENY
        return cls.validate_token(note, share_token, now)

    @classmethod
    def can_write(cls, note: Note, requester: Optional[Requester]) -> bool:
        # a share token never grants write access
        if requester is None:
            return False
        return cls.is_owner(note, requester) or requester.is_admin

    @classmethod
    def can_rate(cls, note: Note, requester: Optional[Requester]) -> bool:
        if requester is None:
            return False
        return cls.can_read(note, requester, None)

    @classmethod
    def check_note_access(
        cls,
        note: Note,
        requester: Optional[Requester],
        share_token: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, bool]:
        """All decisions for one caller, for projections."""
        return {
            "can_read": cls.can_read(note, requester, share_token, now),
            "can_write": cls.can_write(note, requester),
            "can_rate": cls.can_rate(note, requester),
            "is_owner": cls.is_owner(note, requester),
        }
