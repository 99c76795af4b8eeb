"""
Service interfaces for NoteGate application.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from ..policy import Requester
from ..schemas.common import ComponentHealth, HealthCheckResponse
from ..schemas.notes import (
    NoteCreate,
    NoteListItem,
    NoteListResponse,
    NoteResponse,
    NoteSearchResponse,
    NoteUpdate,
)
from ..schemas.ratings import (
    AggregateResponse,
    RatingListResponse,
    RatingResponse,
    RatingResult,
    RatingUpdate,
)
from ..schemas.sharing import ShareLinkResponse


class INoteAccessService(ABC):
    """Guarded note operations: lookup, policy check, mutation, projection."""

    @abstractmethod
    async def get_note(
        self, note_id: UUID, requester: Optional[Requester] = None, share_token: Optional[str] = None
    ) -> NoteResponse:
        """Read a note and count the view."""
        pass

    @abstractmethod
    async def create_note(self, requester: Requester, request: NoteCreate) -> NoteResponse:
        """Create new note."""
        pass

    @abstractmethod
    async def update_note(
        self, note_id: UUID, requester: Requester, request: NoteUpdate
    ) -> NoteResponse:
        """Update title, content or visibility."""
        pass

    @abstractmethod
    async def delete_note(self, note_id: UUID, requester: Requester) -> None:
        """Delete a note with its ratings and attachments."""
        pass

    @abstractmethod
    async def list_notes(
        self, requester: Requester, page: int = 1, per_page: int = 20, only_mine: bool = False
    ) -> NoteListResponse:
        """Notes readable without a share token."""
        pass

    @abstractmethod
    async def search_notes(
        self, requester: Requester, query: str, page: int = 1, per_page: int = 20
    ) -> NoteSearchResponse:
        """Text search over listable notes."""
        pass

    @abstractmethod
    async def delete_attachment(
        self, note_id: UUID, attachment_id: UUID, requester: Requester
    ) -> None:
        """Remove one attachment file and its row."""
        pass

    @abstractmethod
    async def top_rated_notes(self, limit: int = 10) -> List[NoteListItem]:
        """Best rated public notes."""
        pass

    @abstractmethod
    async def reassign_owner(
        self, note_id: UUID, requester: Requester, new_owner_id: UUID
    ) -> NoteResponse:
        """Admin only: give the note to another user."""
        pass

    @abstractmethod
    async def rate_note(
        self, note_id: UUID, requester: Optional[Requester], value: int, comment: Optional[str] = None
    ) -> RatingResult:
        """Create or replace the caller's rating."""
        pass

    @abstractmethod
    async def get_ratings(
        self,
        note_id: UUID,
        requester: Optional[Requester] = None,
        share_token: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> RatingListResponse:
        """Ratings on a readable note."""
        pass

    @abstractmethod
    async def get_rating(
        self,
        rating_id: UUID,
        requester: Optional[Requester] = None,
        share_token: Optional[str] = None,
    ) -> RatingResponse:
        """One rating on a readable note."""
        pass

    @abstractmethod
    async def update_rating(
        self, rating_id: UUID, requester: Requester, request: RatingUpdate
    ) -> RatingResult:
        """Change the caller's own rating."""
        pass

    @abstractmethod
    async def list_user_ratings(
        self, requester: Requester, page: int = 1, per_page: int = 20
    ) -> RatingListResponse:
        """The caller's own ratings."""
        pass

    @abstractmethod
    async def delete_rating(self, rating_id: UUID, requester: Requester) -> AggregateResponse:
        """Remove a rating (author or admin)."""
        pass

    @abstractmethod
    async def recompute_aggregate(self, note_id: UUID, requester: Requester) -> AggregateResponse:
        """Rebuild the cached aggregate from rating rows."""
        pass

    @abstractmethod
    async def generate_share_link(
        self, note_id: UUID, requester: Requester, ttl_days: Optional[int] = None
    ) -> ShareLinkResponse:
        """Issue (or replace) the note's share token."""
        pass

    @abstractmethod
    async def revoke_share_link(self, note_id: UUID, requester: Requester) -> None:
        """Clear the note's share token."""
        pass


class IHealthService(ABC):
    """Health check service."""

    @abstractmethod
    async def get_health_status(self) -> HealthCheckResponse:
        """Get application health status."""
        pass

    @abstractmethod
    async def check_database_health(self) -> ComponentHealth:
        """Check database connectivity."""
        pass

    @abstractmethod
    async def check_redis_health(self) -> ComponentHealth:
        """Check Redis connectivity."""
        pass
