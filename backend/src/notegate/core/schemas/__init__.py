"""
Pydantic schemas for validating and documenting API requests and responses.
"""

from .auth import UserResponse
from .common import ComponentHealth, ErrorResponse, HealthCheckResponse, PaginationResponse
from .notes import (
    AttachmentResponse,
    NoteCreate,
    NoteListItem,
    NoteListResponse,
    NoteResponse,
    NoteSearchResponse,
    NoteUpdate,
    OwnerChangeRequest,
    ShareInfo,
)
from .ratings import (
    AggregateResponse,
    RatingCreate,
    RatingListResponse,
    RatingResponse,
    RatingResult,
    RatingUpdate,
)
from .sharing import ShareLinkRequest, ShareLinkResponse

__all__ = [
    # Identity
    "UserResponse",
    # Note schemas
    "NoteCreate",
    "NoteUpdate",
    "NoteResponse",
    "NoteListItem",
    "NoteListResponse",
    "NoteSearchResponse",
    "OwnerChangeRequest",
    "AttachmentResponse",
    "ShareInfo",
    # Rating schemas
    "RatingCreate",
    "RatingResponse",
    "RatingResult",
    "RatingUpdate",
    "RatingListResponse",
    "AggregateResponse",
    # Sharing schemas
    "ShareLinkRequest",
    "ShareLinkResponse",
    # Common schemas
    "PaginationResponse",
    "ErrorResponse",
    "ComponentHealth",
    "HealthCheckResponse",
]
