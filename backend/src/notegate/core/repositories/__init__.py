"""Repository layer for data access."""

from .attachment_repository import AttachmentRepository
from .note_repository import NoteRepository
from .rating_repository import RatingRepository
from .user_repository import UserRepository

__all__ = [
    "UserRepository",
    "NoteRepository",
    "RatingRepository",
    "AttachmentRepository",
]
