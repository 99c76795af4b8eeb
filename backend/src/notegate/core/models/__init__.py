"""
Database models for NoteGate.

SQLAlchemy ORM models for the note access and rating service. All
models are used through async sessions.

Models included:
    - User: identity record with the admin flag
    - Note: note content, visibility, share link and rating aggregate
    - Rating: one star rating per user per note
    - Attachment: file metadata for note attachments
"""

from .attachment import Attachment
from .base import BaseModel
from .note import Note, ShareToken
from .rating import Rating
from .user import User

__all__ = [
    "BaseModel",
    "User",
    "Note",
    "ShareToken",
    "Rating",
    "Attachment",
]
