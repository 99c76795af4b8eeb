"""API routers for NoteGate."""

from .auth import router as auth_router
from .errors import register_error_handlers
from .health import router as health_router
from .notes import router as notes_router
from .ratings import router as ratings_router

__all__ = [
    "auth_router",
    "notes_router",
    "ratings_router",
    "health_router",
    "register_error_handlers",
]
