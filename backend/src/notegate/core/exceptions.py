"""
Domain errors raised by the service layer.

Services raise these; the API layer maps each one to a status code in
``notegate.api.errors``. Nothing below the API knows about HTTP.
"""

from typing import Any, Dict, Optional


class NoteGateError(Exception):
    """Base class for all domain errors."""

    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class NotFoundError(NoteGateError):
    """Entity does not exist."""

    default_message = "Not found"


class ForbiddenError(NoteGateError):
    """Authenticated (or anonymous) caller is not allowed to do this."""

    default_message = "Not authorized"


class ValidationError(NoteGateError):
    """Malformed input: out-of-range rating, bad ttl, missing field."""

    default_message = "Invalid input"


class ConflictError(NoteGateError):
    """Concurrent write detected by the storage layer; safe to retry."""

    default_message = "Concurrent modification, please retry"


class StorageError(NoteGateError):
    """Underlying persistence failure. Not retried automatically."""

    default_message = "Internal storage error"
