"""Middleware for authentication and other cross-cutting concerns."""

from .auth import JWTBearer, get_current_requester, get_optional_requester

__all__ = ["JWTBearer", "get_current_requester", "get_optional_requester"]
