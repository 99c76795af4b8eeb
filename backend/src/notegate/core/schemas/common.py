"""
Shared response schemas: pagination, error bodies and health reports.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar('T')


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PaginationResponse(BaseModel, Generic[T]):
    """One page of a listing plus the numbers a client needs to walk it."""

    items: List[T]
    total: int
    page: int
    per_page: int
    pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def create(cls, items: List[T], total: int, page: int, per_page: int):
        pages = -(-total // per_page) if per_page else 0
        return cls(
            items=items,
            total=total,
            page=page,
            per_page=per_page,
            pages=pages,
            has_next=page < pages,
            has_prev=page > 1,
        )


class ErrorResponse(BaseModel):
    """Body of every non-2xx response produced by the error handlers."""

    error: str = Field(description="Error kind, e.g. ForbiddenError")
    message: str = Field(description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Offending field etc.")
    timestamp: datetime = Field(default_factory=_now)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "ValidationError",
                "message": "Rating value must be an integer between 1 and 5",
                "details": {"field": "value"},
                "timestamp": "2025-09-13T17:23:45Z",
            }
        }
    )


class ComponentHealth(BaseModel):
    """Result of probing one dependency."""

    connected: bool
    status: Literal["healthy", "unhealthy"]
    response_time_ms: Optional[float] = None
    error: Optional[str] = Field(default=None, description="Exception class, never its message")


class HealthCheckResponse(BaseModel):
    """Overall status: degraded means the app serves requests without Redis."""

    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: datetime = Field(default_factory=_now)
    version: str
    checks: Dict[str, ComponentHealth]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "degraded",
                "timestamp": "2025-09-13T10:30:00Z",
                "version": "1.0.0",
                "checks": {
                    "database": {"connected": True, "status": "healthy", "response_time_ms": 3.1},
                    "redis": {
                        "connected": False,
                        "status": "unhealthy",
                        "error": "ConnectionError",
                    },
                },
            }
        }
    )
