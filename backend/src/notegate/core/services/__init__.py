"""
Service layer interfaces and implementations.
"""

from .health_service import HealthService
from .interfaces import IHealthService, INoteAccessService
from .note_service import NoteAccessService
from .rating_aggregator import RatingAggregator, compute_average
from .share_token_issuer import ShareTokenIssuer

__all__ = [
    # Interfaces
    "INoteAccessService",
    "IHealthService",
    # Implementations
    "NoteAccessService",
    "RatingAggregator",
    "ShareTokenIssuer",
    "HealthService",
    "compute_average",
]
