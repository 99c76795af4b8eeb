"""
Rating schemas.

Range checks live in RatingAggregator too; these only shape the HTTP contract.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from ..models.rating import MAX_COMMENT_LENGTH, MAX_RATING, MIN_RATING
from .common import PaginationResponse


class RatingCreate(BaseModel):
    """Rate (or re-rate) a note."""

    value: StrictInt = Field(ge=MIN_RATING, le=MAX_RATING, description="Stars, 1 to 5")
    comment: Optional[str] = Field(
        default=None, max_length=MAX_COMMENT_LENGTH, description="Optional comment"
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"value": 4, "comment": "Clear and useful"}}
    )


class RatingResponse(BaseModel):
    """A single rating."""

    id: uuid.UUID
    note_id: uuid.UUID
    user_id: uuid.UUID
    value: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AggregateResponse(BaseModel):
    """Cached rating aggregate of a note."""

    note_id: uuid.UUID
    average_rating: float = Field(description="Mean rating, one decimal, 0 when unrated")
    rating_count: int


class RatingResult(BaseModel):
    """Outcome of a rate call: the stored rating and the refreshed aggregate."""

    rating: RatingResponse
    aggregate: AggregateResponse


class RatingListResponse(PaginationResponse[RatingResponse]):
    """Paginated rating list response."""

    pass


class RatingUpdate(BaseModel):
    """Change an existing rating. Omitted fields keep their stored value."""

    value: Optional[StrictInt] = Field(
        default=None, ge=MIN_RATING, le=MAX_RATING, description="Stars, 1 to 5"
    )
    comment: Optional[str] = Field(
        default=None, max_length=MAX_COMMENT_LENGTH, description="Send null to clear"
    )

    model_config = ConfigDict(json_schema_extra={"example": {"value": 5}})
