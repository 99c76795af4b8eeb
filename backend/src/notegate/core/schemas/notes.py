"""
Note schemas.

Request bodies only carry client-editable fields. The rating aggregate,
view count and share token are never accepted from input.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import PaginationResponse


class NoteCreate(BaseModel):
    """Note creation request schema."""

    title: str = Field(min_length=1, max_length=200, description="Note title")
    content: str = Field(min_length=1, description="Note content")
    is_public: bool = Field(default=False, description="Whether note is publicly visible")

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "title": "Meeting Notes - Q4 Planning",
                "content": "## Agenda\n\n1. Review Q3 performance\n2. Set Q4 objectives",
                "is_public": False,
            }
        },
    )

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v):
        if len(v.strip()) == 0:
            raise ValueError("Must not be blank")
        return v


class NoteUpdate(BaseModel):
    """Note update request schema. Omitted fields stay unchanged."""

    title: Optional[str] = Field(
        default=None, min_length=1, max_length=200, description="Note title"
    )
    content: Optional[str] = Field(default=None, min_length=1, description="Note content")
    is_public: Optional[bool] = Field(default=None, description="Whether note is publicly visible")

    model_config = ConfigDict(extra="ignore")

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v):
        if v is not None and len(v.strip()) == 0:
            raise ValueError("Must not be blank")
        return v


class OwnerChangeRequest(BaseModel):
    """Admin request to hand a note to another user."""

    new_owner_id: uuid.UUID = Field(description="User who becomes the owner")


class AttachmentResponse(BaseModel):
    """Attachment metadata."""

    id: uuid.UUID
    filename: str
    original_name: str
    mimetype: str
    size: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ShareInfo(BaseModel):
    """Active share link, only shown to callers who can write the note."""

    token: str = Field(description="Share token")
    url: str = Field(description="Share URL")
    expires_at: datetime = Field(description="Expiry timestamp")


class NoteResponse(BaseModel):
    """Note response schema."""

    id: uuid.UUID = Field(description="Note unique identifier")
    title: str = Field(description="Note title")
    content: str = Field(description="Note content")
    is_public: bool = Field(description="Whether note is publicly visible")

    owner_id: uuid.UUID = Field(description="Note owner ID")
    owner_username: Optional[str] = Field(default=None, description="Note owner username")
    owner_display_name: Optional[str] = Field(default=None, description="Note owner display name")

    # caller-specific
    is_owned: bool = Field(default=False, description="Whether current user owns this note")
    can_edit: bool = Field(default=False, description="Whether current user can edit this note")
    can_rate: bool = Field(default=False, description="Whether current user can rate this note")

    view_count: int = Field(default=0, description="Number of views")
    average_rating: float = Field(default=0.0, description="Mean rating, one decimal")
    rating_count: int = Field(default=0, description="Number of ratings")

    attachments: List[AttachmentResponse] = Field(default_factory=list)
    share: Optional[ShareInfo] = Field(default=None, description="Active share link")

    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "title": "Meeting Notes - Q4 Planning",
                "content": "## Agenda\n\n1. Review Q3 performance\n2. Set Q4 objectives",
                "is_public": True,
                "owner_id": "456e7890-e89b-12d3-a456-426614174000",
                "owner_username": "john_doe",
                "is_owned": False,
                "can_edit": False,
                "can_rate": True,
                "view_count": 15,
                "average_rating": 4.5,
                "rating_count": 2,
                "attachments": [],
                "share": None,
                "created_at": "2025-09-13T10:30:00Z",
                "updated_at": "2025-09-13T11:00:00Z",
            }
        },
    )


class NoteListItem(BaseModel):
    """Simplified note schema for list views."""

    id: uuid.UUID = Field(description="Note unique identifier")
    title: str = Field(description="Note title")
    content_preview: str = Field(description="Content preview")
    is_public: bool = Field(description="Whether note is publicly visible")
    owner_id: uuid.UUID = Field(description="Note owner ID")
    is_owned: bool = Field(default=False, description="Whether current user owns this note")
    view_count: int = Field(default=0)
    average_rating: float = Field(default=0.0)
    rating_count: int = Field(default=0)
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


class NoteListResponse(PaginationResponse[NoteListItem]):
    """Paginated note list response."""

    pass


class NoteSearchResponse(PaginationResponse[NoteListItem]):
    """Search hits, paginated, with the query that produced them."""

    query: str = ""
