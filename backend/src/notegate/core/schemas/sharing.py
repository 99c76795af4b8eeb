"""
Share link schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class ShareLinkRequest(BaseModel):
    """Create (or regenerate) the share link of a note."""

    ttl_days: Optional[StrictInt] = Field(
        default=None, gt=0, description="Link lifetime in days, server default when omitted"
    )

    model_config = ConfigDict(json_schema_extra={"example": {"ttl_days": 7}})


class ShareLinkResponse(BaseModel):
    """Freshly issued share link. The token is only ever returned here."""

    note_id: uuid.UUID = Field(description="Shared note ID")
    token: str = Field(description="Bearer share token")
    url: str = Field(description="Link that opens the note with the token")
    expires_at: datetime = Field(description="When the link stops working")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "note_id": "123e4567-e89b-12d3-a456-426614174000",
                "token": "q3Jx...",
                "url": "http://localhost:8000/api/notes/123e4567-e89b-12d3-a456-426614174000?token=q3Jx...",
                "expires_at": "2025-09-20T10:30:00Z",
            }
        }
    )
