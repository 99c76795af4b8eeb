"""
Identity schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    """Resolved caller identity."""

    id: uuid.UUID = Field(description="User unique identifier")
    username: str = Field(description="Username")
    full_name: Optional[str] = Field(default=None, description="Full name")
    is_active: bool = Field(description="Whether user account is active")
    is_admin: bool = Field(default=False, description="Whether user is an administrator")
    created_at: datetime = Field(description="Account creation timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "username": "john_doe",
                "full_name": "John Doe",
                "is_active": True,
                "is_admin": False,
                "created_at": "2025-09-13T10:30:00Z",
            }
        },
    )
