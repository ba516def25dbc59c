"""
Profile Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime


class ProfileCreate(BaseModel):
    """Schema for creating a profile (admin action)."""
    name: str = Field(..., min_length=1, max_length=255, description="Display name of the profile")


class ProfileResponse(BaseModel):
    """Schema for profile response."""
    id: str
    name: str
    created_at: datetime

    class Config:
        from_attributes = True
