"""
Vehicle Pydantic schemas.

Defines request and response models for vehicle management.
"""

from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional, List


class VehicleCreate(BaseModel):
    """Schema for registering a new vehicle."""
    profile_id: str = Field(..., description="Owning profile")
    plate: str = Field(..., min_length=1, max_length=10, description="Unique plate number")
    make: Optional[str] = Field(None, max_length=255, description="Manufacturer (e.g., Chevrolet)")
    model: Optional[str] = Field(None, max_length=255, description="Model name or year")
    is_active: bool = True


class VehicleUpdate(BaseModel):
    """Schema for updating an existing vehicle."""
    plate: Optional[str] = Field(None, min_length=1, max_length=10)
    make: Optional[str] = Field(None, max_length=255)
    model: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def check_not_null(self):
        for name in ("plate", "is_active"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""
    id: str
    profile_id: str
    plate: str
    make: Optional[str]
    model: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VehicleListResponse(BaseModel):
    """Schema for paginated vehicle list."""
    vehicles: List[VehicleResponse]
    total: int
    page: int
    page_size: int
