"""
Schedule Pydantic schemas.
"""

from pydantic import BaseModel, Field, model_validator
from datetime import datetime, time
from typing import Optional


class ScheduleCreate(BaseModel):
    """Schema for adding a weekly slot to a route."""
    profile_id: str = Field(..., description="Profile that owns the route")
    day_of_week: int = Field(..., ge=1, le=7, description="1 = Monday ... 7 = Sunday")
    start_time: time
    end_time: Optional[time] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ScheduleUpdate(BaseModel):
    """Schema for updating a schedule; times are re-checked against the stored row."""
    day_of_week: Optional[int] = Field(None, ge=1, le=7)
    start_time: Optional[time] = None
    end_time: Optional[time] = None


class ScheduleResponse(BaseModel):
    id: str
    route_id: str
    day_of_week: int
    start_time: time
    end_time: Optional[time]
    created_at: datetime

    class Config:
        from_attributes = True
