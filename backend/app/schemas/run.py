"""
Run Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from backend.app.models.run_enums import RunStatus


class RunStart(BaseModel):
    """Schema for starting a run."""
    route_id: str = Field(..., description="Route being driven")
    vehicle_id: str = Field(..., description="Vehicle driving it")
    profile_id: str = Field(..., description="Profile that owns the run")


class RunFinalize(BaseModel):
    """Schema for finalizing a run."""
    profile_id: str


class RunResponse(BaseModel):
    """Run response."""
    id: str
    route_id: str
    vehicle_id: str
    profile_id: str
    status: RunStatus
    started_at: datetime
    ended_at: Optional[datetime]

    class Config:
        from_attributes = True
