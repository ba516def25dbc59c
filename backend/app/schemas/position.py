"""
Position Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict


class PositionRecord(BaseModel):
    """Schema for recording a GPS sample."""
    profile_id: str
    lat: float = Field(..., description="Latitude in degrees, -90..90", examples=[3.42158])
    lon: float = Field(..., description="Longitude in degrees, -180..180", examples=[-76.5205])


class PositionResponse(BaseModel):
    """GPS sample with a GeoJSON Point geometry."""
    id: str
    run_id: str
    profile_id: str
    captured_at: datetime
    geometry: Dict[str, Any]

    class Config:
        from_attributes = True
