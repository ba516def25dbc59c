"""
Route Pydantic schemas.

Geometries are GeoJSON objects; ``shape`` may also be sent as a GeoJSON string.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from backend.app.schemas.schedule import ScheduleResponse


class RouteCreate(BaseModel):
    """
    Schema for creating a route.

    Exactly one of ``shape`` and ``street_ids`` must be supplied.
    """
    name: str = Field(..., min_length=1, max_length=255)
    profile_id: str
    color_hex: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    shape: Optional[Union[Dict[str, Any], str]] = Field(None, description="GeoJSON LineString or MultiLineString")
    street_ids: Optional[List[str]] = Field(None, description="Ordered street ids")


class RouteStreetResponse(BaseModel):
    """A street as attached to a route."""
    street_id: str
    name: str
    order_index: int
    geometry: Dict[str, Any]


class RouteSummaryResponse(BaseModel):
    """Route without geometry, for listings."""
    id: str
    profile_id: str
    name: str
    color_hex: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class RouteResponse(RouteSummaryResponse):
    """Route with its geometry."""
    geometry: Dict[str, Any]


class RouteDetailResponse(RouteResponse):
    """Route with geometry, ordered streets and schedules."""
    streets: List[RouteStreetResponse] = []
    schedules: List[ScheduleResponse] = []


class RouteListResponse(BaseModel):
    data: List[RouteSummaryResponse]
