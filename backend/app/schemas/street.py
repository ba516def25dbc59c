"""
Street Pydantic schemas.
"""

from pydantic import BaseModel
from typing import Any, Dict, List


class StreetResponse(BaseModel):
    """Street with its GeoJSON geometry."""
    id: str
    name: str
    geometry: Dict[str, Any]

    class Config:
        from_attributes = True


class StreetListResponse(BaseModel):
    data: List[StreetResponse]
