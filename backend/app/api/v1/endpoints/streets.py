"""
Street API Endpoints.

Read-only: streets are loaded with the import command, never through the API.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.redis_client import get_redis
from backend.app.db.session import get_db
from backend.app.models.street import Street
from backend.app.schemas.street import StreetResponse, StreetListResponse
from backend.app.services.lookups import require_resource
from backend.app.services.street_catalog import (
    list_streets as load_streets, get_cached_street_list, cache_street_list
)

router = APIRouter(prefix="/streets", tags=["Streets"])


@router.get("", response_model=StreetListResponse)
async def list_streets(
    db: AsyncSession = Depends(get_db),
    redis_client=Depends(get_redis)
):
    """
    List all streets with GeoJSON geometry.

    Served from the Redis cache when populated.
    """
    cached = await get_cached_street_list(redis_client)
    if cached is not None:
        return StreetListResponse(data=cached)

    streets = [
        StreetResponse.model_validate(street).model_dump()
        for street in await load_streets(db)
    ]
    await cache_street_list(redis_client, streets)

    return StreetListResponse(data=streets)


@router.get("/{street_id}", response_model=StreetResponse)
async def get_street(
    street_id: str = Path(..., description="Street ID"),
    db: AsyncSession = Depends(get_db)
):
    street = await require_resource(db, Street, street_id, "Street")
    return StreetResponse.model_validate(street)
