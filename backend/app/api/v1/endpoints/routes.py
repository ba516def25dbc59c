"""
Route API Endpoints.

Routes are created from a GeoJSON shape or assembled from ordered streets.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.schemas.route import (
    RouteCreate, RouteResponse, RouteDetailResponse, RouteListResponse,
    RouteSummaryResponse, RouteStreetResponse
)
from backend.app.schemas.schedule import ScheduleResponse
from backend.app.services.route_assembly import (
    RouteDetail, create_route as assemble_route, get_route_detail, list_routes as load_routes,
    list_all_routes
)

router = APIRouter(prefix="/routes", tags=["Routes"])


def _detail_response(detail: RouteDetail) -> RouteDetailResponse:
    route = detail.route
    return RouteDetailResponse(
        id=route.id,
        profile_id=route.profile_id,
        name=route.name,
        color_hex=route.color_hex,
        created_at=route.created_at,
        geometry=route.geometry,
        streets=[
            RouteStreetResponse(
                street_id=entry.street.id,
                name=entry.street.name,
                order_index=entry.order_index,
                geometry=entry.street.geometry
            )
            for entry in detail.streets
        ],
        schedules=[ScheduleResponse.model_validate(schedule) for schedule in detail.schedules]
    )


@router.post("", response_model=RouteDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_route(
    route_data: RouteCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a route.

    Supply exactly one of:
    - shape: GeoJSON LineString/MultiLineString, stored as given
    - street_ids: ordered street ids, geometry is their union
    """
    detail = await assemble_route(
        db,
        name=route_data.name,
        profile_id=route_data.profile_id,
        shape=route_data.shape,
        street_ids=route_data.street_ids,
        color_hex=route_data.color_hex
    )
    return _detail_response(detail)


@router.get("", response_model=RouteListResponse)
async def list_routes(
    profile_id: str = Query(..., description="Owning profile"),
    db: AsyncSession = Depends(get_db)
):
    """List the routes of a profile (without geometry)."""
    routes = await load_routes(db, profile_id)
    return RouteListResponse(data=[RouteSummaryResponse.model_validate(route) for route in routes])


@router.get("/all", response_model=list[RouteResponse])
async def get_all_routes(db: AsyncSession = Depends(get_db)):
    """List every route with its geometry."""
    routes = await list_all_routes(db)
    return [RouteResponse.model_validate(route) for route in routes]


@router.get("/{route_id}", response_model=RouteDetailResponse)
async def get_route(
    route_id: str = Path(..., description="Route ID"),
    profile_id: str = Query(..., description="Requesting profile"),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a route with geometry, streets (in route order) and schedules.

    Ownership is enforced - can only view own routes.
    """
    detail = await get_route_detail(db, route_id, profile_id)
    return _detail_response(detail)
