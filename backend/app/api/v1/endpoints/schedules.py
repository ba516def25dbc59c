"""
Schedule API Endpoints.

Schedules are nested under routes for listing and creation, and addressed
directly for show/update/delete.
"""

from fastapi import APIRouter, Depends, status, Query, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.core.exceptions import InvalidInputError
from backend.app.core.guards import ownership_guard
from backend.app.db.session import get_db, commit_or_rollback
from backend.app.models.route import Route
from backend.app.models.schedule import Schedule
from backend.app.schemas.schedule import ScheduleCreate, ScheduleUpdate, ScheduleResponse
from backend.app.services.lookups import require_resource

router = APIRouter(tags=["Schedules"])


async def _owned_schedule(db: AsyncSession, schedule_id: str, profile_id: str) -> Schedule:
    schedule = await require_resource(db, Schedule, schedule_id, "Schedule")
    route = await require_resource(db, Route, schedule.route_id, "Route")
    ownership_guard.enforce(route, profile_id, "route")
    return schedule


@router.get("/routes/{route_id}/schedules", response_model=list[ScheduleResponse])
async def list_schedules(
    route_id: str = Path(..., description="Route ID"),
    db: AsyncSession = Depends(get_db)
):
    await require_resource(db, Route, route_id, "Route")

    result = await db.execute(
        select(Schedule).where(Schedule.route_id == route_id)
        .order_by(Schedule.day_of_week, Schedule.start_time)
    )
    return [ScheduleResponse.model_validate(schedule) for schedule in result.scalars().all()]


@router.post(
    "/routes/{route_id}/schedules",
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_schedule(
    schedule_data: ScheduleCreate,
    route_id: str = Path(..., description="Route ID"),
    db: AsyncSession = Depends(get_db)
):
    """Add a weekly slot to a route (route owner only)."""
    route = await require_resource(db, Route, route_id, "Route")
    ownership_guard.enforce(route, schedule_data.profile_id, "route")

    schedule = Schedule(
        route_id=route.id,
        day_of_week=schedule_data.day_of_week,
        start_time=schedule_data.start_time,
        end_time=schedule_data.end_time
    )
    db.add(schedule)
    await commit_or_rollback(db, "create schedule")

    return ScheduleResponse.model_validate(schedule)


@router.get("/schedules/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: str = Path(..., description="Schedule ID"),
    db: AsyncSession = Depends(get_db)
):
    schedule = await require_resource(db, Schedule, schedule_id, "Schedule")
    return ScheduleResponse.model_validate(schedule)


@router.patch("/schedules/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_data: ScheduleUpdate,
    schedule_id: str = Path(..., description="Schedule ID"),
    profile_id: str = Query(..., description="Requesting profile"),
    db: AsyncSession = Depends(get_db)
):
    """Update a schedule (route owner only)."""
    schedule = await _owned_schedule(db, schedule_id, profile_id)

    update_data = schedule_data.model_dump(exclude_unset=True)
    start_time = update_data.get("start_time", schedule.start_time)
    end_time = update_data.get("end_time", schedule.end_time)
    if update_data.get("day_of_week", schedule.day_of_week) is None:
        raise InvalidInputError(message="day_of_week cannot be cleared", details={"field": "day_of_week"})
    if start_time is None:
        raise InvalidInputError(message="start_time cannot be cleared", details={"field": "start_time"})
    if end_time is not None and end_time <= start_time:
        raise InvalidInputError(
            message="end_time must be after start_time",
            details={"field": "end_time"}
        )

    for field, value in update_data.items():
        setattr(schedule, field, value)
    await commit_or_rollback(db, "update schedule")

    return ScheduleResponse.model_validate(schedule)


@router.delete("/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(
    schedule_id: str = Path(..., description="Schedule ID"),
    profile_id: str = Query(..., description="Requesting profile"),
    db: AsyncSession = Depends(get_db)
):
    schedule = await _owned_schedule(db, schedule_id, profile_id)

    await db.delete(schedule)
    await commit_or_rollback(db, "delete schedule")

    return Response(status_code=status.HTTP_204_NO_CONTENT)
