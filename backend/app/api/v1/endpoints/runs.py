"""
Run Execution API Endpoints.

Start and finalize runs, and record their GPS trail.
"""

from fastapi import APIRouter, Depends, status, Query, Path, Body
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.clock import get_clock
from backend.app.db.session import get_db
from backend.app.schemas.position import PositionRecord, PositionResponse
from backend.app.schemas.run import RunStart, RunFinalize, RunResponse
from backend.app.services.position_ingestion import record_position, list_positions
from backend.app.services.trip_lifecycle import (
    start_run, finalize_run, list_runs_by_profile, list_runs_by_route
)

router = APIRouter(tags=["Runs"])


@router.post("/runs/start", response_model=RunResponse, status_code=status.HTTP_201_CREATED)
async def start(
    run_data: RunStart,
    db: AsyncSession = Depends(get_db),
    clock=Depends(get_clock)
):
    """
    Start a run.

    Validates:
    - Route, vehicle and profile exist
    - No other IN_PROGRESS run for the vehicle (409)
    """
    run = await start_run(
        db,
        route_id=run_data.route_id,
        vehicle_id=run_data.vehicle_id,
        profile_id=run_data.profile_id,
        clock=clock
    )
    return RunResponse.model_validate(run)


@router.post("/runs/{run_id}/finalize", response_model=RunResponse)
async def finalize(
    run_id: str = Path(..., description="Run ID"),
    run_data: RunFinalize = Body(...),
    db: AsyncSession = Depends(get_db),
    clock=Depends(get_clock)
):
    """
    Complete a run (owner only).

    Finalizing an already completed run returns 409.
    """
    run = await finalize_run(db, run_id=run_id, profile_id=run_data.profile_id, clock=clock)
    return RunResponse.model_validate(run)


@router.get("/my-runs", response_model=list[RunResponse])
async def my_runs(
    profile_id: str = Query(..., description="Owning profile"),
    db: AsyncSession = Depends(get_db)
):
    """Runs of a profile, most recent first."""
    runs = await list_runs_by_profile(db, profile_id)
    return [RunResponse.model_validate(run) for run in runs]


@router.get("/runs/routes/{route_id}", response_model=list[RunResponse])
async def route_history(
    route_id: str = Path(..., description="Route ID"),
    db: AsyncSession = Depends(get_db)
):
    """Run history of a route, most recent first."""
    runs = await list_runs_by_route(db, route_id)
    return [RunResponse.model_validate(run) for run in runs]


@router.post(
    "/runs/{run_id}/positions",
    response_model=PositionResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_position(
    run_id: str = Path(..., description="Run ID"),
    position: PositionRecord = Body(...),
    db: AsyncSession = Depends(get_db),
    clock=Depends(get_clock)
):
    """
    Record a GPS sample for an IN_PROGRESS run (owner only).

    Creates breadcrumb trail for live tracking.
    """
    stored = await record_position(
        db,
        run_id=run_id,
        profile_id=position.profile_id,
        latitude=position.lat,
        longitude=position.lon,
        clock=clock
    )
    return PositionResponse.model_validate(stored)


@router.get("/runs/{run_id}/positions", response_model=list[PositionResponse])
async def get_positions(
    run_id: str = Path(..., description="Run ID"),
    profile_id: str = Query(..., description="Requesting profile"),
    db: AsyncSession = Depends(get_db)
):
    """GPS trail of a run, oldest first, as GeoJSON points."""
    positions = await list_positions(db, run_id, profile_id)
    return [PositionResponse.model_validate(item) for item in positions]
