"""
Run lifecycle service.

Runs are created IN_PROGRESS and move once to COMPLETED. A vehicle can have
at most one IN_PROGRESS run; the pre-check below gives a friendly error and
the partial unique index on ``runs`` makes the check-then-insert atomic.
"""

import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from backend.app.core.clock import SystemClock, system_clock
from backend.app.core.exceptions import ConflictError
from backend.app.core.guards import ownership_guard
from backend.app.db.session import commit_or_rollback
from backend.app.models.profile import Profile
from backend.app.models.route import Route
from backend.app.models.run import Run
from backend.app.models.run_enums import RunStatus, can_transition
from backend.app.models.vehicle import Vehicle
from backend.app.services.audit import record_event, AuditAction
from backend.app.services.lookups import require_reference, require_resource

logger = logging.getLogger(__name__)


async def count_vehicle_active_runs(db: AsyncSession, vehicle_id: str) -> int:
    """
    Count how many IN_PROGRESS runs a vehicle has.

    Should be 0 or 1 (the partial unique index allows no more).
    """
    result = await db.execute(
        select(func.count(Run.id)).where(
            Run.vehicle_id == vehicle_id,
            Run.status == RunStatus.IN_PROGRESS
        )
    )
    return result.scalar()


async def start_run(
    db: AsyncSession,
    route_id: str,
    vehicle_id: str,
    profile_id: str,
    clock: SystemClock = system_clock
) -> Run:
    """
    Start a run of a route with a vehicle.

    Validates:
    - Route, vehicle and profile exist (422 otherwise)
    - Vehicle has no other IN_PROGRESS run (409 otherwise)

    Returns:
        The created run, IN_PROGRESS, started_at = clock.now()
    """
    await require_reference(db, Profile, profile_id, "profile_id")
    await require_reference(db, Route, route_id, "route_id")
    await require_reference(db, Vehicle, vehicle_id, "vehicle_id")

    if await count_vehicle_active_runs(db, vehicle_id) > 0:
        raise ConflictError(
            message="Vehicle already has an active run",
            details={"vehicle_id": vehicle_id}
        )

    run = Run(
        route_id=route_id,
        vehicle_id=vehicle_id,
        profile_id=profile_id,
        status=RunStatus.IN_PROGRESS,
        started_at=clock.now(),
        ended_at=None
    )
    db.add(run)

    try:
        await db.flush()  # Will raise IntegrityError if another run became active meanwhile
    except IntegrityError:
        await db.rollback()
        logger.warning("Concurrent start rejected for vehicle %s", vehicle_id)
        raise ConflictError(
            message="Vehicle already has an active run",
            details={"vehicle_id": vehicle_id}
        )

    record_event(
        db,
        action=AuditAction.RUN_STARTED,
        actor_profile_id=profile_id,
        entity_type="run",
        entity_id=run.id,
        metadata={"route_id": route_id, "vehicle_id": vehicle_id}
    )
    await commit_or_rollback(db, "start run")

    logger.info("Run %s started (vehicle=%s, route=%s)", run.id, vehicle_id, route_id)
    return run


async def finalize_run(
    db: AsyncSession,
    run_id: str,
    profile_id: str,
    clock: SystemClock = system_clock
) -> Run:
    """
    Complete a run.

    Validates:
    - Run exists (404)
    - Profile owns the run (403)
    - Run is IN_PROGRESS (409; a completed run keeps its ended_at)
    """
    run = await get_run(db, run_id)

    ownership_guard.enforce(run, profile_id, "run")

    if not can_transition(run.status, RunStatus.COMPLETED):
        raise ConflictError(
            message=f"Run is already {run.status.value}",
            details={"run_id": run.id, "status": run.status.value}
        )

    run.status = RunStatus.COMPLETED
    run.ended_at = clock.now()

    record_event(
        db,
        action=AuditAction.RUN_COMPLETED,
        actor_profile_id=profile_id,
        entity_type="run",
        entity_id=run.id,
        metadata={"vehicle_id": run.vehicle_id}
    )
    await commit_or_rollback(db, "finalize run")

    logger.info("Run %s completed", run.id)
    return run


async def get_run(db: AsyncSession, run_id: str) -> Run:
    """Load a run by id; 404 when it does not exist."""
    return await require_resource(db, Run, run_id, "Run")


async def list_runs_by_profile(db: AsyncSession, profile_id: str) -> list[Run]:
    """Runs owned by a profile, most recent start first."""
    result = await db.execute(
        select(Run).where(Run.profile_id == profile_id).order_by(Run.started_at.desc())
    )
    return list(result.scalars().all())


async def list_runs_by_route(db: AsyncSession, route_id: str) -> list[Run]:
    """Run history of a route, most recent start first."""
    await require_resource(db, Route, route_id, "Route")

    result = await db.execute(
        select(Run).where(Run.route_id == route_id).order_by(Run.started_at.desc())
    )
    return list(result.scalars().all())
