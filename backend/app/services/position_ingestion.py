"""
Position ingestion service.

Validates and timestamps GPS samples before they are stored against a run.
Checks run in a fixed order and the first failure wins; nothing is written
unless every check passes.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.core.clock import SystemClock, system_clock
from backend.app.core.exceptions import InvalidInputError, ForbiddenError
from backend.app.core.guards import ownership_guard
from backend.app.db.session import commit_or_rollback
from backend.app.models.position import Position
from backend.app.models.profile import Profile
from backend.app.models.run_enums import RunStatus
from backend.app.services.geometry import make_point
from backend.app.services.lookups import require_reference
from backend.app.services.trip_lifecycle import get_run

MIN_LATITUDE, MAX_LATITUDE = -90.0, 90.0
MIN_LONGITUDE, MAX_LONGITUDE = -180.0, 180.0


def validate_coordinates(latitude: float, longitude: float):
    """Raise InvalidInputError for coordinates outside WGS84 bounds."""
    errors = {}
    if latitude is None or not MIN_LATITUDE <= latitude <= MAX_LATITUDE:
        errors["latitude"] = f"must be between {MIN_LATITUDE:g} and {MAX_LATITUDE:g}"
    if longitude is None or not MIN_LONGITUDE <= longitude <= MAX_LONGITUDE:
        errors["longitude"] = f"must be between {MIN_LONGITUDE:g} and {MAX_LONGITUDE:g}"

    if errors:
        raise InvalidInputError(message="Coordinates out of range", details=errors)


async def record_position(
    db: AsyncSession,
    run_id: str,
    profile_id: str,
    latitude: float,
    longitude: float,
    clock: SystemClock = system_clock
) -> Position:
    """
    Record a GPS sample for a run.

    Checks, in order:
    1. Coordinates within range (422)
    2. Profile exists (422)
    3. Run exists (404)
    4. Profile owns the run (403)
    5. Run is IN_PROGRESS (403)

    Returns:
        The stored position, geometry as a GeoJSON Point
    """
    validate_coordinates(latitude, longitude)
    await require_reference(db, Profile, profile_id, "profile_id")
    run = await get_run(db, run_id)

    ownership_guard.enforce(run, profile_id, "run")

    if run.status != RunStatus.IN_PROGRESS:
        raise ForbiddenError(
            message="Run must be in progress to record a position",
            details={"run_id": run.id, "status": run.status.value}
        )

    position = Position(
        run_id=run.id,
        profile_id=profile_id,
        captured_at=clock.now(),
        geometry=make_point(longitude, latitude)
    )
    db.add(position)
    await commit_or_rollback(db, "record position")

    return position


async def list_positions(db: AsyncSession, run_id: str, profile_id: str) -> list[Position]:
    """GPS trail of a run, oldest sample first."""
    run = await get_run(db, run_id)
    ownership_guard.enforce(run, profile_id, "run")

    result = await db.execute(
        select(Position).where(Position.run_id == run_id).order_by(Position.captured_at.asc())
    )
    return list(result.scalars().all())
