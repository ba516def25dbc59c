"""
Vehicle API Endpoints.

Vehicles belong to a profile; reads and writes on a single vehicle are
restricted to its owner.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status, Query, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from backend.app.core.exceptions import ConflictError
from backend.app.core.guards import ownership_guard
from backend.app.db.session import get_db, commit_or_rollback
from backend.app.models.profile import Profile
from backend.app.models.run import Run
from backend.app.models.vehicle import Vehicle
from backend.app.schemas.vehicle import (
    VehicleCreate, VehicleUpdate, VehicleResponse, VehicleListResponse
)
from backend.app.services.audit import record_event, AuditAction
from backend.app.services.lookups import require_reference, require_resource

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


async def _ensure_plate_available(db: AsyncSession, plate: str, exclude_id: Optional[str] = None):
    query = select(Vehicle.id).where(Vehicle.plate == plate)
    if exclude_id:
        query = query.where(Vehicle.id != exclude_id)
    result = await db.execute(query)
    if result.first() is not None:
        raise ConflictError(
            message=f"Plate {plate} is already registered",
            details={"field": "plate", "value": plate}
        )


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new vehicle.

    Plates are unique across all profiles (409 on duplicates).
    """
    await require_reference(db, Profile, vehicle_data.profile_id, "profile_id")
    await _ensure_plate_available(db, vehicle_data.plate)

    vehicle = Vehicle(
        profile_id=vehicle_data.profile_id,
        plate=vehicle_data.plate,
        make=vehicle_data.make,
        model=vehicle_data.model,
        is_active=vehicle_data.is_active
    )
    db.add(vehicle)
    await db.flush()

    record_event(
        db,
        action=AuditAction.VEHICLE_CREATED,
        actor_profile_id=vehicle.profile_id,
        entity_type="vehicle",
        entity_id=vehicle.id,
        metadata={"plate": vehicle.plate}
    )
    await commit_or_rollback(db, "create vehicle")

    return VehicleResponse.model_validate(vehicle)


@router.get("", response_model=VehicleListResponse)
async def list_vehicles(
    profile_id: Optional[str] = Query(None, description="Only vehicles of this profile"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(15, ge=1, le=100, description="Items per page"),
    db: AsyncSession = Depends(get_db)
):
    """List vehicles, paginated, optionally filtered by owner."""
    count_query = select(func.count(Vehicle.id))
    query = select(Vehicle)
    if profile_id:
        count_query = count_query.where(Vehicle.profile_id == profile_id)
        query = query.where(Vehicle.profile_id == profile_id)

    total_result = await db.execute(count_query)
    total = total_result.scalar()

    offset = (page - 1) * page_size
    result = await db.execute(
        query.order_by(Vehicle.plate).offset(offset).limit(page_size)
    )
    vehicles = result.scalars().all()

    return VehicleListResponse(
        vehicles=[VehicleResponse.model_validate(vehicle) for vehicle in vehicles],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: str = Path(..., description="Vehicle ID"),
    profile_id: str = Query(..., description="Requesting profile"),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await require_resource(db, Vehicle, vehicle_id, "Vehicle")
    ownership_guard.enforce(vehicle, profile_id, "vehicle")
    return VehicleResponse.model_validate(vehicle)


@router.patch("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_data: VehicleUpdate,
    vehicle_id: str = Path(..., description="Vehicle ID"),
    profile_id: str = Query(..., description="Requesting profile"),
    db: AsyncSession = Depends(get_db)
):
    """Update vehicle details (owner only)."""
    vehicle = await require_resource(db, Vehicle, vehicle_id, "Vehicle")
    ownership_guard.enforce(vehicle, profile_id, "vehicle")

    update_data = vehicle_data.model_dump(exclude_unset=True)
    if "plate" in update_data and update_data["plate"] != vehicle.plate:
        await _ensure_plate_available(db, update_data["plate"], exclude_id=vehicle.id)

    for field, value in update_data.items():
        setattr(vehicle, field, value)

    record_event(
        db,
        action=AuditAction.VEHICLE_UPDATED,
        actor_profile_id=profile_id,
        entity_type="vehicle",
        entity_id=vehicle.id,
        metadata={"updated_fields": list(update_data.keys())}
    )
    await commit_or_rollback(db, "update vehicle")

    return VehicleResponse.model_validate(vehicle)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: str = Path(..., description="Vehicle ID"),
    profile_id: str = Query(..., description="Requesting profile"),
    db: AsyncSession = Depends(get_db)
):
    """Delete a vehicle (owner only); refused while runs reference it."""
    vehicle = await require_resource(db, Vehicle, vehicle_id, "Vehicle")
    ownership_guard.enforce(vehicle, profile_id, "vehicle")

    runs_result = await db.execute(select(func.count(Run.id)).where(Run.vehicle_id == vehicle_id))
    if runs_result.scalar() > 0:
        raise ConflictError(
            message="Vehicle has recorded runs and cannot be deleted",
            details={"vehicle_id": vehicle_id}
        )

    await db.delete(vehicle)
    record_event(
        db,
        action=AuditAction.VEHICLE_DELETED,
        actor_profile_id=profile_id,
        entity_type="vehicle",
        entity_id=vehicle_id,
        metadata={"plate": vehicle.plate}
    )
    await commit_or_rollback(db, "delete vehicle")

    return Response(status_code=status.HTTP_204_NO_CONTENT)
