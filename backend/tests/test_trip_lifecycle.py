"""
Run lifecycle tests.

Start and finalize runs, the single-active-run rule per vehicle, and the
run listings.
"""

import pytest
from datetime import timedelta
from sqlalchemy import select

from backend.app.core.exceptions import (
    ConflictError, ForbiddenError, InvalidInputError, ResourceNotFoundError
)
from backend.app.models.audit_log import AuditLog
from backend.app.models.run import Run
from backend.app.models.run_enums import RunStatus, can_transition
from backend.app.models.vehicle import Vehicle
from backend.app.services.audit import AuditAction
from backend.app.services.trip_lifecycle import (
    start_run, finalize_run, get_run, list_runs_by_profile, list_runs_by_route
)
from backend.tests.support import T0, persist


# Service layer

@pytest.mark.asyncio
async def test_start_run_is_in_progress(db_session, clock, profile, vehicle, route):
    run = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)

    assert run.id is not None
    assert run.status == RunStatus.IN_PROGRESS
    assert run.started_at == T0
    assert run.ended_at is None
    assert run.profile_id == profile.id


@pytest.mark.asyncio
async def test_start_run_records_audit_event(db_session, clock, profile, vehicle, route):
    run = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)

    result = await db_session.execute(
        select(AuditLog).where(AuditLog.entity_id == run.id)
    )
    entries = result.scalars().all()
    assert [entry.action for entry in entries] == [AuditAction.RUN_STARTED]
    assert entries[0].actor_profile_id == profile.id


@pytest.mark.asyncio
async def test_start_run_rejects_busy_vehicle(db_session, clock, profile, vehicle, route):
    await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)

    with pytest.raises(ConflictError) as exc_info:
        await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)

    assert exc_info.value.status_code == 409
    assert exc_info.value.error_code == "ERR_CONFLICT"


@pytest.mark.asyncio
async def test_busy_vehicle_conflicts_for_any_profile(
    db_session, clock, profile, other_profile, vehicle, route, other_route
):
    """A second profile cannot start a run on a vehicle already out on a run."""
    await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)

    with pytest.raises(ConflictError):
        await start_run(db_session, other_route.id, vehicle.id, other_profile.id, clock=clock)

    result = await db_session.execute(select(Run).where(Run.vehicle_id == vehicle.id))
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_vehicle_can_start_again_after_finalize(db_session, clock, profile, vehicle, route):
    first = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)
    clock.advance(hours=1)
    await finalize_run(db_session, first.id, profile.id, clock=clock)
    clock.advance(minutes=5)

    second = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)

    assert second.id != first.id
    assert second.status == RunStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_different_vehicles_run_in_parallel(db_session, clock, profile, vehicle, route):
    spare = await persist(Vehicle(profile_id=profile.id, plate="XYZ-987"))

    first = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)
    second = await start_run(db_session, route.id, spare.id, profile.id, clock=clock)

    assert first.status == second.status == RunStatus.IN_PROGRESS


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["route_id", "vehicle_id", "profile_id"])
async def test_start_run_unknown_reference(db_session, clock, profile, vehicle, route, missing):
    ids = {"route_id": route.id, "vehicle_id": vehicle.id, "profile_id": profile.id}
    ids[missing] = "does-not-exist"

    with pytest.raises(InvalidInputError) as exc_info:
        await start_run(db_session, clock=clock, **ids)

    assert exc_info.value.details["field"] == missing
    result = await db_session.execute(select(Run))
    assert result.scalars().all() == []


@pytest.mark.asyncio
async def test_finalize_run_sets_end_time(db_session, clock, profile, vehicle, route):
    run = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)
    clock.advance(minutes=42)

    done = await finalize_run(db_session, run.id, profile.id, clock=clock)

    assert done.status == RunStatus.COMPLETED
    assert done.ended_at == T0 + timedelta(minutes=42)
    assert done.ended_at >= done.started_at


@pytest.mark.asyncio
async def test_finalize_run_twice_conflicts_and_keeps_end_time(
    db_session, clock, profile, vehicle, route
):
    run = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)
    clock.advance(minutes=10)
    await finalize_run(db_session, run.id, profile.id, clock=clock)
    first_end = run.ended_at

    clock.advance(minutes=10)
    with pytest.raises(ConflictError):
        await finalize_run(db_session, run.id, profile.id, clock=clock)

    assert run.ended_at == first_end


@pytest.mark.asyncio
async def test_finalize_run_by_other_profile_forbidden(
    db_session, clock, profile, other_profile, vehicle, route
):
    run = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)

    with pytest.raises(ForbiddenError):
        await finalize_run(db_session, run.id, other_profile.id, clock=clock)

    assert run.status == RunStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_finalize_unknown_run(db_session, clock, profile):
    with pytest.raises(ResourceNotFoundError):
        await finalize_run(db_session, "missing-run", profile.id, clock=clock)


@pytest.mark.asyncio
async def test_get_run(db_session, clock, profile, vehicle, route):
    run = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)

    loaded = await get_run(db_session, run.id)
    assert loaded.id == run.id
    assert loaded.status == RunStatus.IN_PROGRESS

    with pytest.raises(ResourceNotFoundError) as exc_info:
        await get_run(db_session, "missing-run")
    assert exc_info.value.status_code == 404


def test_run_transitions():
    assert can_transition(RunStatus.IN_PROGRESS, RunStatus.COMPLETED)
    assert not can_transition(RunStatus.COMPLETED, RunStatus.IN_PROGRESS)
    assert not can_transition(RunStatus.COMPLETED, RunStatus.COMPLETED)


@pytest.mark.asyncio
async def test_list_runs_by_profile_newest_first(db_session, clock, profile, vehicle, route):
    first = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)
    clock.advance(hours=1)
    await finalize_run(db_session, first.id, profile.id, clock=clock)
    clock.advance(hours=1)
    second = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)

    runs = await list_runs_by_profile(db_session, profile.id)

    assert [run.id for run in runs] == [second.id, first.id]


@pytest.mark.asyncio
async def test_list_runs_by_profile_unknown_profile_is_empty(db_session):
    assert await list_runs_by_profile(db_session, "nobody") == []


@pytest.mark.asyncio
async def test_list_runs_by_route(db_session, clock, profile, vehicle, route, other_route, other_profile):
    spare = await persist(Vehicle(profile_id=other_profile.id, plate="OTR-001"))
    mine = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)
    await start_run(db_session, other_route.id, spare.id, other_profile.id, clock=clock)

    runs = await list_runs_by_route(db_session, route.id)

    assert [run.id for run in runs] == [mine.id]


@pytest.mark.asyncio
async def test_list_runs_by_unknown_route(db_session):
    with pytest.raises(ResourceNotFoundError):
        await list_runs_by_route(db_session, "missing-route")


# API

@pytest.mark.asyncio
async def test_start_and_finalize_over_api(client, clock, profile, vehicle, route):
    response = await client.post("/v1/runs/start", json={
        "route_id": route.id,
        "vehicle_id": vehicle.id,
        "profile_id": profile.id
    })
    assert response.status_code == 201
    run = response.json()
    assert run["status"] == "IN_PROGRESS"
    assert run["ended_at"] is None

    clock.advance(minutes=30)
    response = await client.post(f"/v1/runs/{run['id']}/finalize", json={"profile_id": profile.id})
    assert response.status_code == 200
    assert response.json()["status"] == "COMPLETED"
    assert response.json()["ended_at"] is not None

    response = await client.post(f"/v1/runs/{run['id']}/finalize", json={"profile_id": profile.id})
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_CONFLICT"


@pytest.mark.asyncio
async def test_start_run_busy_vehicle_over_api(client, clock, profile, other_profile, vehicle, route, other_route):
    response = await client.post("/v1/runs/start", json={
        "route_id": route.id, "vehicle_id": vehicle.id, "profile_id": profile.id
    })
    assert response.status_code == 201

    response = await client.post("/v1/runs/start", json={
        "route_id": other_route.id, "vehicle_id": vehicle.id, "profile_id": other_profile.id
    })
    assert response.status_code == 409
    assert response.json()["message"] == "Vehicle already has an active run"


@pytest.mark.asyncio
async def test_start_run_missing_field(client, profile, vehicle):
    response = await client.post("/v1/runs/start", json={
        "vehicle_id": vehicle.id, "profile_id": profile.id
    })
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_start_run_unknown_route_over_api(client, profile, vehicle):
    response = await client.post("/v1/runs/start", json={
        "route_id": "nope", "vehicle_id": vehicle.id, "profile_id": profile.id
    })
    assert response.status_code == 422
    assert response.json()["details"]["field"] == "route_id"


@pytest.mark.asyncio
async def test_finalize_forbidden_over_api(client, clock, profile, other_profile, vehicle, route):
    response = await client.post("/v1/runs/start", json={
        "route_id": route.id, "vehicle_id": vehicle.id, "profile_id": profile.id
    })
    run_id = response.json()["id"]

    response = await client.post(f"/v1/runs/{run_id}/finalize", json={"profile_id": other_profile.id})
    assert response.status_code == 403
    assert response.json()["error_code"] == "ERR_FORBIDDEN"


@pytest.mark.asyncio
async def test_finalize_unknown_run_over_api(client, profile):
    response = await client.post("/v1/runs/missing/finalize", json={"profile_id": profile.id})
    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND"


@pytest.mark.asyncio
async def test_my_runs_and_route_history(client, clock, profile, vehicle, route):
    response = await client.post("/v1/runs/start", json={
        "route_id": route.id, "vehicle_id": vehicle.id, "profile_id": profile.id
    })
    run_id = response.json()["id"]

    response = await client.get("/v1/my-runs", params={"profile_id": profile.id})
    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [run_id]

    response = await client.get(f"/v1/runs/routes/{route.id}")
    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [run_id]

    response = await client.get("/v1/runs/routes/missing")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_audit_trail_for_run(db_session, clock, profile, vehicle, route):
    from backend.app.services.audit import get_audit_trail

    run = await start_run(db_session, route.id, vehicle.id, profile.id, clock=clock)
    await finalize_run(db_session, run.id, profile.id, clock=clock)

    trail = await get_audit_trail(db_session, entity_id=run.id)
    assert {entry.action for entry in trail} == {AuditAction.RUN_STARTED, AuditAction.RUN_COMPLETED}

    completed = await get_audit_trail(db_session, entity_id=run.id, action=AuditAction.RUN_COMPLETED)
    assert len(completed) == 1
    assert completed[0].meta_data == {"vehicle_id": vehicle.id}
