"""
Route assembly service.

A route geometry comes either from a caller-supplied shape or from the union
of an ordered list of streets. Route and street associations are written in
one transaction.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.core.exceptions import InvalidInputError
from backend.app.core.guards import ownership_guard
from backend.app.db.session import commit_or_rollback
from backend.app.models.profile import Profile
from backend.app.models.route import Route, RouteStreet
from backend.app.models.schedule import Schedule
from backend.app.models.street import Street
from backend.app.services.audit import record_event, AuditAction
from backend.app.services.geometry import (
    GeometryError, GeoJSON, parse_geojson, require_linear, get_geometry_engine
)
from backend.app.services.lookups import require_reference, require_resource

logger = logging.getLogger(__name__)


@dataclass
class RouteStreetEntry:
    """A street attached to a route, at its position in the route."""
    street: Street
    order_index: int


@dataclass
class RouteDetail:
    """A route with its ordered streets and schedules."""
    route: Route
    streets: List[RouteStreetEntry] = field(default_factory=list)
    schedules: List[Schedule] = field(default_factory=list)


def _validate_shape(shape: Union[str, GeoJSON]) -> GeoJSON:
    """Check the shape parses as a linear geometry and return it as given."""
    try:
        require_linear(parse_geojson(shape))
    except GeometryError as exc:
        raise InvalidInputError(
            message=f"Invalid shape: {exc}",
            details={"field": "shape"}
        ) from exc

    if isinstance(shape, str):
        return json.loads(shape)
    return shape


async def _load_streets(db: AsyncSession, street_ids: List[str]) -> dict:
    result = await db.execute(select(Street).where(Street.id.in_(set(street_ids))))
    streets = {street.id: street for street in result.scalars().all()}

    missing = [street_id for street_id in street_ids if street_id not in streets]
    if missing:
        raise InvalidInputError(
            message="The selected street_ids are invalid",
            details={"field": "street_ids", "missing": sorted(set(missing))}
        )
    return streets


async def create_route(
    db: AsyncSession,
    name: str,
    profile_id: str,
    shape: Optional[Union[str, GeoJSON]] = None,
    street_ids: Optional[List[str]] = None,
    color_hex: Optional[str] = None,
    geometry_engine: Any = None
) -> RouteDetail:
    """
    Create a route from a shape or from streets.

    Exactly one of ``shape`` and ``street_ids`` must be given. In street mode the
    association rows keep the caller's order, duplicates included.

    Returns:
        RouteDetail with the resolved geometry and, in street mode, the streets
    """
    if (shape is None) == (street_ids is None):
        raise InvalidInputError(
            message="Provide exactly one of shape or street_ids",
            details={"fields": ["shape", "street_ids"]}
        )

    await require_reference(db, Profile, profile_id, "profile_id")

    entries: List[RouteStreetEntry] = []

    if shape is not None:
        geometry = _validate_shape(shape)
    else:
        if not street_ids:
            raise InvalidInputError(
                message="street_ids must contain at least one street",
                details={"field": "street_ids"}
            )

        streets = await _load_streets(db, street_ids)
        engine = geometry_engine or get_geometry_engine()
        try:
            geometry = await engine.union(db, [streets[street_id].geometry for street_id in street_ids])
        except GeometryError:
            geometry = None

        if geometry is None:
            raise InvalidInputError(
                message="Could not derive a valid geometry from the selected streets",
                details={"field": "street_ids"}
            )
        entries = [
            RouteStreetEntry(street=streets[street_id], order_index=index)
            for index, street_id in enumerate(street_ids)
        ]

    route = Route(
        profile_id=profile_id,
        name=name,
        color_hex=color_hex,
        geometry=geometry
    )
    db.add(route)
    await db.flush()

    for entry in entries:
        db.add(RouteStreet(
            route_id=route.id,
            street_id=entry.street.id,
            order_index=entry.order_index
        ))

    record_event(
        db,
        action=AuditAction.ROUTE_CREATED,
        actor_profile_id=profile_id,
        entity_type="route",
        entity_id=route.id,
        metadata={"mode": "shape" if shape is not None else "streets", "streets": len(entries)}
    )
    await commit_or_rollback(db, "create route")

    logger.info("Route %s created for profile %s (%d streets)", route.id, profile_id, len(entries))
    return RouteDetail(route=route, streets=entries)


async def get_route_detail(db: AsyncSession, route_id: str, profile_id: str) -> RouteDetail:
    """
    Load a route with its ordered streets and schedules.

    Validates:
    - Route exists (404)
    - Profile owns the route (403)
    """
    route = await require_resource(db, Route, route_id, "Route")
    ownership_guard.enforce(route, profile_id, "route")

    streets_result = await db.execute(
        select(Street, RouteStreet.order_index)
        .join(RouteStreet, RouteStreet.street_id == Street.id)
        .where(RouteStreet.route_id == route_id)
        .order_by(RouteStreet.order_index, RouteStreet.id)
    )
    entries = [
        RouteStreetEntry(street=street, order_index=order_index)
        for street, order_index in streets_result.all()
    ]

    schedules_result = await db.execute(
        select(Schedule).where(Schedule.route_id == route_id)
        .order_by(Schedule.day_of_week, Schedule.start_time)
    )

    return RouteDetail(route=route, streets=entries, schedules=list(schedules_result.scalars().all()))


async def list_routes(db: AsyncSession, profile_id: str) -> list[Route]:
    """Routes owned by a profile."""
    await require_reference(db, Profile, profile_id, "profile_id")

    result = await db.execute(
        select(Route).where(Route.profile_id == profile_id).order_by(Route.created_at.desc())
    )
    return list(result.scalars().all())


async def list_all_routes(db: AsyncSession) -> list[Route]:
    result = await db.execute(select(Route).order_by(Route.name))
    return list(result.scalars().all())
