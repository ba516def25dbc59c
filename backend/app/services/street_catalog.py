"""
Street catalog service.

Streets are imported in bulk from a GeoJSON FeatureCollection and then only
read. The serialized street list is cached in Redis until the next import.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from redis.exceptions import RedisError
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import ConflictError
from backend.app.db.session import commit_or_rollback
from backend.app.models.route import RouteStreet
from backend.app.models.street import Street
from backend.app.services.audit import record_event, AuditAction
from backend.app.services.geometry import (
    GeometryError, LINEAR_TYPES, parse_geojson, require_linear
)

logger = logging.getLogger(__name__)

STREET_LIST_CACHE_KEY = "streets:all"


async def list_streets(db: AsyncSession) -> list[Street]:
    result = await db.execute(select(Street).order_by(Street.name, Street.id))
    return list(result.scalars().all())


async def get_cached_street_list(redis_client) -> Optional[List[Dict[str, Any]]]:
    """Return the cached street list, or None on a miss or cache failure."""
    try:
        cached = await redis_client.get(STREET_LIST_CACHE_KEY)
    except RedisError:
        logger.warning("Street cache unavailable, reading from database", exc_info=True)
        return None
    if cached is None:
        return None
    return json.loads(cached)


async def cache_street_list(redis_client, streets: List[Dict[str, Any]]):
    try:
        await redis_client.set(
            STREET_LIST_CACHE_KEY,
            json.dumps(streets),
            ex=settings.street_cache_ttl_seconds
        )
    except RedisError:
        logger.warning("Could not populate street cache", exc_info=True)


async def invalidate_street_cache(redis_client):
    try:
        await redis_client.delete(STREET_LIST_CACHE_KEY)
    except RedisError:
        logger.warning("Could not invalidate street cache", exc_info=True)


def extract_street_features(feature_collection: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Pick importable streets out of a FeatureCollection.

    A feature is kept when it has a ``name`` property and a valid LineString or
    MultiLineString geometry; everything else is skipped.

    Returns:
        List of {"name", "geometry"} dictionaries
    """
    streets = []
    for feature in feature_collection.get("features", []):
        properties = feature.get("properties") or {}
        geometry = feature.get("geometry") or {}
        name = properties.get("name")

        if not name or geometry.get("type") not in LINEAR_TYPES:
            continue

        try:
            require_linear(parse_geojson(geometry))
        except GeometryError as exc:
            logger.warning("Skipping street %r: %s", name, exc)
            continue

        streets.append({"name": name, "geometry": geometry})
    return streets


async def import_streets(
    db: AsyncSession,
    features: Iterable[Dict[str, Any]],
    replace: bool = False,
    redis_client=None
) -> int:
    """
    Insert streets, optionally replacing the current catalog.

    Args:
        db: Database session
        features: {"name", "geometry"} dictionaries (see extract_street_features)
        replace: Delete existing streets first; refused if routes use them
        redis_client: When given, the street cache is invalidated

    Returns:
        Number of streets inserted
    """
    if replace:
        in_use = await db.execute(select(func.count(RouteStreet.id)))
        if in_use.scalar() > 0:
            raise ConflictError(
                message="Cannot replace streets that are attached to routes"
            )
        await db.execute(delete(Street))

    count = 0
    for feature in features:
        db.add(Street(name=feature["name"], geometry=feature["geometry"]))
        count += 1

    record_event(
        db,
        action=AuditAction.STREETS_IMPORTED,
        entity_type="street",
        metadata={"count": count, "replace": replace}
    )
    await commit_or_rollback(db, "import streets")

    if redis_client is not None:
        await invalidate_street_cache(redis_client)

    logger.info("Imported %d streets (replace=%s)", count, replace)
    return count
