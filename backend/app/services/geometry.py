"""
Geometry helpers.

Geometries are kept as GeoJSON dictionaries in the database and on the wire.
Shapely parses and validates them; unions are delegated to a geometry engine,
either GEOS in-process (Shapely) or PostGIS.
"""

import json
import math
from typing import Any, Dict, List, Optional, Union

import shapely
from shapely.errors import ShapelyError
from shapely.geometry import shape, LineString, MultiLineString
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from sqlalchemy import select, func
from sqlalchemy.dialects.postgresql import array
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings

GeoJSON = Dict[str, Any]

LINEAR_TYPES = ("LineString", "MultiLineString")
GEOMETRY_TYPES = (
    "Point", "MultiPoint", "LineString", "MultiLineString",
    "Polygon", "MultiPolygon", "GeometryCollection",
)


class GeometryError(Exception):
    """Raised when a geometry cannot be parsed or combined."""


def parse_geojson(data: Union[str, GeoJSON]) -> BaseGeometry:
    """
    Parse a GeoJSON geometry (object or JSON string) into a Shapely geometry.

    Raises:
        GeometryError: If the input is not a well-formed, non-empty geometry
    """
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise GeometryError("Geometry is not valid JSON") from exc

    if not isinstance(data, dict):
        raise GeometryError("Geometry must be a GeoJSON object")
    # shape() would unwrap a Feature; only bare geometries are stored
    if data.get("type") not in GEOMETRY_TYPES:
        raise GeometryError(f"Unsupported GeoJSON type: {data.get('type')}")

    try:
        geom = shape(data)
    except (KeyError, TypeError, ValueError, AttributeError, ShapelyError) as exc:
        raise GeometryError(f"Malformed GeoJSON geometry: {exc}") from exc

    if geom.is_empty:
        raise GeometryError("Geometry is empty")
    if not all(math.isfinite(value) for value in geom.bounds):
        raise GeometryError("Geometry has non-finite coordinates")

    return geom


def require_linear(geom: BaseGeometry) -> BaseGeometry:
    """Ensure a geometry is a LineString or MultiLineString."""
    if geom.geom_type not in LINEAR_TYPES:
        raise GeometryError(
            f"Expected LineString or MultiLineString, got {geom.geom_type}"
        )
    return geom


def to_geojson(geom: BaseGeometry) -> GeoJSON:
    """Serialize a Shapely geometry to a GeoJSON dictionary."""
    return json.loads(shapely.to_geojson(geom))


def make_point(longitude: float, latitude: float) -> GeoJSON:
    """Build a GeoJSON Point; axis order is longitude, latitude."""
    return {"type": "Point", "coordinates": [float(longitude), float(latitude)]}


def as_multilinestring(geom: BaseGeometry) -> Optional[MultiLineString]:
    """
    Collect the linear parts of a geometry into a MultiLineString.

    Returns None when the geometry has no linear parts.
    """
    if geom.is_empty:
        return None
    if isinstance(geom, MultiLineString):
        return geom
    if isinstance(geom, LineString):
        return MultiLineString([geom])

    lines: List[LineString] = []
    for part in getattr(geom, "geoms", []):
        if isinstance(part, LineString):
            lines.append(part)
        elif isinstance(part, MultiLineString):
            lines.extend(part.geoms)
    if not lines:
        return None
    return MultiLineString(lines)


class ShapelyGeometryEngine:
    """Union computed in-process with GEOS; works with any database."""

    name = "shapely"

    async def union(self, db: AsyncSession, geometries: List[GeoJSON]) -> Optional[GeoJSON]:
        shapes = [parse_geojson(item) for item in geometries]
        if not shapes:
            return None

        try:
            merged = unary_union(shapes)
        except ShapelyError as exc:
            raise GeometryError(f"Union failed: {exc}") from exc

        lines = as_multilinestring(merged)
        return to_geojson(lines) if lines is not None else None


class PostgisGeometryEngine:
    """Union executed by PostGIS (ST_Union) in the current transaction."""

    name = "postgis"

    async def union(self, db: AsyncSession, geometries: List[GeoJSON]) -> Optional[GeoJSON]:
        if not geometries:
            return None

        parts = [func.ST_GeomFromGeoJSON(json.dumps(item)) for item in geometries]
        result = await db.execute(
            select(func.ST_AsGeoJSON(func.ST_Multi(func.ST_Union(array(parts)))))
        )
        merged = result.scalar_one_or_none()
        if merged is None:
            return None

        try:
            geom = parse_geojson(merged)
        except GeometryError:
            return None
        lines = as_multilinestring(geom)
        return to_geojson(lines) if lines is not None else None


_ENGINES = {
    ShapelyGeometryEngine.name: ShapelyGeometryEngine,
    PostgisGeometryEngine.name: PostgisGeometryEngine,
}


def get_geometry_engine(name: Optional[str] = None):
    """Return the geometry engine selected by name or by settings."""
    engine_name = (name or settings.geometry_engine).lower()
    try:
        return _ENGINES[engine_name]()
    except KeyError:
        raise ValueError(f"Unknown geometry engine: {engine_name}")
