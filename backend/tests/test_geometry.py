"""
Geometry helper tests.
"""

import json

import pytest
from shapely.geometry import LineString, MultiLineString, Point, GeometryCollection

from backend.app.services.geometry import (
    GeometryError, ShapelyGeometryEngine, PostgisGeometryEngine,
    parse_geojson, require_linear, to_geojson, make_point, as_multilinestring,
    get_geometry_engine
)


def test_parse_geojson_accepts_dict_and_string():
    data = {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}

    assert parse_geojson(data).equals(LineString([(0, 0), (1, 1)]))
    assert parse_geojson(json.dumps(data)).equals(LineString([(0, 0), (1, 1)]))


@pytest.mark.parametrize("data", [
    "{broken",
    ["LineString"],
    {"type": "LineString", "coordinates": []},
    {"type": "LineString"},
    {"type": "Hexagon", "coordinates": [[0, 0]]},
    {"type": "Point", "coordinates": [float("nan"), 0.0]},
    {"type": "Feature", "properties": {}, "geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}},
    {"type": "FeatureCollection", "features": []},
])
def test_parse_geojson_rejects(data):
    with pytest.raises(GeometryError):
        parse_geojson(data)


def test_require_linear():
    line = LineString([(0, 0), (1, 1)])
    assert require_linear(line) is line

    with pytest.raises(GeometryError):
        require_linear(Point(0, 0))


def test_make_point_is_lon_lat():
    assert make_point(-76.5205, 3.42158) == {"type": "Point", "coordinates": [-76.5205, 3.42158]}


def test_to_geojson():
    assert to_geojson(LineString([(0, 0), (1, 1)])) == {
        "type": "LineString", "coordinates": [[0.0, 0.0], [1.0, 1.0]]
    }


def test_as_multilinestring():
    line = LineString([(0, 0), (1, 1)])

    assert as_multilinestring(line).equals(MultiLineString([line]))
    assert isinstance(as_multilinestring(line), MultiLineString)
    assert as_multilinestring(GeometryCollection([Point(0, 0), line])).equals(line)
    assert as_multilinestring(GeometryCollection([Point(0, 0)])) is None
    assert as_multilinestring(GeometryCollection()) is None


@pytest.mark.asyncio
async def test_shapely_union_merges_into_multilinestring():
    engine = ShapelyGeometryEngine()

    merged = await engine.union(None, [
        {"type": "LineString", "coordinates": [[0, 0], [1, 0]]},
        {"type": "LineString", "coordinates": [[0, 5], [1, 5]]},
    ])

    assert merged["type"] == "MultiLineString"
    assert len(merged["coordinates"]) == 2


@pytest.mark.asyncio
async def test_shapely_union_of_nothing():
    assert await ShapelyGeometryEngine().union(None, []) is None


@pytest.mark.asyncio
async def test_postgis_union_of_nothing_skips_database():
    assert await PostgisGeometryEngine().union(None, []) is None


def test_get_geometry_engine():
    assert isinstance(get_geometry_engine(), ShapelyGeometryEngine)
    assert isinstance(get_geometry_engine("postgis"), PostgisGeometryEngine)
    assert isinstance(get_geometry_engine("PostGIS"), PostgisGeometryEngine)

    with pytest.raises(ValueError):
        get_geometry_engine("mapbox")
