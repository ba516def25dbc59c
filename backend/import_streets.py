"""
Street import script.

Loads named LineString/MultiLineString features from a GeoJSON
FeatureCollection into the streets table.

Usage:
    python backend/import_streets.py [path/to/streets.geojson] [--replace]
"""

import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.core.config import settings
from backend.app.core.redis_client import redis_client
from backend.app.db.session import AsyncSessionLocal, engine, Base
from backend.app.services.street_catalog import extract_street_features, import_streets

# Register tables
import backend.app.main  # noqa: F401


async def run_import(path: Path, replace: bool) -> int:
    if not path.exists():
        print(f"❌ File not found: {path}")
        return 1

    print(f"🗺️  Importing streets from {path}...")
    feature_collection = json.loads(path.read_text(encoding="utf-8"))
    features = extract_street_features(feature_collection)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        count = await import_streets(db, features, replace=replace, redis_client=redis_client)

    print(f"✅ Import completed: {count} streets")
    return 0


if __name__ == "__main__":
    args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    geojson_path = Path(args[0]) if args else Path(settings.streets_geojson_path)
    sys.exit(asyncio.run(run_import(geojson_path, replace="--replace" in sys.argv)))
