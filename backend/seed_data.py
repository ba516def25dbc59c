"""
Database seeding script.

Creates 50 profiles and a few street-built routes for the first two profiles.
Run this script after the streets have been imported.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select, func

from backend.app.db.session import AsyncSessionLocal, engine, Base
from backend.app.models.profile import Profile
from backend.app.models.street import Street
from backend.app.services.route_assembly import create_route

# Register tables
import backend.app.main  # noqa: F401

PROFILE_COUNT = 50

# (route name, first street offset, number of streets) per profile
ROUTE_PLAN = [
    [("Route 1", 0, 3), ("Route 2", 2, 3), ("Route 3", 4, 2)],
    [("Route 1", 5, 3), ("Route 2", 7, 3)],
]


async def seed_profiles(db) -> list:
    existing = await db.execute(select(func.count(Profile.id)))
    if existing.scalar() > 0:
        print("ℹ️  Profiles already exist, skipping profile seeding")
    else:
        for number in range(1, PROFILE_COUNT + 1):
            db.add(Profile(name=f"Profile {number}"))
        await db.commit()
        print(f"✅ Created {PROFILE_COUNT} profiles")

    result = await db.execute(
        select(Profile).where(Profile.name.in_(["Profile 1", "Profile 2"])).order_by(Profile.name)
    )
    return list(result.scalars().all())


async def seed_routes(db, profiles: list):
    result = await db.execute(select(Street).order_by(Street.name).limit(10))
    streets = list(result.scalars().all())
    if len(streets) < 10:
        print("ℹ️  Not enough streets found. Import streets first.")
        return

    for profile, plan in zip(profiles, ROUTE_PLAN):
        for name, offset, size in plan:
            street_ids = [street.id for street in streets[offset:offset + size]]
            await create_route(db, name=name, profile_id=profile.id, street_ids=street_ids)
            print(f"✅ Created {name} for {profile.name}")


async def seed():
    """Seed profiles, then routes built from imported streets."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting seeding...")
        profiles = await seed_profiles(db)
        if len(profiles) < 2:
            print("ℹ️  Not enough profiles found.")
            return
        await seed_routes(db, profiles)
        print("\n🎉 Seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(seed())
