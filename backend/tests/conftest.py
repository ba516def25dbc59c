"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport

from backend.app.main import app
from backend.app.db.session import get_db, Base
from backend.app.core.clock import get_clock
from backend.app.core.redis_client import get_redis
from backend.app.models.profile import Profile
from backend.app.models.route import Route
from backend.app.models.street import Street
from backend.app.models.vehicle import Vehicle
from backend.tests.support import (
    FixedClock, MockRedis, TestingSessionLocal, engine, line, persist
)

mock_redis = MockRedis()


@pytest.fixture(scope="session", autouse=True)
def apply_overrides():
    """Apply overrides once for the session."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    async def override_get_redis():
        return mock_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    yield

    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await mock_redis.flushdb()

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def redis_client():
    return mock_redis


@pytest.fixture
def clock():
    """Fixed clock, also injected into the API."""
    fixed = FixedClock()
    app.dependency_overrides[get_clock] = lambda: fixed
    yield fixed
    app.dependency_overrides.pop(get_clock, None)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for service-level tests
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
async def profile():
    return await persist(Profile(name="Profile 1"))


@pytest.fixture
async def other_profile():
    return await persist(Profile(name="Profile 2"))


@pytest.fixture
async def vehicle(profile):
    return await persist(Vehicle(profile_id=profile.id, plate="ABC-123", make="Chevrolet", model="2022"))


@pytest.fixture
async def route(profile):
    return await persist(Route(
        profile_id=profile.id,
        name="Ruta Centro",
        geometry=line((-77.06, 3.89), (-77.05, 3.88))
    ))


@pytest.fixture
async def other_route(other_profile):
    return await persist(Route(
        profile_id=other_profile.id,
        name="Ruta Puerto",
        geometry=line((-77.02, 3.88), (-77.01, 3.87))
    ))


@pytest.fixture
async def streets():
    """Three disjoint streets, named so that alphabetical order differs from list order."""
    return await persist(
        Street(name="Calle 6", geometry=line((-77.0, 3.80), (-77.0, 3.81))),
        Street(name="Avenida Simon Bolivar", geometry=line((-77.1, 3.80), (-77.1, 3.81))),
        Street(name="Carrera 3", geometry={
            "type": "MultiLineString",
            "coordinates": [[[-77.2, 3.80], [-77.2, 3.81]], [[-77.3, 3.80], [-77.3, 3.81]]]
        }),
    )
