"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import (
    profiles, vehicles, streets, routes, schedules, runs
)

router = APIRouter()

# Master data (normally administrators)
router.include_router(profiles.router)
router.include_router(vehicles.router)
router.include_router(streets.router)
router.include_router(routes.router)
router.include_router(schedules.router)

# Real-time operations (normally drivers)
router.include_router(runs.router)
