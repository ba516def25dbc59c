"""
Profile API Endpoints.

Profiles are created by an administrator. Listing them is refused so that
tenants cannot discover each other's ids.
"""

from fastapi import APIRouter, Depends, HTTPException, status, Path
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db, commit_or_rollback
from backend.app.models.profile import Profile
from backend.app.schemas.profile import ProfileCreate, ProfileResponse
from backend.app.services.lookups import require_resource

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    profile_data: ProfileCreate,
    db: AsyncSession = Depends(get_db)
):
    """Create a profile (admin action)."""
    profile = Profile(name=profile_data.name)

    db.add(profile)
    await commit_or_rollback(db, "create profile")

    return ProfileResponse.model_validate(profile)


@router.get("")
async def list_profiles():
    """
    Listing profiles is not allowed.

    Returns 403 so that profile ids are never enumerable.
    """
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Not authorized to list profiles"
    )


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: str = Path(..., description="Profile ID"),
    db: AsyncSession = Depends(get_db)
):
    profile = await require_resource(db, Profile, profile_id, "Profile")
    return ProfileResponse.model_validate(profile)
