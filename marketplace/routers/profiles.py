from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import NotFoundError
from ..core.security import CurrentUser, get_current_user
from ..schemas.profile_schemas import ProfileRead, ProfileUpdate
from ..services.profile_service import ProfileService, is_profile_complete

router = APIRouter(prefix="/api/v1/profiles", tags=["Profiles"])


def _profile_response(profile) -> ProfileRead:
    data = ProfileRead.model_validate(profile)
    data.is_complete = is_profile_complete(profile)
    return data


@router.get("/me", response_model=ProfileRead)
async def get_my_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the signed-in member's profile"""
    service = ProfileService(db)
    profile = await service.get_by_user(current_user.id)
    if profile is None:
        raise NotFoundError("Profile")
    return _profile_response(profile)


@router.put("/me", response_model=ProfileRead)
async def update_my_profile(
    profile_data: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create or update the signed-in member's profile. Only sent fields change."""
    service = ProfileService(db)
    profile = await service.upsert(current_user.id, profile_data.model_dump(exclude_unset=True))
    return _profile_response(profile)
