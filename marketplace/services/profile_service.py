# marketplace/services/profile_service.py
from typing import Dict, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from .base_service import BaseService
from ..models.profile import Profile

logger = logging.getLogger(__name__)

# Fields that must be non-empty before a member may enroll
REQUIRED_PROFILE_FIELDS = ("full_name", "phone", "id_number", "birth_date", "address", "province")


def is_profile_complete(profile: Optional[Profile]) -> bool:
    if profile is None:
        return False
    for field in REQUIRED_PROFILE_FIELDS:
        value = getattr(profile, field, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            return False
    return True


class ProfileService(BaseService[Profile]):
    def __init__(self, db: AsyncSession):
        super().__init__(Profile, db)

    async def get_by_user(self, user_id: UUID) -> Optional[Profile]:
        stmt = select(self.model).where(self.model.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, user_id: UUID, fields: Dict) -> Profile:
        """Idempotent create-or-update keyed by user_id"""
        profile = await self.get_by_user(user_id)
        if profile is None:
            profile = Profile(user_id=user_id)
            self.db.add(profile)
        for key, value in fields.items():
            if hasattr(Profile, key):
                setattr(profile, key, value)
        await self.commit()
        await self.db.refresh(profile)
        logger.info("Profile saved for user %s", user_id)
        return profile
