from typing import Any, Dict, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import LandlordProfile, RenterProfile


class _UserProfileRepository(BaseRepository):
    """Profiles are one row per user, keyed by ``user_id``"""

    async def get_by_user_id(self, user_id: int):
        """Get profile by user ID"""
        result = await self.session.execute(
            select(self.model).where(self.model.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def upsert(self, user_id: int, data: Dict[str, Any]):
        """Create the profile or update the supplied fields"""
        profile = await self.get_by_user_id(user_id)
        if profile is None:
            return await self.create(obj_in={"user_id": user_id, **data})
        for field, value in data.items():
            if hasattr(profile, field):
                setattr(profile, field, value)
        await self.session.flush()
        return profile


class LandlordProfileRepository(_UserProfileRepository):
    """Repository for landlord profile operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(LandlordProfile, session)


class RenterProfileRepository(_UserProfileRepository):
    """Repository for renter profile operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(RenterProfile, session)
