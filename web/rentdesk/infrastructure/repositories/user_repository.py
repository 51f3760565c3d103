from datetime import datetime
from typing import Optional, List, Dict
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import User


class UserRepository(BaseRepository[User]):
    """User repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)"""
        query = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        """Check if user exists by email"""
        query = select(User.id).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(query)
        return result.scalar() is not None

    async def get_by_role(
        self,
        role: str,
        *,
        skip: int = 0,
        limit: int = 100
    ) -> List[User]:
        """Get users by role"""
        query = (
            select(User)
            .where(User.role == role)
            .order_by(User.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def update_password(self, user_id: int, password_hash: str) -> Optional[User]:
        """Update user password"""
        return await self.update(id=user_id, obj_in={"password_hash": password_hash})

    async def count_by_role(self) -> Dict[str, int]:
        query = select(User.role, func.count()).group_by(User.role)
        result = await self.session.execute(query)
        return {role: count for role, count in result.all()}

    async def count_created_since(self, since: datetime) -> int:
        query = select(func.count()).select_from(User).where(User.created_at >= since)
        return (await self.session.execute(query)).scalar() or 0
