from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import Property


class PropertyRepository(BaseRepository[Property]):
    """Property repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Property, session)

    async def get_by_landlord(self, landlord_id: int) -> List[Property]:
        """Landlord's properties, newest first"""
        query = (
            select(Property)
            .where(Property.landlord_id == landlord_id)
            .order_by(Property.created_at.desc(), Property.id.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_owned(self, property_id: int, landlord_id: int) -> Optional[Property]:
        """Property only when it belongs to *landlord_id*"""
        query = select(Property).where(
            Property.id == property_id,
            Property.landlord_id == landlord_id,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def count_by_landlord(self, landlord_id: int) -> int:
        query = select(func.count()).select_from(Property).where(Property.landlord_id == landlord_id)
        return (await self.session.execute(query)).scalar() or 0
