from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import RenterStatus


class RenterStatusRepository(BaseRepository[RenterStatus]):
    """Renter pipeline (kanban) repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(RenterStatus, session)

    async def get_by_property(self, property_id: int) -> List[RenterStatus]:
        query = (
            select(RenterStatus)
            .where(RenterStatus.property_id == property_id)
            .order_by(RenterStatus.updated_at.desc(), RenterStatus.id.desc())
        )
        return list((await self.session.execute(query)).scalars().all())

    async def get_by_landlord(self, landlord_id: int) -> List[RenterStatus]:
        query = (
            select(RenterStatus)
            .where(RenterStatus.landlord_id == landlord_id)
            .order_by(RenterStatus.updated_at.desc(), RenterStatus.id.desc())
        )
        return list((await self.session.execute(query)).scalars().all())

    async def get_by_email(self, email: str, property_id: Optional[int] = None) -> List[RenterStatus]:
        query = select(RenterStatus).where(func.lower(RenterStatus.renter_email) == email.lower())
        if property_id is not None:
            query = query.where(RenterStatus.property_id == property_id)
        return list((await self.session.execute(query)).scalars().all())

    async def find(self, property_id: int, email: str) -> Optional[RenterStatus]:
        query = select(RenterStatus).where(
            RenterStatus.property_id == property_id,
            RenterStatus.renter_email == email.lower(),
        )
        return (await self.session.execute(query)).scalar_one_or_none()
