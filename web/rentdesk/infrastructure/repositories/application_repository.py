from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import Application


class ApplicationRepository(BaseRepository[Application]):
    """Rental application repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Application, session)

    def _newest_first(self, query):
        return query.order_by(Application.created_at.desc(), Application.id.desc())

    async def get_by_invitation(self, invitation_id: int) -> Optional[Application]:
        query = select(Application).where(Application.invitation_id == invitation_id)
        return (await self.session.execute(query)).scalar_one_or_none()

    async def get_by_landlord(self, landlord_id: int, status: Optional[str] = None) -> List[Application]:
        query = select(Application).where(Application.landlord_id == landlord_id)
        if status:
            query = query.where(Application.status == status)
        return list((await self.session.execute(self._newest_first(query))).scalars().all())

    async def get_by_property(self, property_id: int) -> List[Application]:
        query = select(Application).where(Application.property_id == property_id)
        return list((await self.session.execute(self._newest_first(query))).scalars().all())

    async def get_by_renter(self, renter_id: int, email: str) -> List[Application]:
        query = select(Application).where(
            (Application.renter_id == renter_id)
            | (func.lower(Application.renter_email) == email.lower())
        )
        return list((await self.session.execute(self._newest_first(query))).scalars().all())

    async def count_pending_for_landlord(self, landlord_id: int) -> int:
        query = select(func.count()).select_from(Application).where(
            Application.landlord_id == landlord_id,
            Application.status.in_(["submitted", "under_review"]),
        )
        return (await self.session.execute(query)).scalar() or 0
