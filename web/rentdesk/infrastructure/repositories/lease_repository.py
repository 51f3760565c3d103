from datetime import date, datetime
from typing import Dict, List, Optional
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import Lease


class LeaseRepository(BaseRepository[Lease]):
    """Lease repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Lease, session)

    def _newest_first(self, query):
        return query.order_by(Lease.created_at.desc(), Lease.id.desc())

    async def get_by_landlord(self, landlord_id: int, status: Optional[str] = None) -> List[Lease]:
        query = select(Lease).where(Lease.landlord_id == landlord_id)
        if status:
            query = query.where(Lease.status == status)
        return list((await self.session.execute(self._newest_first(query))).scalars().all())

    async def get_by_renter(self, renter_id: int, email: str) -> List[Lease]:
        """Leases where the renter is referenced by id or by email"""
        query = select(Lease).where(
            (Lease.renter_id == renter_id) | (func.lower(Lease.renter_email) == email.lower())
        )
        return list((await self.session.execute(self._newest_first(query))).scalars().all())

    async def get_by_property(self, property_id: int) -> List[Lease]:
        query = select(Lease).where(Lease.property_id == property_id)
        return list((await self.session.execute(self._newest_first(query))).scalars().all())

    async def find_for_renter_on_property(self, property_id: int, email: str) -> Optional[Lease]:
        """Most recent non-terminated lease of *email* on a property"""
        query = self._newest_first(
            select(Lease).where(
                Lease.property_id == property_id,
                func.lower(Lease.renter_email) == email.lower(),
                Lease.status.in_(["draft", "pending_signature", "active"]),
            )
        )
        return (await self.session.execute(query)).scalars().first()

    async def has_active_on_property(self, property_id: int) -> bool:
        query = select(Lease.id).where(Lease.property_id == property_id, Lease.status == "active")
        return (await self.session.execute(query)).scalars().first() is not None

    async def count_by_status(self) -> Dict[str, int]:
        query = select(Lease.status, func.count()).group_by(Lease.status)
        return {s: c for s, c in (await self.session.execute(query)).all()}

    async def count_created_since(self, since: datetime) -> int:
        query = select(func.count()).select_from(Lease).where(Lease.created_at >= since)
        return (await self.session.execute(query)).scalar() or 0

    async def expire_ended(self, today: date, now: datetime) -> int:
        """Active leases whose end date has passed become ``expired``"""
        stmt = (
            update(Lease)
            .where(Lease.status == "active", Lease.end_date < today)
            .values(status="expired", updated_at=now)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0
