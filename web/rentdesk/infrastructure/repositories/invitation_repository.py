from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import Invitation


class InvitationRepository(BaseRepository[Invitation]):
    """Invitation repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Invitation, session)

    async def get_by_landlord(self, landlord_id: int) -> List[Invitation]:
        query = (
            select(Invitation)
            .where(Invitation.landlord_id == landlord_id)
            .order_by(Invitation.invited_at.desc(), Invitation.id.desc())
        )
        return list((await self.session.execute(query)).scalars().all())

    async def get_by_property(self, property_id: int) -> List[Invitation]:
        query = (
            select(Invitation)
            .where(Invitation.property_id == property_id)
            .order_by(Invitation.invited_at.desc(), Invitation.id.desc())
        )
        return list((await self.session.execute(query)).scalars().all())

    async def get_by_email(self, email: str, status: Optional[str] = None) -> List[Invitation]:
        """Invitations addressed to *email*, newest first"""
        query = select(Invitation).where(func.lower(Invitation.renter_email) == email.lower())
        if status:
            query = query.where(Invitation.status == status)
        query = query.order_by(Invitation.invited_at.desc(), Invitation.id.desc())
        return list((await self.session.execute(query)).scalars().all())

    async def find_pending(self, property_id: int, email: str) -> Optional[Invitation]:
        query = select(Invitation).where(
            Invitation.property_id == property_id,
            func.lower(Invitation.renter_email) == email.lower(),
            Invitation.status == "pending",
        )
        return (await self.session.execute(query)).scalars().first()

    async def count_pending_for_landlord(self, landlord_id: int) -> int:
        query = select(func.count()).select_from(Invitation).where(
            Invitation.landlord_id == landlord_id,
            Invitation.status == "pending",
        )
        return (await self.session.execute(query)).scalar() or 0

    async def expire_before(self, now: datetime) -> int:
        """Flip pending invitations whose ``expires_at`` has passed"""
        stmt = (
            update(Invitation)
            .where(Invitation.status == "pending", Invitation.expires_at < now)
            .values(status="expired", updated_at=now)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0
