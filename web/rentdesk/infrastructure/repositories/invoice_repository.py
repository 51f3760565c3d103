from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import Invoice


class InvoiceRepository(BaseRepository[Invoice]):
    """Invoice repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Invoice, session)

    async def get_by_landlord(self, landlord_id: int) -> List[Invoice]:
        query = (
            select(Invoice)
            .where(Invoice.landlord_id == landlord_id)
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        )
        return list((await self.session.execute(query)).scalars().all())

    async def get_by_email(self, email: str) -> List[Invoice]:
        query = (
            select(Invoice)
            .where(func.lower(Invoice.renter_email) == email.lower())
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        )
        return list((await self.session.execute(query)).scalars().all())

    async def get_by_property(self, property_id: int) -> List[Invoice]:
        query = (
            select(Invoice)
            .where(Invoice.property_id == property_id)
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        )
        return list((await self.session.execute(query)).scalars().all())

    async def get_by_transaction(self, transaction_id: str) -> Optional[Invoice]:
        query = select(Invoice).where(Invoice.transaction_id == transaction_id)
        return (await self.session.execute(query)).scalars().first()
