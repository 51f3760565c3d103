from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import RentPayment, SecurityDeposit


class RentPaymentRepository(BaseRepository[RentPayment]):
    """Rent payment repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(RentPayment, session)

    async def get_by_lease(self, lease_id: int, status: Optional[str] = None) -> List[RentPayment]:
        """Lease payments ordered by due date, latest first"""
        query = select(RentPayment).where(RentPayment.lease_id == lease_id)
        if status:
            query = query.where(RentPayment.status == status)
        query = query.order_by(RentPayment.due_date.desc(), RentPayment.id.desc())
        return list((await self.session.execute(query)).scalars().all())

    async def get_by_landlord(self, landlord_id: int, status: Optional[str] = None) -> List[RentPayment]:
        query = select(RentPayment).where(RentPayment.landlord_id == landlord_id)
        if status:
            query = query.where(RentPayment.status == status)
        query = query.order_by(RentPayment.created_at.desc(), RentPayment.id.desc())
        return list((await self.session.execute(query)).scalars().all())

    async def get_by_renter(self, renter_id: int, email: str) -> List[RentPayment]:
        query = (
            select(RentPayment)
            .where(
                (RentPayment.renter_id == renter_id)
                | (func.lower(RentPayment.renter_email) == email.lower())
            )
            .order_by(RentPayment.created_at.desc(), RentPayment.id.desc())
        )
        return list((await self.session.execute(query)).scalars().all())

    async def find_in_month(
        self, lease_id: int, amount: Decimal, due: date
    ) -> Optional[RentPayment]:
        """A ``paid`` or ``pending`` payment of *amount* due in the same month"""
        first = due.replace(day=1)
        following = date(first.year + (first.month == 12), first.month % 12 + 1, 1)
        query = select(RentPayment).where(
            RentPayment.lease_id == lease_id,
            RentPayment.amount == amount,
            RentPayment.status.in_(["paid", "pending"]),
            RentPayment.due_date >= first,
            RentPayment.due_date < following,
        )
        return (await self.session.execute(query)).scalars().first()

    async def get_by_transaction(self, transaction_id: str) -> Optional[RentPayment]:
        query = select(RentPayment).where(RentPayment.transaction_id == transaction_id)
        return (await self.session.execute(query)).scalars().first()

    async def count_overdue_for_leases(self, lease_ids: List[int]) -> int:
        if not lease_ids:
            return 0
        query = select(func.count()).select_from(RentPayment).where(
            RentPayment.lease_id.in_(lease_ids),
            RentPayment.status == "overdue",
        )
        return (await self.session.execute(query)).scalar() or 0

    async def paid_totals(self, since: Optional[datetime] = None) -> Tuple[int, Decimal]:
        """Count and sum of paid payments"""
        query = select(func.count(), func.coalesce(func.sum(RentPayment.amount), 0)).where(
            RentPayment.status == "paid"
        )
        if since is not None:
            query = query.where(RentPayment.paid_date >= since)
        count, total = (await self.session.execute(query)).one()
        return count or 0, Decimal(str(total or 0))

    async def mark_overdue(self, today: date, now: datetime) -> int:
        """Pending payments due before *today* become ``overdue``"""
        stmt = (
            update(RentPayment)
            .where(RentPayment.status == "pending", RentPayment.due_date < today)
            .values(status="overdue", updated_at=now)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0


class SecurityDepositRepository(BaseRepository[SecurityDeposit]):
    """Security deposit repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(SecurityDeposit, session)

    async def get_by_lease(self, lease_id: int) -> List[SecurityDeposit]:
        query = (
            select(SecurityDeposit)
            .where(SecurityDeposit.lease_id == lease_id)
            .order_by(SecurityDeposit.paid_date.desc(), SecurityDeposit.id.desc())
        )
        return list((await self.session.execute(query)).scalars().all())

    async def get_by_landlord(self, landlord_id: int) -> List[SecurityDeposit]:
        query = (
            select(SecurityDeposit)
            .where(SecurityDeposit.landlord_id == landlord_id)
            .order_by(SecurityDeposit.paid_date.desc(), SecurityDeposit.id.desc())
        )
        return list((await self.session.execute(query)).scalars().all())
