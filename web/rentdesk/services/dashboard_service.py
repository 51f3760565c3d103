from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import BaseService
from ..infrastructure.repositories import (
    PropertyRepository, LeaseRepository, RentPaymentRepository, ApplicationRepository,
    InvitationRepository, InvoiceRepository, UserRepository,
)
from .notice_service import NoticeService


class DashboardService(BaseService):
    """Aggregates shown on the landlord and renter home screens."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.leases = LeaseRepository(session)
        self.payments = RentPaymentRepository(session)

    async def landlord_stats(self, landlord_id: int) -> Dict[str, Any]:
        leases = await self.leases.get_by_landlord(landlord_id)
        active = [lease for lease in leases if lease.status == "active"]
        return {
            "total_properties": await PropertyRepository(self.session).count_by_landlord(landlord_id),
            "active_leases": len(active),
            "monthly_revenue": sum((Decimal(str(lease.monthly_rent)) for lease in active), Decimal("0")),
            "overdue_payments": await self.payments.count_overdue_for_leases([lease.id for lease in active]),
            "pending_signatures": sum(1 for lease in leases if lease.status == "pending_signature"),
            "pending_applications": await ApplicationRepository(self.session).count_pending_for_landlord(landlord_id),
            "active_invitations": await InvitationRepository(self.session).count_pending_for_landlord(landlord_id),
        }

    async def renter_dashboard(self, renter: dict) -> Dict[str, Any]:
        renter_id, email = int(renter["sub"]), renter["email"]
        payments = await self.payments.get_by_renter(renter_id, email)
        pending = sorted((p for p in payments if p.status == "pending"), key=lambda p: p.due_date)
        outstanding = sum(
            (Decimal(str(p.amount)) for p in payments if p.status in ("pending", "overdue")),
            Decimal("0"),
        )
        user = await UserRepository(self.session).get(renter_id)
        return {
            "leases": await self.leases.get_by_renter(renter_id, email),
            "next_payment": pending[0] if pending else None,
            "outstanding_balance": outstanding,
            "unread_notices": await NoticeService(self.session).get_unread_notices_count(email),
            "pending_invitations": await InvitationRepository(self.session).get_by_email(email, "pending"),
            "open_invoices": [i for i in await InvoiceRepository(self.session).get_by_email(email) if i.status == "sent"],
            "current_property": user.current_property_details if user else None,
        }
