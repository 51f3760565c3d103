"""Admin statistics and the periodic maintenance pass."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import BaseService
from ..infrastructure.repositories import (
    UserRepository, PropertyRepository, LeaseRepository, RentPaymentRepository,
    NoticeRepository,
)
from ..models import utcnow
from .invitation_service import InvitationService
from .lease_service import LeaseService
from .payment_service import PaymentService

logger = logging.getLogger(__name__)

ACTIVITY_WINDOW_DAYS = 30


class AdminService(BaseService):
    """Service for admin operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.users = UserRepository(session)
        self.leases = LeaseRepository(session)
        self.payments = RentPaymentRepository(session)
        self.notices = NoticeRepository(session)

    async def system_stats(self) -> Dict[str, Any]:
        since = utcnow() - timedelta(days=ACTIVITY_WINDOW_DAYS)
        paid_count, paid_total = await self.payments.paid_totals()
        recent_paid, _ = await self.payments.paid_totals(since)
        users_by_role = await self.users.count_by_role()
        return {
            "users": {"total": sum(users_by_role.values()), "by_role": users_by_role},
            "properties": await PropertyRepository(self.session).count(),
            "leases": await self.leases.count_by_status(),
            "payments": {"processed": paid_count, "total_amount": paid_total},
            "notices_sent": await self.notices.count_sent_since(),
            "recent_activity": {
                "days": ACTIVITY_WINDOW_DAYS,
                "user_signups": await self.users.count_created_since(since),
                "leases_created": await self.leases.count_created_since(since),
                "payments_processed": recent_paid,
                "notices_sent": await self.notices.count_sent_since(since),
            },
        }


class MaintenanceService(BaseService):
    """Time-driven status changes: overdue rent, stale invitations, ended leases."""

    async def run(self, today: Optional[date] = None) -> Dict[str, int]:
        today = today or date.today()
        result = {
            "overdue_payments": await PaymentService(self.session).mark_overdue(today),
            "expired_invitations": await InvitationService(self.session).expire_stale(),
            "expired_leases": await LeaseService(self.session).expire_finished(today),
        }
        logger.info("Maintenance pass: %s", result)
        return result
