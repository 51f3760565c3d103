"""Rent payments: schedules, lookups, overdue tracking and income."""

from __future__ import annotations

import calendar
import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import BaseService, NotFoundError, ValidationError, BusinessLogicError, PaymentError
from ..infrastructure.repositories import (
    RentPaymentRepository, LeaseRepository, PropertyRepository, InvoiceRepository,
)
from ..models import Lease, RentPayment, utcnow
from ..roles import Role
from .stripe_service import StripeService

logger = logging.getLogger(__name__)

PAYMENT_STATUSES = ("pending", "paid", "overdue", "partial")
PAYMENT_TYPES = ("monthly_rent", "security_deposit", "application_fee", "pet_fee")


def add_months(start: date, months: int) -> date:
    """Same day of month *months* later, clamped to the month's length"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


async def ensure_intent_unused(session: AsyncSession, intent_id: str) -> None:
    """An intent settles a single payment or invoice"""
    if (
        await RentPaymentRepository(session).get_by_transaction(intent_id)
        or await InvoiceRepository(session).get_by_transaction(intent_id)
    ):
        raise PaymentError("Payment intent was already used", "payment_intent_reused", intent_id)


class PaymentService(BaseService):
    """Service for rent payment operations."""

    def __init__(self, session: AsyncSession, stripe_service: Optional[StripeService] = None):
        super().__init__(session)
        self.repo = RentPaymentRepository(session)
        self.leases = LeaseRepository(session)
        self.stripe = stripe_service or StripeService()

    async def _lease_for(self, user: dict, lease_id: int) -> Lease:
        lease = await self.leases.get(lease_id)
        if not lease or not is_lease_party(user, lease):
            raise NotFoundError("Lease", lease_id)
        return lease

    async def get_lease_payments(self, user: dict, lease_id: int) -> List[RentPayment]:
        await self._lease_for(user, lease_id)
        return await self.repo.get_by_lease(lease_id)

    async def get_overdue_payments(self, user: dict, lease_id: int) -> List[RentPayment]:
        await self._lease_for(user, lease_id)
        return await self.repo.get_by_lease(lease_id, status="overdue")

    async def get_pending_payments(self, user: dict, lease_id: int) -> List[RentPayment]:
        await self._lease_for(user, lease_id)
        return await self.repo.get_by_lease(lease_id, status="pending")

    async def get_payment(self, user: dict, payment_id: int) -> RentPayment:
        payment = await self.repo.get(payment_id)
        if not payment:
            raise NotFoundError("Payment", payment_id)
        role = user.get("role")
        if role == Role.landlord.value and payment.landlord_id != int(user["sub"]):
            raise NotFoundError("Payment", payment_id)
        if role == Role.renter.value and not (
            payment.renter_id == int(user["sub"])
            or (payment.renter_email or "").lower() == user["email"].lower()
        ):
            raise NotFoundError("Payment", payment_id)
        return payment

    async def get_landlord_payments(self, landlord_id: int, status: Optional[str] = None) -> List[RentPayment]:
        return await self.repo.get_by_landlord(landlord_id, status)

    async def get_renter_payments(self, renter: dict) -> List[RentPayment]:
        return await self.repo.get_by_renter(int(renter["sub"]), renter["email"])

    def _check(self, data: Dict[str, Any]) -> None:
        if "status" in data and data["status"] not in PAYMENT_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(PAYMENT_STATUSES)}", field="status")
        if "payment_type" in data and data["payment_type"] not in PAYMENT_TYPES:
            raise ValidationError(f"Invalid payment type. Must be one of: {', '.join(PAYMENT_TYPES)}", field="payment_type")
        if data.get("amount") is not None and data["amount"] <= 0:
            raise ValidationError("Amount must be greater than zero", field="amount")

    async def create_payment(self, landlord_id: int, data: Dict[str, Any]) -> RentPayment:
        """Record a payment against one of the landlord's leases"""
        self._check(data)
        lease = await self.leases.get(data["lease_id"])
        if not lease or lease.landlord_id != landlord_id:
            raise NotFoundError("Lease", data["lease_id"])
        payload = {
            "status": "pending",
            "payment_type": "monthly_rent",
            **data,
            "property_id": lease.property_id,
            "landlord_id": landlord_id,
            "renter_id": lease.renter_id,
            "renter_email": lease.renter_email,
        }
        if payload["status"] == "paid" and not payload.get("paid_date"):
            payload["paid_date"] = utcnow()
        return await self.repo.create(obj_in=payload)

    async def update_payment(self, landlord_id: int, payment_id: int, data: Dict[str, Any]) -> RentPayment:
        self._check(data)
        payment = await self.repo.get(payment_id)
        if not payment or payment.landlord_id != landlord_id:
            raise NotFoundError("Payment", payment_id)
        for field in ("amount", "due_date", "paid_date", "status", "payment_type", "payment_method", "transaction_id"):
            if field in data:
                setattr(payment, field, data[field])
        if payment.status == "paid" and payment.paid_date is None:
            payment.paid_date = utcnow()
        await self.session.flush()
        return payment

    async def check_existing_payment(self, lease_id: int, amount: Decimal, due_date: date) -> bool:
        """True when a paid or pending payment of *amount* exists in the month of *due_date*"""
        return await self.repo.find_in_month(lease_id, amount, due_date) is not None

    async def generate_monthly_schedule(self, lease: Lease) -> List[RentPayment]:
        """One pending ``monthly_rent`` payment per month of the lease term."""
        created: List[RentPayment] = []
        months = 0
        due = lease.start_date
        while due < lease.end_date:
            if not await self.check_existing_payment(lease.id, lease.monthly_rent, due):
                created.append(await self.repo.create(obj_in={
                    "lease_id": lease.id,
                    "property_id": lease.property_id,
                    "landlord_id": lease.landlord_id,
                    "renter_id": lease.renter_id,
                    "renter_email": lease.renter_email,
                    "amount": lease.monthly_rent,
                    "due_date": due,
                    "status": "pending",
                    "payment_type": "monthly_rent",
                }))
            months += 1
            due = add_months(lease.start_date, months)
        logger.info("Generated %d scheduled payments for lease %s", len(created), lease.id)
        return created

    async def remove_duplicate_payments(self, landlord_id: int, lease_id: int) -> int:
        """Keep one payment per (month, year, amount): the paid one, else the oldest."""
        lease = await self.leases.get(lease_id)
        if not lease or lease.landlord_id != landlord_id:
            raise NotFoundError("Lease", lease_id)

        groups: Dict[tuple, List[RentPayment]] = defaultdict(list)
        for payment in await self.repo.get_by_lease(lease_id):
            key = (payment.due_date.year, payment.due_date.month, Decimal(str(payment.amount)))
            groups[key].append(payment)

        removed = 0
        for payments in groups.values():
            if len(payments) < 2:
                continue
            payments.sort(key=lambda p: (p.created_at, p.id))
            keep = next((p for p in payments if p.status == "paid"), payments[0])
            for payment in payments:
                if payment is not keep:
                    await self.session.delete(payment)
                    removed += 1
        await self.session.flush()
        if removed:
            logger.info("Removed %d duplicate payments from lease %s", removed, lease_id)
        return removed

    async def mark_overdue(self, today: Optional[date] = None) -> int:
        count = await self.repo.mark_overdue(today or date.today(), utcnow())
        if count:
            logger.info("Marked %d payments overdue", count)
        return count

    async def pay(self, renter: dict, payment_id: int, payment_intent_id: str) -> RentPayment:
        """Mark a payment paid once Stripe confirms the intent"""
        payment = await self.get_payment(renter, payment_id)
        if payment.status == "paid":
            raise BusinessLogicError("Payment is already paid", rule="payment_already_paid")
        await ensure_intent_unused(self.session, payment_intent_id)
        await self.stripe.verify_payment(payment_intent_id, payment.amount, {"payment_id": payment.id})
        payment.status = "paid"
        payment.paid_date = utcnow()
        payment.payment_method = "card"
        payment.transaction_id = payment_intent_id
        await self.session.flush()
        logger.info("Payment %s paid via %s", payment.id, payment_intent_id)
        return payment

    async def income_summary(self, landlord_id: int) -> Dict[str, Any]:
        """Paid payments grouped by (property, renter email)."""
        properties = {p.id: p for p in await PropertyRepository(self.session).get_by_landlord(landlord_id)}
        groups: Dict[tuple, Dict[str, Any]] = {}
        grand_total = Decimal("0")
        for payment in await self.repo.get_by_landlord(landlord_id, status="paid"):
            amount = Decimal(str(payment.amount))
            key = (payment.property_id, (payment.renter_email or "").lower())
            entry = groups.get(key)
            if entry is None:
                prop = properties.get(payment.property_id)
                entry = groups[key] = {
                    "property_id": payment.property_id,
                    "property_address": prop.address_line if prop else None,
                    "renter_email": key[1] or None,
                    "total": Decimal("0"),
                    "breakdown": {t: Decimal("0") for t in PAYMENT_TYPES},
                    "payments": 0,
                    "last_paid": None,
                }
            entry["total"] += amount
            entry["breakdown"][payment.payment_type] = entry["breakdown"].get(payment.payment_type, Decimal("0")) + amount
            entry["payments"] += 1
            if payment.paid_date and (entry["last_paid"] is None or payment.paid_date > entry["last_paid"]):
                entry["last_paid"] = payment.paid_date
            grand_total += amount

        incomes = sorted(groups.values(), key=lambda e: e["total"], reverse=True)
        return {"total": grand_total, "incomes": incomes}


def is_lease_party(user: dict, lease: Lease) -> bool:
    role = user.get("role")
    if role == Role.admin.value:
        return True
    if role == Role.landlord.value:
        return lease.landlord_id == int(user["sub"])
    return lease.renter_id == int(user["sub"]) or lease.renter_email.lower() == (user.get("email") or "").lower()
