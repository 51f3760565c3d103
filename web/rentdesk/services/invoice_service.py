"""Move-in invoices and their settlement."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import BaseService, NotFoundError, ValidationError, BusinessLogicError
from ..infrastructure.repositories import (
    InvoiceRepository, PropertyRepository, LeaseRepository, UserRepository,
    RentPaymentRepository,
)
from ..models import Invoice, Lease, utcnow
from ..roles import Role
from .lease_service import LeaseService
from .notice_service import NoticeService
from .notification_service import NotificationService
from .payment_service import add_months, ensure_intent_unused
from .property_service import property_snapshot
from .renter_status_service import RenterStatusService
from .security_deposit_service import SecurityDepositService
from .stripe_service import StripeService, to_cents

logger = logging.getLogger(__name__)

INVOICE_STATUSES = ("draft", "sent", "paid", "cancelled")

ZERO = Decimal("0")


class InvoiceService(BaseService):
    """Service for invoice operations."""

    def __init__(self, session: AsyncSession, stripe_service: Optional[StripeService] = None):
        super().__init__(session)
        self.repo = InvoiceRepository(session)
        self.properties = PropertyRepository(session)
        self.leases = LeaseRepository(session)
        self.users = UserRepository(session)
        self.notices = NoticeService(session)
        self.stripe = stripe_service or StripeService()

    async def create_invoice(
        self,
        landlord_id: int,
        property_id: int,
        renter_email: str,
        include_pet_fee: bool = False,
        notes: Optional[str] = None,
    ) -> Invoice:
        """Bill rent, deposit, application fee and optionally the pet fee."""
        prop = await self.properties.get_owned(property_id, landlord_id)
        if not prop:
            raise NotFoundError("Property", property_id)

        email = renter_email.lower()
        rent = Decimal(str(prop.monthly_rent or 0))
        deposit = Decimal(str(prop.security_deposit or 0))
        app_fee = Decimal(str(prop.application_fee or 0))
        pet_fee = Decimal(str(prop.pet_fee)) if include_pet_fee else ZERO
        amount = rent + deposit + app_fee + pet_fee
        if amount <= 0:
            raise ValidationError("Invoice amount must be greater than zero", field="amount")

        renter = await self.users.get_by_email(email)
        invoice = await self.repo.create(obj_in={
            "landlord_id": landlord_id,
            "property_id": property_id,
            "renter_id": renter.id if renter else None,
            "renter_email": email,
            "amount": amount,
            "monthly_rent": rent,
            "security_deposit": deposit,
            "application_fee": app_fee,
            "pet_fee": pet_fee,
            "include_pet_fee": include_pet_fee,
            "notes": notes,
            "status": "sent",
            "property_details": property_snapshot(prop),
        })
        logger.info("Invoice %s for %s sent to %s", invoice.id, amount, email)

        try:
            async with self.session.begin_nested():
                notice = await self.notices.send_system_notice(
                    landlord_id=landlord_id,
                    property_id=property_id,
                    renter_email=email,
                    renter_id=invoice.renter_id,
                    type="invoice_sent",
                    subject="Move-in invoice",
                    message=f"An invoice of ${amount:.2f} for {prop.address_line} is ready to pay.",
                    invoice_id=invoice.id,
                )
                invoice.notice_id = notice.id
                await self.session.flush()
                await RenterStatusService(self.session).advance(property_id, landlord_id, email, "payment")
        except Exception:
            logger.exception("Side effects of invoice %s failed", invoice.id)
            # the savepoint rollback expired notice_id
            await self.session.refresh(invoice)
        return invoice

    async def list_renter_invoices(self, email: str) -> List[Invoice]:
        return await self.repo.get_by_email(email)

    async def list_landlord_invoices(self, landlord_id: int) -> List[Invoice]:
        return await self.repo.get_by_landlord(landlord_id)

    async def get_invoice(self, user: dict, invoice_id: int) -> Invoice:
        invoice = await self.repo.get(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        role = user.get("role")
        if role == Role.landlord.value and invoice.landlord_id != int(user["sub"]):
            raise NotFoundError("Invoice", invoice_id)
        if role == Role.renter.value and invoice.renter_email.lower() != user["email"].lower():
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    async def update_status(self, landlord_id: int, invoice_id: int, status: str) -> Invoice:
        if status not in INVOICE_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(INVOICE_STATUSES)}", field="status")
        invoice = await self.repo.get(invoice_id)
        if not invoice or invoice.landlord_id != landlord_id:
            raise NotFoundError("Invoice", invoice_id)
        if invoice.status == "paid" and status != "paid":
            raise BusinessLogicError("Paid invoices cannot change status", rule="invoice_paid")
        if status == "paid":
            return await self.settle_invoice(invoice.id, transaction_id=None, method="manual")
        invoice.status = status
        await self.session.flush()
        return invoice

    async def pay_invoice(self, renter: dict, invoice_id: int, payment_intent_id: str) -> Invoice:
        invoice = await self.get_invoice(renter, invoice_id)
        if invoice.status == "paid":
            return invoice
        if invoice.status != "sent":
            raise BusinessLogicError(f"Invoice is {invoice.status}", rule="invoice_not_payable")
        await ensure_intent_unused(self.session, payment_intent_id)
        await self.stripe.verify_payment(payment_intent_id, invoice.amount, {"invoice_id": invoice.id})
        return await self.settle_invoice(invoice.id, transaction_id=payment_intent_id, method="card")

    async def settle_from_intent(self, intent) -> Optional[Invoice]:
        """Settle the invoice a succeeded intent was created for.

        Intents without an invoice id, or whose amount differs from the
        invoice total, are ignored and ``None`` is returned.
        """
        invoice_id = (intent.get("metadata") or {}).get("invoice_id")
        if not invoice_id:
            return None
        invoice = await self.repo.get(int(invoice_id))
        if not invoice:
            logger.warning("Intent %s names unknown invoice %s", intent["id"], invoice_id)
            return None
        if int(intent.get("amount") or 0) != to_cents(invoice.amount):
            logger.warning(
                "Intent %s amount %s does not match invoice %s (%s)",
                intent["id"], intent.get("amount"), invoice.id, invoice.amount,
            )
            return None
        return await self.settle_invoice(invoice.id, transaction_id=intent["id"], method="card")

    async def settle_invoice(
        self,
        invoice_id: int,
        transaction_id: Optional[str],
        method: str = "card",
    ) -> Invoice:
        """Mark the invoice paid and move the renter in.

        Settling an already paid invoice returns it unchanged.
        """
        invoice = await self.repo.get(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        if invoice.status == "paid":
            return invoice
        if invoice.status == "cancelled":
            raise BusinessLogicError("Invoice was cancelled", rule="invoice_cancelled")

        now = utcnow()
        invoice.status = "paid"
        invoice.paid_at = now
        invoice.transaction_id = transaction_id
        if invoice.renter_id is None:
            renter = await self.users.get_by_email(invoice.renter_email)
            invoice.renter_id = renter.id if renter else None
        await self.session.flush()

        lease = await self.leases.find_for_renter_on_property(invoice.property_id, invoice.renter_email)
        if lease is None:
            lease = await self._create_move_in_lease(invoice)

        deposit = Decimal(str(invoice.security_deposit or 0))
        if deposit > 0:
            await SecurityDepositService(self.session).create_deposit({
                "lease_id": lease.id,
                "property_id": invoice.property_id,
                "renter_id": invoice.renter_id,
                "renter_email": invoice.renter_email,
                "landlord_id": invoice.landlord_id,
                "amount": deposit,
                "paid_date": now,
                "payment_method": method,
                "transaction_id": transaction_id,
                "invoice_id": invoice.id,
            })

        payments = RentPaymentRepository(self.session)
        for payment_type in ("monthly_rent", "application_fee", "pet_fee"):
            amount = Decimal(str(getattr(invoice, payment_type) or 0))
            if amount <= 0:
                continue
            await payments.create(obj_in={
                "lease_id": lease.id,
                "property_id": invoice.property_id,
                "landlord_id": invoice.landlord_id,
                "renter_id": invoice.renter_id,
                "renter_email": invoice.renter_email,
                "invoice_id": invoice.id,
                "amount": amount,
                "due_date": lease.start_date,
                "paid_date": now,
                "status": "paid",
                "payment_type": payment_type,
                "payment_method": method,
                "transaction_id": transaction_id,
            })

        if lease.status != "active":
            await LeaseService(self.session).activate(lease)
        logger.info("Invoice %s settled; lease %s active", invoice.id, lease.id)

        await self._announce_move_in(invoice)
        return invoice

    async def _create_move_in_lease(self, invoice: Invoice) -> Lease:
        """One-year lease, already signed by everyone, for renters paying without a lease"""
        now = utcnow()
        today = date.today()
        return await self.leases.create(obj_in={
            "property_id": invoice.property_id,
            "landlord_id": invoice.landlord_id,
            "renter_id": invoice.renter_id,
            "renter_email": invoice.renter_email,
            "start_date": today,
            "end_date": add_months(today, 12),
            "monthly_rent": invoice.monthly_rent,
            "security_deposit": invoice.security_deposit,
            "status": "pending_signature",
            "lease_terms": {},
            "renter_signed": True,
            "renter_signed_at": now,
            "landlord_signed": True,
            "landlord_signed_at": now,
            "completed_at": now,
        })

    async def _announce_move_in(self, invoice: Invoice) -> None:
        address = (invoice.property_details or {}).get("address", "your property")
        amount = Decimal(str(invoice.amount))
        try:
            async with self.session.begin_nested():
                await self.notices.send_system_notice(
                    landlord_id=invoice.landlord_id,
                    property_id=invoice.property_id,
                    renter_email=invoice.renter_email,
                    renter_id=invoice.renter_id,
                    type="payment_received",
                    subject="Payment received",
                    message=f"{invoice.renter_email} paid ${amount:.2f} for {address}.",
                    invoice_id=invoice.id,
                )
                await self.notices.send_system_notice(
                    landlord_id=invoice.landlord_id,
                    property_id=invoice.property_id,
                    renter_email=invoice.renter_email,
                    renter_id=invoice.renter_id,
                    type="payment_successful",
                    subject="Payment successful",
                    message=f"Your payment of ${amount:.2f} for {address} was received. Welcome home!",
                    invoice_id=invoice.id,
                )
                await NotificationService(self.session).notify_tenant_moved_in(
                    invoice.landlord_id, invoice.property_id, invoice.renter_email, address
                )
        except Exception:
            logger.exception("Move-in notices for invoice %s failed", invoice.id)
