import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from rentdesk.api.v1.schemas import (
    PaymentIn, PaymentUpdate, PaymentOut, PaymentIntentIn, PaymentIntentOut, PayIn,
    IncomeSummary, DedupeOut,
)
from rentdesk.core import ValidationError
from rentdesk.deps import SessionDep
from rentdesk.security import current_user, role_required
from rentdesk.services import PaymentService, InvoiceService, StripeService
from rentdesk.api.v1.endpoints.utils import get_user_id, get_user_email, to_data

logger = logging.getLogger(__name__)

router = APIRouter()

landlord_only = role_required("landlord")
renter_only = role_required("renter")

STATUS_PATTERN = "^(pending|paid|overdue|partial)$"


@router.get("/lease/{lease_id}", response_model=List[PaymentOut])
async def lease_payments(lease_id: int, sess: SessionDep, user=Depends(current_user)):
    """All payments of a lease, latest due date first"""
    payments = await PaymentService(sess).get_lease_payments(user, lease_id)
    return [PaymentOut.model_validate(p) for p in payments]


@router.get("/lease/{lease_id}/overdue", response_model=List[PaymentOut])
async def overdue_payments(lease_id: int, sess: SessionDep, user=Depends(current_user)):
    payments = await PaymentService(sess).get_overdue_payments(user, lease_id)
    return [PaymentOut.model_validate(p) for p in payments]


@router.get("/lease/{lease_id}/pending", response_model=List[PaymentOut])
async def pending_payments(lease_id: int, sess: SessionDep, user=Depends(current_user)):
    payments = await PaymentService(sess).get_pending_payments(user, lease_id)
    return [PaymentOut.model_validate(p) for p in payments]


@router.post("/lease/{lease_id}/dedupe", response_model=DedupeOut)
async def dedupe_payments(lease_id: int, sess: SessionDep, user=Depends(landlord_only)):
    """Drop duplicate payments of the same month and amount"""
    removed = await PaymentService(sess).remove_duplicate_payments(get_user_id(user), lease_id)
    await sess.commit()
    return DedupeOut(removed=removed)


@router.get("", response_model=List[PaymentOut])
async def landlord_payments(
    sess: SessionDep,
    status: Optional[str] = Query(None, pattern=STATUS_PATTERN),
    user=Depends(landlord_only),
):
    payments = await PaymentService(sess).get_landlord_payments(get_user_id(user), status)
    return [PaymentOut.model_validate(p) for p in payments]


@router.post("", response_model=PaymentOut, status_code=201)
async def create_payment(payload: PaymentIn, sess: SessionDep, user=Depends(landlord_only)):
    payment = await PaymentService(sess).create_payment(get_user_id(user), payload.model_dump(exclude_unset=True))
    await sess.commit()
    return PaymentOut.model_validate(payment)


@router.patch("/{payment_id}", response_model=PaymentOut)
async def update_payment(payment_id: int, payload: PaymentUpdate, sess: SessionDep, user=Depends(landlord_only)):
    payment = await PaymentService(sess).update_payment(
        get_user_id(user), payment_id, to_data(payload, exclude_unset=True)
    )
    await sess.commit()
    return PaymentOut.model_validate(payment)


@router.get("/income", response_model=IncomeSummary)
async def income(sess: SessionDep, user=Depends(landlord_only)):
    """Paid income per property and renter"""
    return await PaymentService(sess).income_summary(get_user_id(user))


@router.get("/mine", response_model=List[PaymentOut])
async def my_payments(sess: SessionDep, user=Depends(renter_only)):
    payments = await PaymentService(sess).get_renter_payments(user)
    return [PaymentOut.model_validate(p) for p in payments]


@router.post("/intent", response_model=PaymentIntentOut)
async def create_intent(payload: PaymentIntentIn, sess: SessionDep, user=Depends(renter_only)):
    """Create a card PaymentIntent for an invoice, a scheduled payment or a raw amount"""
    amount = payload.amount
    metadata = {"renter_email": get_user_email(user)}
    if payload.invoice_id is not None:
        invoice = await InvoiceService(sess).get_invoice(user, payload.invoice_id)
        if invoice.status != "sent":
            raise ValidationError(f"Invoice is {invoice.status}", field="invoice_id")
        amount = invoice.amount
        metadata["invoice_id"] = invoice.id
    elif payload.payment_id is not None:
        payment = await PaymentService(sess).get_payment(user, payload.payment_id)
        if payment.status == "paid":
            raise ValidationError("Payment is already paid", field="payment_id")
        amount = payment.amount
        metadata["payment_id"] = payment.id
    intent = await StripeService().create_payment_intent(amount, payload.currency, metadata)
    return PaymentIntentOut(**intent)


@router.post("/{payment_id}/pay", response_model=PaymentOut)
async def pay_payment(payment_id: int, payload: PayIn, sess: SessionDep, user=Depends(renter_only)):
    payment = await PaymentService(sess).pay(user, payment_id, payload.payment_intent_id)
    await sess.commit()
    return PaymentOut.model_validate(payment)


@router.post("/webhook")
async def stripe_webhook(request: Request, sess: SessionDep):
    """Stripe events; a succeeded intent carrying an invoice id and its total settles that invoice"""
    event = StripeService().construct_event(await request.body(), request.headers.get("Stripe-Signature"))
    if event["type"] == "payment_intent.succeeded":
        intent = event["data"]["object"]
        invoice = await InvoiceService(sess).settle_from_intent(intent)
        if invoice is not None:
            await sess.commit()
            logger.info("Invoice %s settled by webhook (%s)", invoice.id, intent["id"])
    return {"received": True}
