from typing import List

from fastapi import APIRouter, Depends, status

from rentdesk.api.v1.schemas import InvoiceIn, InvoiceOut, InvoiceStatusIn, PayIn
from rentdesk.deps import SessionDep
from rentdesk.security import current_user, role_required
from rentdesk.services import InvoiceService
from rentdesk.api.v1.endpoints.utils import get_user_id, get_user_email


router = APIRouter()


@router.post("", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
async def create_invoice(payload: InvoiceIn, sess: SessionDep, user=Depends(role_required("landlord"))):
    """Bill a renter for move-in: rent, deposit, application fee and optional pet fee"""
    invoice = await InvoiceService(sess).create_invoice(
        get_user_id(user), payload.property_id, payload.renter_email, payload.include_pet_fee, payload.notes
    )
    await sess.commit()
    return InvoiceOut.model_validate(invoice)


@router.get("", response_model=List[InvoiceOut])
async def list_invoices(sess: SessionDep, user=Depends(role_required("landlord"))):
    invoices = await InvoiceService(sess).list_landlord_invoices(get_user_id(user))
    return [InvoiceOut.model_validate(i) for i in invoices]


@router.get("/mine", response_model=List[InvoiceOut])
async def my_invoices(sess: SessionDep, user=Depends(role_required("renter"))):
    invoices = await InvoiceService(sess).list_renter_invoices(get_user_email(user))
    return [InvoiceOut.model_validate(i) for i in invoices]


@router.get("/{invoice_id}", response_model=InvoiceOut)
async def get_invoice(invoice_id: int, sess: SessionDep, user=Depends(current_user)):
    return InvoiceOut.model_validate(await InvoiceService(sess).get_invoice(user, invoice_id))


@router.patch("/{invoice_id}/status", response_model=InvoiceOut)
async def update_invoice_status(
    invoice_id: int,
    payload: InvoiceStatusIn,
    sess: SessionDep,
    user=Depends(role_required("landlord")),
):
    """Change status; ``paid`` records the payment and moves the renter in"""
    invoice = await InvoiceService(sess).update_status(get_user_id(user), invoice_id, payload.status)
    await sess.commit()
    return InvoiceOut.model_validate(invoice)


@router.post("/{invoice_id}/pay", response_model=InvoiceOut)
async def pay_invoice(invoice_id: int, payload: PayIn, sess: SessionDep, user=Depends(role_required("renter"))):
    invoice = await InvoiceService(sess).pay_invoice(user, invoice_id, payload.payment_intent_id)
    await sess.commit()
    return InvoiceOut.model_validate(invoice)
