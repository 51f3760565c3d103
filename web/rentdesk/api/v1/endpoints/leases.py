from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from rentdesk import storage
from rentdesk.api.v1.schemas import (
    LeaseIn, LeaseUpdate, LeaseOut, LeaseSignIn, LeaseRejectIn, LeaseStartIn, DocumentOut,
)
from rentdesk.deps import SessionDep
from rentdesk.security import current_user, role_required, client_ip
from rentdesk.services import LeaseService, DocumentService
from rentdesk.api.v1.endpoints.utils import get_user_id, to_data


router = APIRouter()

landlord_only = role_required("landlord")


@router.post("", response_model=LeaseOut, status_code=status.HTTP_201_CREATED)
async def create_lease(payload: LeaseIn, sess: SessionDep, user=Depends(landlord_only)):
    """Create a lease (draft, sent for signature, or active with a rent schedule)"""
    lease = await LeaseService(sess).create_lease(get_user_id(user), to_data(payload, "lease_terms"))
    await sess.commit()
    return LeaseOut.model_validate(lease)


@router.get("", response_model=List[LeaseOut])
async def list_leases(
    sess: SessionDep,
    status: Optional[str] = Query(None, pattern="^(draft|pending_signature|active|expired|terminated)$"),
    user=Depends(landlord_only),
):
    leases = await LeaseService(sess).list_landlord_leases(get_user_id(user), status)
    return [LeaseOut.model_validate(lease) for lease in leases]


@router.get("/mine", response_model=List[LeaseOut])
async def my_leases(sess: SessionDep, user=Depends(role_required("renter"))):
    leases = await LeaseService(sess).list_renter_leases(user)
    return [LeaseOut.model_validate(lease) for lease in leases]


@router.get("/{lease_id}", response_model=LeaseOut)
async def get_lease(lease_id: int, sess: SessionDep, user=Depends(current_user)):
    return LeaseOut.model_validate(await LeaseService(sess).get_lease(user, lease_id))


@router.patch("/{lease_id}", response_model=LeaseOut)
async def update_lease(lease_id: int, payload: LeaseUpdate, sess: SessionDep, user=Depends(landlord_only)):
    lease = await LeaseService(sess).update_lease(
        get_user_id(user), lease_id, to_data(payload, "lease_terms", exclude_unset=True)
    )
    await sess.commit()
    return LeaseOut.model_validate(lease)


@router.delete("/{lease_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lease(lease_id: int, sess: SessionDep, user=Depends(landlord_only)):
    await LeaseService(sess).delete_lease(get_user_id(user), lease_id)
    await sess.commit()


@router.post("/{lease_id}/start", response_model=LeaseOut)
async def start_lease(
    lease_id: int,
    sess: SessionDep,
    payload: Optional[LeaseStartIn] = None,
    user=Depends(landlord_only),
):
    """Activate the lease: property occupied, rent schedule generated"""
    payload = payload or LeaseStartIn()
    lease = await LeaseService(sess).start_lease(
        get_user_id(user), lease_id, payload.start_date, payload.end_date
    )
    await sess.commit()
    return LeaseOut.model_validate(lease)


@router.post("/{lease_id}/document", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
async def generate_document(lease_id: int, sess: SessionDep, user=Depends(landlord_only)):
    """Render the lease agreement PDF and store it"""
    document = await DocumentService(sess).generate_lease_document(get_user_id(user), lease_id)
    await sess.commit()
    out = DocumentOut.model_validate(document)
    out.url = storage.presigned(document.key)
    return out


@router.post("/{lease_id}/sign", response_model=LeaseOut)
async def sign_lease(
    lease_id: int,
    payload: LeaseSignIn,
    request: Request,
    sess: SessionDep,
    user=Depends(role_required("landlord", "renter")),
):
    lease = await LeaseService(sess).sign(
        lease_id, user, payload.party, payload.signature_data, ip_address=client_ip(request)
    )
    await sess.commit()
    return LeaseOut.model_validate(lease)


@router.post("/{lease_id}/reject", response_model=LeaseOut)
async def reject_lease(
    lease_id: int,
    sess: SessionDep,
    payload: Optional[LeaseRejectIn] = None,
    user=Depends(role_required("renter")),
):
    lease = await LeaseService(sess).reject(lease_id, user, payload.reason if payload else None)
    await sess.commit()
    return LeaseOut.model_validate(lease)
