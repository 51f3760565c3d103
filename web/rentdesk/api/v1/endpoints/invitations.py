from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from rentdesk.api.v1.schemas import InvitationIn, InvitationOut, InvitationRespond
from rentdesk.deps import SessionDep
from rentdesk.security import role_required
from rentdesk.services import InvitationService
from rentdesk.api.v1.endpoints.utils import get_user_id, get_user_email


router = APIRouter()


@router.post("", response_model=InvitationOut, status_code=status.HTTP_201_CREATED)
async def create_invitation(payload: InvitationIn, sess: SessionDep, user=Depends(role_required("landlord"))):
    """Invite a renter (by email) to apply for a property"""
    invitation = await InvitationService(sess).create_invitation(
        get_user_id(user), payload.property_id, payload.renter_email, payload.message
    )
    await sess.commit()
    return InvitationOut.model_validate(invitation)


@router.get("", response_model=List[InvitationOut])
async def list_invitations(sess: SessionDep, user=Depends(role_required("landlord"))):
    invitations = await InvitationService(sess).list_landlord_invitations(get_user_id(user))
    return [InvitationOut.model_validate(i) for i in invitations]


@router.get("/mine", response_model=List[InvitationOut])
async def my_invitations(
    sess: SessionDep,
    status: Optional[str] = Query(None, pattern="^(pending|accepted|declined|expired)$"),
    user=Depends(role_required("renter")),
):
    invitations = await InvitationService(sess).list_invitations_for_email(get_user_email(user), status)
    return [InvitationOut.model_validate(i) for i in invitations]


@router.post("/{invitation_id}/respond", response_model=InvitationOut)
async def respond_to_invitation(
    invitation_id: int,
    payload: InvitationRespond,
    sess: SessionDep,
    user=Depends(role_required("renter")),
):
    invitation = await InvitationService(sess).respond(invitation_id, get_user_email(user), payload.accept)
    await sess.commit()
    return InvitationOut.model_validate(invitation)
