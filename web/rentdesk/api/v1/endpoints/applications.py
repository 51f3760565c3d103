from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from rentdesk.api.v1.schemas import ApplicationIn, ApplicationOut, ApplicationReview
from rentdesk.deps import SessionDep
from rentdesk.security import current_user, role_required, client_ip
from rentdesk.services import ApplicationService
from rentdesk.api.v1.endpoints.utils import get_user_id, to_data


router = APIRouter()


@router.post("", response_model=ApplicationOut, status_code=status.HTTP_201_CREATED)
async def submit_application(
    payload: ApplicationIn,
    request: Request,
    sess: SessionDep,
    user=Depends(role_required("renter")),
):
    """Submit an application for an accepted invitation (or save it as a draft)"""
    data = to_data(payload, "application_data")
    for name in ("invitation_id", "draft"):
        data.pop(name)
    application = await ApplicationService(sess).create_application(
        user, payload.invitation_id, data, draft=payload.draft, ip_address=client_ip(request)
    )
    await sess.commit()
    return ApplicationOut.model_validate(application)


@router.get("/mine", response_model=List[ApplicationOut])
async def my_applications(sess: SessionDep, user=Depends(role_required("renter"))):
    applications = await ApplicationService(sess).list_for_renter(user)
    return [ApplicationOut.model_validate(a) for a in applications]


@router.get("", response_model=List[ApplicationOut])
async def list_applications(
    sess: SessionDep,
    status: Optional[str] = Query(None, pattern="^(draft|submitted|under_review|approved|rejected)$"),
    user=Depends(role_required("landlord")),
):
    applications = await ApplicationService(sess).list_for_landlord(get_user_id(user), status)
    return [ApplicationOut.model_validate(a) for a in applications]


@router.get("/{application_id}", response_model=ApplicationOut)
async def get_application(application_id: int, sess: SessionDep, user=Depends(current_user)):
    return ApplicationOut.model_validate(await ApplicationService(sess).get_application(user, application_id))


@router.post("/{application_id}/review", response_model=ApplicationOut)
async def review_application(
    application_id: int,
    payload: ApplicationReview,
    sess: SessionDep,
    user=Depends(role_required("landlord")),
):
    application = await ApplicationService(sess).review(get_user_id(user), application_id, payload.status)
    await sess.commit()
    return ApplicationOut.model_validate(application)
