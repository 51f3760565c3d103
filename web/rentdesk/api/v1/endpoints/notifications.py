from typing import List

from fastapi import APIRouter, Depends

from rentdesk.api.v1.schemas import NotificationOut, CountOut
from rentdesk.deps import SessionDep
from rentdesk.security import role_required
from rentdesk.services import NotificationService
from rentdesk.api.v1.endpoints.utils import get_user_id


router = APIRouter()


@router.get("", response_model=List[NotificationOut])
async def list_notifications(sess: SessionDep, user=Depends(role_required("landlord"))):
    """Recent notifications, newest first"""
    notifications = await NotificationService(sess).get_landlord_notifications(get_user_id(user))
    return [NotificationOut.model_validate(n) for n in notifications]


@router.get("/unread-count", response_model=CountOut)
async def unread_count(sess: SessionDep, user=Depends(role_required("landlord"))):
    return CountOut(count=await NotificationService(sess).get_unread_count(get_user_id(user)))


@router.post("/read-all", response_model=CountOut)
async def mark_all_read(sess: SessionDep, user=Depends(role_required("landlord"))):
    updated = await NotificationService(sess).mark_all_as_read(get_user_id(user))
    await sess.commit()
    return CountOut(count=updated)


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(notification_id: int, sess: SessionDep, user=Depends(role_required("landlord"))):
    notification = await NotificationService(sess).mark_as_read(get_user_id(user), notification_id)
    await sess.commit()
    return NotificationOut.model_validate(notification)
