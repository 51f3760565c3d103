from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from rentdesk import storage
from rentdesk.api.v1.schemas import NoticeOut, CountOut
from rentdesk.deps import SessionDep
from rentdesk.security import current_user, role_required
from rentdesk.services import NoticeService
from rentdesk.api.v1.endpoints.utils import get_user_id, get_user_email


router = APIRouter()


def notice_out(notice) -> NoticeOut:
    """NoticeOut with download URLs for attachments"""
    out = NoticeOut.model_validate(notice)
    for attachment in out.attachments:
        attachment.url = storage.presigned(attachment.key)
    return out


@router.post("", response_model=NoticeOut, status_code=status.HTTP_201_CREATED)
async def create_notice(
    sess: SessionDep,
    property_id: int = Form(...),
    type: str = Form(...),
    subject: str = Form(..., min_length=1, max_length=200),
    message: str = Form(..., min_length=1, max_length=5000),
    renter_email: Optional[str] = Form(None),
    attachments: List[UploadFile] = File(default=[]),
    user=Depends(role_required("landlord", "renter")),
):
    """Send a notice (multipart form, attachments up to 10 MB each)"""
    notice = await NoticeService(sess).create_notice(
        user,
        {
            "property_id": property_id,
            "type": type,
            "subject": subject,
            "message": message,
            "renter_email": renter_email,
        },
        attachments,
    )
    await sess.commit()
    return notice_out(notice)


@router.get("", response_model=List[NoticeOut])
async def list_landlord_notices(sess: SessionDep, user=Depends(role_required("landlord"))):
    notices = await NoticeService(sess).get_landlord_notices(get_user_id(user))
    return [notice_out(n) for n in notices]


@router.get("/lease", response_model=List[NoticeOut])
async def list_lease_notices(sess: SessionDep, user=Depends(role_required("landlord"))):
    """Lease sent / lease signed notices of the landlord"""
    notices = await NoticeService(sess).get_landlord_lease_notices(get_user_id(user))
    return [notice_out(n) for n in notices]


@router.get("/mine", response_model=List[NoticeOut])
async def list_my_notices(sess: SessionDep, user=Depends(role_required("renter"))):
    notices = await NoticeService(sess).get_renter_notices(get_user_email(user))
    return [notice_out(n) for n in notices]


@router.get("/unread-count", response_model=CountOut)
async def unread_count(sess: SessionDep, user=Depends(role_required("renter"))):
    return CountOut(count=await NoticeService(sess).get_unread_notices_count(get_user_email(user)))


@router.get("/{notice_id}", response_model=NoticeOut)
async def get_notice(notice_id: int, sess: SessionDep, user=Depends(current_user)):
    return notice_out(await NoticeService(sess).get_notice(user, notice_id))


@router.post("/{notice_id}/read", response_model=NoticeOut)
async def mark_notice_read(notice_id: int, sess: SessionDep, user=Depends(current_user)):
    notice = await NoticeService(sess).mark_as_read(user, notice_id)
    await sess.commit()
    return notice_out(notice)


@router.delete("/{notice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notice(notice_id: int, sess: SessionDep, user=Depends(role_required("landlord"))):
    await NoticeService(sess).delete_notice(user, notice_id)
    await sess.commit()
