from typing import List

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from rentdesk import storage
from rentdesk.api.v1.schemas import (
    PropertyIn, PropertyUpdate, PropertyOut, InvitationOut, ApplicationOut,
    LeaseOut, NoticeOut, RenterStatusOut, PropertyDocumentOut,
)
from rentdesk.deps import SessionDep
from rentdesk.security import current_user, role_required
from rentdesk.services import (
    PropertyService, InvitationService, ApplicationService, LeaseService, NoticeService,
    RenterStatusService, DocumentService,
)
from rentdesk.api.v1.endpoints.notices import notice_out
from rentdesk.api.v1.endpoints.utils import get_user_id, to_data


router = APIRouter()

landlord_only = role_required("landlord")


def property_out(prop) -> PropertyOut:
    """PropertyOut with browser-ready image URLs"""
    out = PropertyOut.model_validate(prop)
    out.image_urls = [storage.presigned(key) for key in out.images]
    return out


@router.get("", response_model=List[PropertyOut])
async def list_properties(sess: SessionDep, user=Depends(landlord_only)):
    """List the landlord's properties, newest first"""
    props = await PropertyService(sess).list_landlord_properties(get_user_id(user))
    return [property_out(p) for p in props]


@router.post("", response_model=PropertyOut, status_code=status.HTTP_201_CREATED)
async def create_property(payload: PropertyIn, sess: SessionDep, user=Depends(landlord_only)):
    prop = await PropertyService(sess).add_property(
        get_user_id(user), to_data(payload, "pet_policy", "amenities")
    )
    await sess.commit()
    return property_out(prop)


@router.get("/{property_id}", response_model=PropertyOut)
async def get_property(property_id: int, sess: SessionDep, user=Depends(landlord_only)):
    return property_out(await PropertyService(sess).get_property(get_user_id(user), property_id))


@router.get("/{property_id}/public", response_model=PropertyOut)
async def get_property_public(property_id: int, sess: SessionDep, user=Depends(current_user)):
    """Property view for renters who were invited to, applied to or lease it"""
    return property_out(await PropertyService(sess).get_property_for_user(user, property_id))


@router.patch("/{property_id}", response_model=PropertyOut)
async def update_property(
    property_id: int,
    payload: PropertyUpdate,
    sess: SessionDep,
    user=Depends(landlord_only),
):
    prop = await PropertyService(sess).update_property(
        get_user_id(user), property_id, to_data(payload, "pet_policy", "amenities", exclude_unset=True)
    )
    await sess.commit()
    return property_out(prop)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property(property_id: int, sess: SessionDep, user=Depends(landlord_only)):
    await PropertyService(sess).delete_property(get_user_id(user), property_id)
    await sess.commit()


@router.post("/{property_id}/images", response_model=PropertyOut)
async def upload_images(
    property_id: int,
    sess: SessionDep,
    files: List[UploadFile] = File(...),
    user=Depends(landlord_only),
):
    """Upload property images (image/*, 5 MB each)"""
    prop = await PropertyService(sess).upload_images(get_user_id(user), property_id, files)
    await sess.commit()
    return property_out(prop)


@router.delete("/{property_id}/images", response_model=PropertyOut)
async def delete_image(
    property_id: int,
    sess: SessionDep,
    key: str = Query(..., min_length=1),
    user=Depends(landlord_only),
):
    """Remove one image by its storage key"""
    prop = await PropertyService(sess).delete_image(get_user_id(user), property_id, key)
    await sess.commit()
    return property_out(prop)


# Per-property views

@router.get("/{property_id}/invitations", response_model=List[InvitationOut])
async def property_invitations(property_id: int, sess: SessionDep, user=Depends(landlord_only)):
    invitations = await InvitationService(sess).list_property_invitations(get_user_id(user), property_id)
    return [InvitationOut.model_validate(i) for i in invitations]


@router.get("/{property_id}/applications", response_model=List[ApplicationOut])
async def property_applications(property_id: int, sess: SessionDep, user=Depends(landlord_only)):
    await PropertyService(sess).get_property(get_user_id(user), property_id)
    applications = await ApplicationService(sess).list_for_property(get_user_id(user), property_id)
    return [ApplicationOut.model_validate(a) for a in applications]


@router.get("/{property_id}/leases", response_model=List[LeaseOut])
async def property_leases(property_id: int, sess: SessionDep, user=Depends(landlord_only)):
    leases = await LeaseService(sess).list_property_leases(get_user_id(user), property_id)
    return [LeaseOut.model_validate(lease) for lease in leases]


@router.get("/{property_id}/notices", response_model=List[NoticeOut])
async def property_notices(property_id: int, sess: SessionDep, user=Depends(landlord_only)):
    notices = await NoticeService(sess).get_property_notices(get_user_id(user), property_id)
    return [notice_out(n) for n in notices]


@router.get("/{property_id}/documents", response_model=List[PropertyDocumentOut])
async def property_documents(property_id: int, sess: SessionDep, user=Depends(landlord_only)):
    entries = await DocumentService(sess).get_property_documents(user, property_id)
    return [PropertyDocumentOut(**e) for e in entries]


@router.get("/{property_id}/renter-status", response_model=List[RenterStatusOut])
async def property_renter_status(property_id: int, sess: SessionDep, user=Depends(landlord_only)):
    rows = await RenterStatusService(sess).list_by_property(get_user_id(user), property_id)
    return [RenterStatusOut.model_validate(r) for r in rows]


@router.post("/{property_id}/renter-status/sync", response_model=List[RenterStatusOut])
async def sync_renter_status(property_id: int, sess: SessionDep, user=Depends(landlord_only)):
    """Rebuild the renter board from invitations, applications, leases and invoices"""
    rows = await RenterStatusService(sess).sync_property(get_user_id(user), property_id)
    await sess.commit()
    return [RenterStatusOut.model_validate(r) for r in rows]
