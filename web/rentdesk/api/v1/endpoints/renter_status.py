from typing import List

from fastapi import APIRouter, Depends, status

from rentdesk.api.v1.schemas import RenterStatusIn, RenterStatusUpdate, RenterStatusMove, RenterStatusOut
from rentdesk.deps import SessionDep
from rentdesk.security import role_required
from rentdesk.services import RenterStatusService
from rentdesk.api.v1.endpoints.utils import get_user_id


router = APIRouter()

landlord_only = role_required("landlord")


@router.get("", response_model=List[RenterStatusOut])
async def list_statuses(sess: SessionDep, user=Depends(landlord_only)):
    rows = await RenterStatusService(sess).list_by_landlord(get_user_id(user))
    return [RenterStatusOut.model_validate(r) for r in rows]


@router.post("", response_model=RenterStatusOut, status_code=status.HTTP_201_CREATED)
async def create_status(payload: RenterStatusIn, sess: SessionDep, user=Depends(landlord_only)):
    row = await RenterStatusService(sess).create(get_user_id(user), payload.model_dump())
    await sess.commit()
    return RenterStatusOut.model_validate(row)


@router.patch("/{status_id}", response_model=RenterStatusOut)
async def update_status(status_id: int, payload: RenterStatusUpdate, sess: SessionDep, user=Depends(landlord_only)):
    row = await RenterStatusService(sess).update(get_user_id(user), status_id, payload.model_dump(exclude_unset=True))
    await sess.commit()
    return RenterStatusOut.model_validate(row)


@router.post("/{status_id}/move", response_model=RenterStatusOut)
async def move_status(status_id: int, payload: RenterStatusMove, sess: SessionDep, user=Depends(landlord_only)):
    """Drag a renter to another column of the board"""
    row = await RenterStatusService(sess).move_to_stage(get_user_id(user), status_id, payload.status, payload.notes)
    await sess.commit()
    return RenterStatusOut.model_validate(row)


@router.delete("/{status_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_status(status_id: int, sess: SessionDep, user=Depends(landlord_only)):
    await RenterStatusService(sess).delete(get_user_id(user), status_id)
    await sess.commit()
