from fastapi import APIRouter, Depends

from rentdesk.api.v1.schemas import (
    LandlordProfileIn, LandlordProfileOut, RenterProfileIn, RenterProfileOut
)
from rentdesk.core.unit_of_work import UnitOfWork
from rentdesk.deps import SessionDep
from rentdesk.security import role_required
from rentdesk.services import ProfileService
from rentdesk.api.v1.endpoints.utils import get_user_id, to_data


router = APIRouter()

_RENTER_JSON = (
    "current_address", "employment", "rent_history", "references",
    "emergency_contact", "payment_method",
)


@router.get("/landlord", response_model=LandlordProfileOut)
async def get_landlord_profile(sess: SessionDep, user=Depends(role_required("landlord"))):
    service = ProfileService(UnitOfWork(sess))
    return LandlordProfileOut.model_validate(await service.get_landlord_profile(get_user_id(user)))


@router.put("/landlord", response_model=LandlordProfileOut)
async def update_landlord_profile(
    payload: LandlordProfileIn,
    sess: SessionDep,
    user=Depends(role_required("landlord")),
):
    """Create or update the landlord profile; only the supplied fields change"""
    service = ProfileService(UnitOfWork(sess))
    profile = await service.update_landlord_profile(
        get_user_id(user), to_data(payload, "bank_details", exclude_unset=True)
    )
    return LandlordProfileOut.model_validate(profile)


@router.get("/renter", response_model=RenterProfileOut)
async def get_renter_profile(sess: SessionDep, user=Depends(role_required("renter"))):
    service = ProfileService(UnitOfWork(sess))
    return RenterProfileOut.model_validate(await service.get_renter_profile(get_user_id(user)))


@router.put("/renter", response_model=RenterProfileOut)
async def update_renter_profile(
    payload: RenterProfileIn,
    sess: SessionDep,
    user=Depends(role_required("renter")),
):
    service = ProfileService(UnitOfWork(sess))
    profile = await service.update_renter_profile(
        get_user_id(user), to_data(payload, *_RENTER_JSON, exclude_unset=True)
    )
    return RenterProfileOut.model_validate(profile)
