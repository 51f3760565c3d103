from typing import List

from fastapi import APIRouter, Depends

from rentdesk.api.v1.schemas import DepositOut
from rentdesk.deps import SessionDep
from rentdesk.security import current_user, role_required
from rentdesk.services import SecurityDepositService
from rentdesk.api.v1.endpoints.utils import get_user_id


router = APIRouter()


@router.get("/lease/{lease_id}", response_model=List[DepositOut])
async def lease_deposits(lease_id: int, sess: SessionDep, user=Depends(current_user)):
    deposits = await SecurityDepositService(sess).get_deposits_by_lease(user, lease_id)
    return [DepositOut.model_validate(d) for d in deposits]


@router.get("", response_model=List[DepositOut])
async def landlord_deposits(sess: SessionDep, user=Depends(role_required("landlord"))):
    deposits = await SecurityDepositService(sess).get_deposits_for_landlord(get_user_id(user))
    return [DepositOut.model_validate(d) for d in deposits]
