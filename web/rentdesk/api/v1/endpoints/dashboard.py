from fastapi import APIRouter, Depends

from rentdesk.api.v1.schemas import LandlordStats, RenterDashboard
from rentdesk.deps import SessionDep
from rentdesk.security import role_required
from rentdesk.services import DashboardService
from rentdesk.api.v1.endpoints.utils import get_user_id


router = APIRouter()


@router.get("/landlord", response_model=LandlordStats)
async def landlord_dashboard(sess: SessionDep, user=Depends(role_required("landlord"))):
    return await DashboardService(sess).landlord_stats(get_user_id(user))


@router.get("/renter", response_model=RenterDashboard)
async def renter_dashboard(sess: SessionDep, user=Depends(role_required("renter"))):
    """Leases, next rent due, balance and open items for the renter"""
    data = await DashboardService(sess).renter_dashboard(user)
    return RenterDashboard.model_validate(data, from_attributes=True)
