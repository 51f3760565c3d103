import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from rentdesk.api.v1.schemas import UserCreate, UserOut, MaintenanceOut
from rentdesk.deps import SessionDep
from rentdesk.security import role_required
from rentdesk.services import AuthService, AdminService, MaintenanceService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(role_required("admin"))])


@router.get("/stats", response_model=Dict[str, Any])
async def system_stats(sess: SessionDep):
    """Users, properties, leases, payments and notices at a glance"""
    return await AdminService(sess).system_stats()


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreate, sess: SessionDep):
    user = await AuthService(sess).create_user(payload.email, payload.password, payload.role, payload.name)
    await sess.commit()
    return UserOut.model_validate(user)


@router.post("/maintenance", response_model=MaintenanceOut)
async def run_maintenance(sess: SessionDep):
    """Run the overdue / expiry pass now instead of waiting for the loop"""
    result = await MaintenanceService(sess).run()
    await sess.commit()
    logger.info("Maintenance run on demand: %s", result)
    return result
