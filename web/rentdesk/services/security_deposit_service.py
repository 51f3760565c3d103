from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import BaseService, NotFoundError, ValidationError
from ..infrastructure.repositories import SecurityDepositRepository, LeaseRepository
from ..models import SecurityDeposit
from .payment_service import is_lease_party


class SecurityDepositService(BaseService):
    """Security deposits paid for leases."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.repo = SecurityDepositRepository(session)

    async def create_deposit(self, data: Dict[str, Any]) -> SecurityDeposit:
        if data.get("amount") is None or data["amount"] <= 0:
            raise ValidationError("Deposit amount must be greater than zero", field="amount")
        return await self.repo.create(obj_in=data)

    async def get_deposits_by_lease(self, user: dict, lease_id: int) -> List[SecurityDeposit]:
        lease = await LeaseRepository(self.session).get(lease_id)
        if not lease or not is_lease_party(user, lease):
            raise NotFoundError("Lease", lease_id)
        return await self.repo.get_by_lease(lease_id)

    async def get_deposits_for_landlord(self, landlord_id: int) -> List[SecurityDeposit]:
        return await self.repo.get_by_landlord(landlord_id)
