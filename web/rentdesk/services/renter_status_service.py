"""Renter pipeline board: one row per (property, renter email)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import BaseService, NotFoundError, ValidationError, ConflictError
from ..infrastructure.repositories import (
    RenterStatusRepository, PropertyRepository, InvitationRepository,
    ApplicationRepository, LeaseRepository, InvoiceRepository,
)
from ..models import RenterStatus

logger = logging.getLogger(__name__)

STAGES = ("invite", "application", "lease", "lease_rejected", "accepted", "payment", "leased")

# Pipeline position used by ``sync_property``; the furthest stage wins
_RANK = {
    "invite": 0,
    "application": 1,
    "accepted": 2,
    "lease": 3,
    "lease_rejected": 3,
    "payment": 4,
    "leased": 5,
}


class RenterStatusService(BaseService):
    """Track where every prospective renter stands for a property."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.repo = RenterStatusRepository(session)
        self.properties = PropertyRepository(session)

    def _check_stage(self, stage: str) -> None:
        if stage not in STAGES:
            raise ValidationError(f"Invalid stage. Must be one of: {', '.join(STAGES)}", field="status")

    async def _owned(self, landlord_id: int, status_id: int) -> RenterStatus:
        row = await self.repo.get(status_id)
        if not row or row.landlord_id != landlord_id:
            raise NotFoundError("Renter status", status_id)
        return row

    async def create(self, landlord_id: int, data: Dict[str, Any]) -> RenterStatus:
        self._check_stage(data.get("status", "invite"))
        prop = await self.properties.get_owned(data["property_id"], landlord_id)
        if not prop:
            raise NotFoundError("Property", data["property_id"])
        email = data["renter_email"].lower()
        if await self.repo.find(prop.id, email):
            raise ConflictError("Renter is already on the board for this property", entity="Renter status")
        return await self.repo.create(obj_in={**data, "renter_email": email, "landlord_id": landlord_id})

    async def update(self, landlord_id: int, status_id: int, data: Dict[str, Any]) -> RenterStatus:
        row = await self._owned(landlord_id, status_id)
        if "status" in data:
            self._check_stage(data["status"])
        for field in ("renter_name", "status", "notes", "invitation_id", "application_id", "lease_id"):
            if field in data:
                setattr(row, field, data[field])
        await self.session.flush()
        return row

    async def move_to_stage(
        self, landlord_id: int, status_id: int, stage: str, notes: Optional[str] = None
    ) -> RenterStatus:
        self._check_stage(stage)
        row = await self._owned(landlord_id, status_id)
        row.status = stage
        if notes is not None:
            row.notes = notes
        await self.session.flush()
        return row

    async def delete(self, landlord_id: int, status_id: int) -> None:
        await self._owned(landlord_id, status_id)
        await self.repo.delete(id=status_id)

    async def list_by_property(self, landlord_id: int, property_id: int) -> List[RenterStatus]:
        if not await self.properties.get_owned(property_id, landlord_id):
            raise NotFoundError("Property", property_id)
        return await self.repo.get_by_property(property_id)

    async def list_by_landlord(self, landlord_id: int) -> List[RenterStatus]:
        return await self.repo.get_by_landlord(landlord_id)

    async def list_by_email(self, email: str, property_id: Optional[int] = None) -> List[RenterStatus]:
        return await self.repo.get_by_email(email, property_id)

    async def advance(
        self,
        property_id: int,
        landlord_id: int,
        renter_email: str,
        stage: str,
        renter_name: Optional[str] = None,
        **refs: Any,
    ) -> RenterStatus:
        """Upsert the board row for (property, renter email) at *stage*."""
        self._check_stage(stage)
        email = renter_email.lower()
        row = await self.repo.find(property_id, email)
        if row is None:
            row = await self.repo.create(obj_in={
                "property_id": property_id,
                "landlord_id": landlord_id,
                "renter_email": email,
                "renter_name": renter_name,
                "status": stage,
                **refs,
            })
        else:
            row.status = stage
            if renter_name:
                row.renter_name = renter_name
            for key, value in refs.items():
                if value is not None:
                    setattr(row, key, value)
            await self.session.flush()
        logger.debug("Renter %s on property %s moved to %s", email, property_id, stage)
        return row

    async def sync_property(self, landlord_id: int, property_id: int) -> List[RenterStatus]:
        """Rebuild board rows from the property's invitations, applications, leases and invoices."""
        if not await self.properties.get_owned(property_id, landlord_id):
            raise NotFoundError("Property", property_id)

        derived: Dict[str, Dict[str, Any]] = {}

        # Records come newest first, so on equal rank the first one seen stays
        def bump(email: str, stage: str, **refs: Any) -> None:
            email = email.lower()
            refs = {k: v for k, v in refs.items() if v is not None}
            current = derived.get(email)
            if current is None:
                derived[email] = {"status": stage, "refs": refs}
            elif _RANK[stage] > _RANK[current["status"]]:
                current["status"] = stage
                current["refs"].update(refs)
            else:
                for key, value in refs.items():
                    current["refs"].setdefault(key, value)

        for inv in await InvitationRepository(self.session).get_by_property(property_id):
            if inv.status == "accepted":
                bump(inv.renter_email, "invite", invitation_id=inv.id)
        for app in await ApplicationRepository(self.session).get_by_property(property_id):
            if app.status == "approved":
                bump(app.renter_email, "accepted", application_id=app.id)
            elif app.status in ("submitted", "under_review"):
                bump(app.renter_email, "application", application_id=app.id)
        for invoice in await InvoiceRepository(self.session).get_by_property(property_id):
            if invoice.status == "sent":
                bump(invoice.renter_email, "payment")
            elif invoice.status == "paid":
                bump(invoice.renter_email, "leased")
        for lease in await LeaseRepository(self.session).get_by_property(property_id):
            if lease.status == "active":
                bump(lease.renter_email, "leased", lease_id=lease.id)
            elif lease.status == "pending_signature":
                bump(lease.renter_email, "lease", lease_id=lease.id)
            elif lease.status == "terminated":
                bump(lease.renter_email, "lease_rejected", lease_id=lease.id)

        for email, entry in derived.items():
            await self.advance(property_id, landlord_id, email, entry["status"], **entry["refs"])
        logger.info("Synced %d renter statuses for property %s", len(derived), property_id)
        return await self.repo.get_by_property(property_id)
