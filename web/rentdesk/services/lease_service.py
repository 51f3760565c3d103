"""Lease lifecycle: drafting, signing, activation and expiry."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import (
    BaseService, NotFoundError, ValidationError, ConflictError, BusinessLogicError,
    AuthorizationError,
)
from ..core.unit_of_work import UnitOfWork
from ..infrastructure.repositories import LeaseRepository, PropertyRepository, UserRepository
from ..models import Lease, utcnow
from ..roles import Role
from .notice_service import NoticeService
from .payment_service import PaymentService, is_lease_party
from .profile_service import ProfileService
from .property_service import property_snapshot
from .renter_status_service import RenterStatusService

logger = logging.getLogger(__name__)

LEASE_STATUSES = ("draft", "pending_signature", "active", "expired", "terminated")
SIGNING_PARTIES = ("renter", "co_signer", "landlord")


class LeaseService(BaseService):
    """Service for lease operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.repo = LeaseRepository(session)
        self.properties = PropertyRepository(session)
        self.users = UserRepository(session)
        self.notices = NoticeService(session)
        self.renter_status = RenterStatusService(session)

    def _check_terms(self, start: Optional[date], end: Optional[date], rent) -> None:
        if start and end and end <= start:
            raise ValidationError("End date must be after start date", field="end_date")
        if rent is not None and rent < 0:
            raise ValidationError("Monthly rent cannot be negative", field="monthly_rent")

    async def create_lease(self, landlord_id: int, data: Dict[str, Any]) -> Lease:
        prop = await self.properties.get_owned(data["property_id"], landlord_id)
        if not prop:
            raise NotFoundError("Property", data["property_id"])
        status = data.get("status", "draft")
        if status not in ("draft", "pending_signature", "active"):
            raise ValidationError("New leases start as draft, pending_signature or active", field="status")
        self._check_terms(data["start_date"], data["end_date"], data.get("monthly_rent"))

        email = data["renter_email"].lower()
        renter = await self.users.get_by_email(email)
        lease = await self.repo.create(obj_in={
            **data,
            "renter_email": email,
            "renter_id": renter.id if renter else None,
            "landlord_id": landlord_id,
            "status": status,
            "lease_terms": data.get("lease_terms") or {},
        })
        logger.info("Lease %s created (%s) on property %s", lease.id, status, prop.id)

        if status == "active":
            await self._schedule(lease)
        elif status == "pending_signature":
            await self._send_for_signature(lease, prop.address_line)
        return lease

    async def _schedule(self, lease: Lease) -> None:
        try:
            async with self.session.begin_nested():
                await PaymentService(self.session).generate_monthly_schedule(lease)
        except Exception:
            logger.exception("Payment schedule generation failed for lease %s", lease.id)

    async def _send_for_signature(self, lease: Lease, address: str) -> None:
        try:
            async with self.session.begin_nested():
                await self.notices.send_system_notice(
                    landlord_id=lease.landlord_id,
                    property_id=lease.property_id,
                    renter_email=lease.renter_email,
                    renter_id=lease.renter_id,
                    type="lease_received",
                    subject="Lease ready for signature",
                    message=f"Your lease for {address} is ready. Please review and sign it.",
                )
                await self.renter_status.advance(
                    lease.property_id, lease.landlord_id, lease.renter_email, "lease", lease_id=lease.id
                )
        except Exception:
            logger.exception("Could not send lease %s for signature", lease.id)

    async def list_landlord_leases(self, landlord_id: int, status: Optional[str] = None) -> List[Lease]:
        return await self.repo.get_by_landlord(landlord_id, status)

    async def list_renter_leases(self, renter: dict) -> List[Lease]:
        return await self.repo.get_by_renter(int(renter["sub"]), renter["email"])

    async def list_property_leases(self, landlord_id: int, property_id: int) -> List[Lease]:
        if not await self.properties.get_owned(property_id, landlord_id):
            raise NotFoundError("Property", property_id)
        return await self.repo.get_by_property(property_id)

    async def get_lease(self, user: dict, lease_id: int) -> Lease:
        lease = await self.repo.get(lease_id)
        if not lease or not is_lease_party(user, lease):
            raise NotFoundError("Lease", lease_id)
        return lease

    async def _owned(self, landlord_id: int, lease_id: int) -> Lease:
        lease = await self.repo.get(lease_id)
        if not lease or lease.landlord_id != landlord_id:
            raise NotFoundError("Lease", lease_id)
        return lease

    async def update_lease(self, landlord_id: int, lease_id: int, data: Dict[str, Any]) -> Lease:
        """Partial update; becoming ``active`` generates the rent schedule"""
        lease = await self._owned(landlord_id, lease_id)
        if "status" in data and data["status"] not in LEASE_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(LEASE_STATUSES)}", field="status")
        self._check_terms(
            data.get("start_date", lease.start_date),
            data.get("end_date", lease.end_date),
            data.get("monthly_rent"),
        )
        previous = lease.status
        for field, value in data.items():
            if field in ("id", "landlord_id", "property_id"):
                continue
            if field == "renter_email" and value:
                value = value.lower()
            if hasattr(lease, field):
                setattr(lease, field, value)
        await self.session.flush()

        if lease.status != previous:
            logger.info("Lease %s: %s -> %s", lease.id, previous, lease.status)
            if lease.status == "active":
                await self._schedule(lease)
            elif lease.status == "pending_signature":
                prop = await self.properties.get(lease.property_id)
                await self._send_for_signature(lease, prop.address_line if prop else "")
        return lease

    async def delete_lease(self, landlord_id: int, lease_id: int) -> None:
        await self._owned(landlord_id, lease_id)
        await self.repo.delete(id=lease_id)

    async def sign(
        self,
        lease_id: int,
        user: dict,
        party: str,
        signature_data: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Lease:
        """Record one party's signature on a lease awaiting signatures."""
        if party not in SIGNING_PARTIES:
            raise ValidationError(f"Invalid party. Must be one of: {', '.join(SIGNING_PARTIES)}", field="party")
        lease = await self.get_lease(user, lease_id)
        is_landlord = user.get("role") == Role.landlord.value
        if (party == "landlord") != is_landlord:
            raise AuthorizationError(f"You cannot sign as {party}")
        if party == "co_signer" and not lease.co_signer_required:
            raise BusinessLogicError("This lease does not require a co-signer", rule="co_signer_not_required")
        if lease.status != "pending_signature":
            raise BusinessLogicError("Lease is not awaiting signatures", rule="lease_not_pending_signature")
        if getattr(lease, f"{party}_signed"):
            raise ConflictError(f"Lease already signed by {party.replace('_', '-')}", entity="Signature")

        now = utcnow()
        setattr(lease, f"{party}_signed", True)
        setattr(lease, f"{party}_signed_at", now)
        lease.signatures = list(lease.signatures or []) + [{
            "party": party,
            "signed_by": user.get("email"),
            "signed_at": now.isoformat(),
            "ip_address": ip_address,
            "signature_data": signature_data,
        }]
        if party == "renter" and lease.renter_id is None and not is_landlord:
            lease.renter_id = int(user["sub"])
        if lease.fully_signed:
            lease.completed_at = now
        await self.session.flush()
        logger.info("Lease %s signed by %s", lease.id, party)

        if party == "renter":
            try:
                async with self.session.begin_nested():
                    prop = await self.properties.get(lease.property_id)
                    await self.notices.send_system_notice(
                        landlord_id=lease.landlord_id,
                        property_id=lease.property_id,
                        renter_email=lease.renter_email,
                        renter_id=lease.renter_id,
                        type="lease_completed",
                        subject="Lease signed by renter",
                        message=f"{lease.renter_email} signed the lease for {prop.address_line if prop else 'your property'}.",
                    )
            except Exception:
                logger.exception("Could not send lease_completed notice for lease %s", lease.id)
        return lease

    async def reject(self, lease_id: int, renter: dict, reason: Optional[str] = None) -> Lease:
        lease = await self.get_lease(renter, lease_id)
        if renter.get("role") != Role.renter.value:
            raise AuthorizationError("Only the renter can reject a lease")
        if lease.status != "pending_signature":
            raise BusinessLogicError("Lease is not awaiting signatures", rule="lease_not_pending_signature")
        lease.status = "terminated"
        if reason:
            lease.lease_terms = {**(lease.lease_terms or {}), "rejection_reason": reason}
        await self.session.flush()
        logger.info("Lease %s rejected by renter", lease.id)
        try:
            async with self.session.begin_nested():
                await self.renter_status.advance(
                    lease.property_id, lease.landlord_id, lease.renter_email, "lease_rejected",
                    lease_id=lease.id, notes=reason,
                )
        except Exception:
            logger.exception("Could not update renter status for lease %s", lease.id)
        return lease

    async def start_lease(
        self,
        landlord_id: int,
        lease_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Lease:
        """Activate a lease: occupancy, renter's current property and rent schedule"""
        lease = await self._owned(landlord_id, lease_id)
        if lease.status in ("active", "expired", "terminated"):
            raise BusinessLogicError(f"Lease is already {lease.status}", rule="lease_not_startable")
        start = start_date or lease.start_date
        end = end_date or lease.end_date
        self._check_terms(start, end, None)
        lease.start_date, lease.end_date = start, end
        await self.activate(lease)
        return lease

    async def activate(self, lease: Lease) -> None:
        """Mark *lease* active with all of the move-in bookkeeping."""
        lease.status = "active"
        prop = await self.properties.get(lease.property_id)
        if prop:
            prop.status = "occupied"
        if lease.renter_id is None:
            renter = await self.users.get_by_email(lease.renter_email)
            lease.renter_id = renter.id if renter else None
        await self.session.flush()
        logger.info("Lease %s is active", lease.id)

        if lease.renter_id and prop:
            await ProfileService(UnitOfWork(self.session)).update_current_property(
                lease.renter_id, prop.id, property_snapshot(prop)
            )
        try:
            async with self.session.begin_nested():
                await self.renter_status.advance(
                    lease.property_id, lease.landlord_id, lease.renter_email, "leased", lease_id=lease.id
                )
        except Exception:
            logger.exception("Could not update renter status for lease %s", lease.id)
        await self._schedule(lease)

    async def expire_finished(self, today: Optional[date] = None) -> int:
        count = await self.repo.expire_ended(today or date.today(), utcnow())
        if count:
            logger.info("Expired %d finished leases", count)
        return count
