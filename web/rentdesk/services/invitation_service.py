from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import (
    BaseService, NotFoundError, ConflictError, BusinessLogicError, get_settings,
)
from ..infrastructure.repositories import InvitationRepository, PropertyRepository
from ..models import Invitation, utcnow
from .notification_service import NotificationService
from .renter_status_service import RenterStatusService

logger = logging.getLogger(__name__)


class InvitationService(BaseService):
    """Landlord invitations to apply for a property."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.repo = InvitationRepository(session)
        self.properties = PropertyRepository(session)
        self.notifications = NotificationService(session)
        self.renter_status = RenterStatusService(session)
        self.ttl = timedelta(days=get_settings().INVITATION_TTL_DAYS)

    async def create_invitation(
        self,
        landlord_id: int,
        property_id: int,
        renter_email: str,
        message: Optional[str] = None,
    ) -> Invitation:
        prop = await self.properties.get_owned(property_id, landlord_id)
        if not prop:
            raise NotFoundError("Property", property_id)

        email = renter_email.lower()
        if await self.repo.find_pending(property_id, email):
            raise ConflictError("A pending invitation already exists for this email", entity="Invitation")

        now = utcnow()
        invitation = await self.repo.create(obj_in={
            "landlord_id": landlord_id,
            "property_id": property_id,
            "renter_email": email,
            "message": message,
            "status": "pending",
            "invited_at": now,
            "expires_at": now + self.ttl,
        })
        try:
            async with self.session.begin_nested():
                await self.notifications.notify_invitation_sent(
                    landlord_id, invitation.id, email, prop.address_line
                )
        except Exception:
            logger.exception("Could not record invitation_sent for invitation %s", invitation.id)
        return invitation

    async def list_landlord_invitations(self, landlord_id: int) -> List[Invitation]:
        return await self.repo.get_by_landlord(landlord_id)

    async def list_property_invitations(self, landlord_id: int, property_id: int) -> List[Invitation]:
        if not await self.properties.get_owned(property_id, landlord_id):
            raise NotFoundError("Property", property_id)
        return await self.repo.get_by_property(property_id)

    async def list_invitations_for_email(self, email: str, status: Optional[str] = None) -> List[Invitation]:
        return await self.repo.get_by_email(email, status)

    async def get_for_renter(self, invitation_id: int, renter_email: str) -> Invitation:
        invitation = await self.repo.get(invitation_id)
        if not invitation or invitation.renter_email.lower() != renter_email.lower():
            raise NotFoundError("Invitation", invitation_id)
        return invitation

    async def respond(self, invitation_id: int, renter_email: str, accept: bool) -> Invitation:
        """Accept or decline a pending, unexpired invitation addressed to *renter_email*."""
        invitation = await self.get_for_renter(invitation_id, renter_email)
        if invitation.status != "pending":
            raise BusinessLogicError(
                f"Invitation is already {invitation.status}", rule="invitation_not_pending"
            )

        now = utcnow()
        if invitation.expires_at < now:
            invitation.status = "expired"
            await self.session.flush()
            # Keep the expiry even though the request itself is rejected
            await self.session.commit()
            raise BusinessLogicError("Invitation has expired", rule="invitation_expired")

        invitation.status = "accepted" if accept else "declined"
        invitation.responded_at = now
        await self.session.flush()
        logger.info("Invitation %s %s", invitation.id, invitation.status)

        prop = await self.properties.get(invitation.property_id)
        address = prop.address_line if prop else ""
        try:
            async with self.session.begin_nested():
                await self.notifications.notify_invitation_response(
                    invitation.landlord_id, invitation.id, invitation.renter_email, address, accept
                )
                if accept:
                    await self.renter_status.advance(
                        invitation.property_id, invitation.landlord_id, invitation.renter_email,
                        "invite", invitation_id=invitation.id,
                    )
        except Exception:
            logger.exception("Side effects of invitation %s response failed", invitation.id)
        return invitation

    async def expire_stale(self) -> int:
        count = await self.repo.expire_before(utcnow())
        if count:
            logger.info("Expired %d stale invitations", count)
        return count
