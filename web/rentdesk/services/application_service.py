from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import (
    BaseService, NotFoundError, ConflictError, BusinessLogicError, ValidationError,
)
from ..infrastructure.repositories import ApplicationRepository, InvitationRepository
from ..models import Application, utcnow
from .notification_service import NotificationService
from .renter_status_service import RenterStatusService

logger = logging.getLogger(__name__)

REVIEW_STATUSES = ("under_review", "approved", "rejected")


class ApplicationService(BaseService):
    """Rental applications submitted against accepted invitations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.repo = ApplicationRepository(session)
        self.invitations = InvitationRepository(session)
        self.notifications = NotificationService(session)
        self.renter_status = RenterStatusService(session)

    async def create_application(
        self,
        renter: dict,
        invitation_id: int,
        data: Dict[str, Any],
        *,
        draft: bool = False,
        ip_address: Optional[str] = None,
    ) -> Application:
        """Submit (or save as draft) an application for an accepted invitation.

        Raises:
            NotFoundError: invitation missing or addressed to another email
            BusinessLogicError: invitation not accepted
            ConflictError: an application already exists for the invitation
        """
        email = renter["email"].lower()
        invitation = await self.invitations.get(invitation_id)
        if not invitation or invitation.renter_email.lower() != email:
            raise NotFoundError("Invitation", invitation_id)
        if invitation.status != "accepted":
            raise BusinessLogicError("Invitation must be accepted before applying", rule="invitation_not_accepted")
        if await self.repo.get_by_invitation(invitation_id):
            raise ConflictError("An application already exists for this invitation", entity="Application")

        now = utcnow()
        signature = data.pop("signature", None)
        if signature is not None:
            signature = {
                "signed_by": signature.get("signed_by") or data.get("full_name"),
                "signed_at": now.isoformat(),
                "ip_address": ip_address,
                "signature_data": signature.get("signature_data"),
            }
        if not draft and not data.get("full_name"):
            raise ValidationError("full_name is required", field="full_name")
        data["full_name"] = data.get("full_name") or ""

        application = await self.repo.create(obj_in={
            **data,
            "invitation_id": invitation.id,
            "property_id": invitation.property_id,
            "landlord_id": invitation.landlord_id,
            "renter_id": int(renter["sub"]),
            "renter_email": email,
            "status": "draft" if draft else "submitted",
            "submitted_at": None if draft else now,
            "signature": signature,
        })
        logger.info("Application %s %s for property %s", application.id, application.status, application.property_id)

        if not draft:
            try:
                async with self.session.begin_nested():
                    await self.notifications.notify_application_submitted(
                        invitation.landlord_id, application.id, invitation.property_id, email
                    )
                    await self.renter_status.advance(
                        invitation.property_id, invitation.landlord_id, email, "application",
                        renter_name=application.full_name, application_id=application.id,
                    )
            except Exception:
                logger.exception("Side effects of application %s failed", application.id)
        return application

    async def list_for_landlord(self, landlord_id: int, status: Optional[str] = None) -> List[Application]:
        return await self.repo.get_by_landlord(landlord_id, status)

    async def list_for_property(self, landlord_id: int, property_id: int) -> List[Application]:
        return [a for a in await self.repo.get_by_property(property_id) if a.landlord_id == landlord_id]

    async def list_for_renter(self, renter: dict) -> List[Application]:
        return await self.repo.get_by_renter(int(renter["sub"]), renter["email"])

    async def get_application(self, user: dict, application_id: int) -> Application:
        application = await self.repo.get(application_id)
        if not application:
            raise NotFoundError("Application", application_id)
        role = user.get("role")
        if role == "landlord" and application.landlord_id != int(user["sub"]):
            raise NotFoundError("Application", application_id)
        if role == "renter" and application.renter_email.lower() != user["email"].lower():
            raise NotFoundError("Application", application_id)
        return application

    async def review(self, landlord_id: int, application_id: int, status: str) -> Application:
        if status not in REVIEW_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(REVIEW_STATUSES)}", field="status")
        application = await self.repo.get(application_id)
        if not application or application.landlord_id != landlord_id:
            raise NotFoundError("Application", application_id)
        if application.status in ("approved", "rejected"):
            raise BusinessLogicError(f"Application is already {application.status}", rule="application_decided")
        if application.status == "draft":
            raise BusinessLogicError("Draft applications cannot be reviewed", rule="application_draft")

        application.status = status
        application.reviewed_at = utcnow()
        await self.session.flush()
        logger.info("Application %s reviewed: %s", application.id, status)

        try:
            async with self.session.begin_nested():
                if status in ("approved", "rejected"):
                    await self.notifications.notify_application_status_change(
                        landlord_id, application.id, status, application.renter_email
                    )
                if status == "approved":
                    await self.renter_status.advance(
                        application.property_id, landlord_id, application.renter_email, "accepted",
                        application_id=application.id,
                    )
        except Exception:
            logger.exception("Side effects of application %s review failed", application.id)
        return application
