"""In-app notifications addressed to landlords."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import BaseService, NotFoundError, ValidationError, get_settings
from ..infrastructure.repositories import NotificationRepository
from ..models import Notification, utcnow

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = (
    "application_submitted",
    "application_approved",
    "application_rejected",
    "invitation_sent",
    "invitation_accepted",
    "invitation_declined",
    "tenant_moved_in",
)

_STATUS_MESSAGES = {
    "approved": "Your rental application has been approved!",
    "rejected": "Your rental application has been rejected.",
    "under_review": "Your rental application is now under review.",
}


class NotificationService(BaseService):
    """Create and read landlord notifications."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.repo = NotificationRepository(session)
        self.window_days = get_settings().NOTIFICATION_WINDOW_DAYS

    async def create_notification(
        self,
        landlord_id: int,
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        if type not in NOTIFICATION_TYPES:
            raise ValidationError(f"Unknown notification type: {type}", field="type")
        notification = await self.repo.create(obj_in={
            "landlord_id": landlord_id,
            "type": type,
            "title": title,
            "message": message,
            "data": data or {},
        })
        logger.info("Notification %s (%s) for landlord %s", notification.id, type, landlord_id)
        return notification

    async def get_landlord_notifications(self, landlord_id: int) -> List[Notification]:
        """Notifications of the recent window, newest first"""
        since = utcnow() - timedelta(days=self.window_days)
        return await self.repo.get_since(landlord_id, since)

    async def get_unread_count(self, landlord_id: int) -> int:
        return await self.repo.count_unread(landlord_id)

    async def mark_as_read(self, landlord_id: int, notification_id: int) -> Notification:
        notification = await self.repo.get(notification_id)
        if not notification or notification.landlord_id != landlord_id:
            raise NotFoundError("Notification", notification_id)
        if notification.read_at is None:
            notification.read_at = utcnow()
            await self.session.flush()
        return notification

    async def mark_all_as_read(self, landlord_id: int) -> int:
        return await self.repo.mark_all_read(landlord_id, utcnow())

    # Helpers used by the other services

    async def notify_application_submitted(
        self, landlord_id: int, application_id: int, property_id: int, renter_email: str
    ) -> Notification:
        return await self.create_notification(
            landlord_id,
            "application_submitted",
            "New Application Submitted",
            "A new rental application has been submitted for your property.",
            {"application_id": application_id, "property_id": property_id, "renter_email": renter_email},
        )

    async def notify_application_status_change(
        self, landlord_id: int, application_id: int, status: str, renter_email: str
    ) -> Notification:
        return await self.create_notification(
            landlord_id,
            "application_approved" if status == "approved" else "application_rejected",
            f"Application {status.replace('_', ' ').title()}",
            _STATUS_MESSAGES.get(status, f"Application status changed to {status}"),
            {"application_id": application_id, "status": status, "renter_email": renter_email},
        )

    async def notify_tenant_moved_in(
        self, landlord_id: int, property_id: int, renter_email: str, address: str
    ) -> Notification:
        return await self.create_notification(
            landlord_id,
            "tenant_moved_in",
            "New Tenant Moved In",
            f"A new tenant has moved into your property at {address}. "
            "The lease is now active and rent payments have been received.",
            {"property_id": property_id, "renter_email": renter_email},
        )

    async def notify_invitation_sent(
        self, landlord_id: int, invitation_id: int, renter_email: str, address: str
    ) -> Notification:
        return await self.create_notification(
            landlord_id,
            "invitation_sent",
            "Invitation Sent",
            f"An invitation to apply for {address} was sent to {renter_email}.",
            {"invitation_id": invitation_id, "renter_email": renter_email},
        )

    async def notify_invitation_response(
        self, landlord_id: int, invitation_id: int, renter_email: str, address: str, accepted: bool
    ) -> Notification:
        verb = "accepted" if accepted else "declined"
        return await self.create_notification(
            landlord_id,
            f"invitation_{verb}",
            f"Invitation {verb.title()}",
            f"{renter_email} {verb} your invitation for {address}.",
            {"invitation_id": invitation_id, "renter_email": renter_email},
        )
