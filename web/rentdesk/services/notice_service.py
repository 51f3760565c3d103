"""Notices exchanged between a landlord and the renters of their properties."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from .. import storage
from ..core import BaseService, NotFoundError, ValidationError, AuthorizationError
from ..infrastructure.repositories import (
    NoticeRepository, PropertyRepository, LeaseRepository, UserRepository,
)
from ..models import Notice, utcnow
from ..roles import Role

logger = logging.getLogger(__name__)

NOTICE_TYPES = (
    "late_rent", "noise_complaint", "inspection", "lease_violation", "eviction",
    "rent_increase", "maintenance", "parking_violation", "pet_violation",
    "utility_shutdown", "cleanliness", "custom",
)
SYSTEM_NOTICE_TYPES = (
    "lease_received", "lease_completed", "invoice_sent", "payment_received", "payment_successful",
)
# Addressed to the landlord; hidden from the renter's inbox
LANDLORD_ONLY_TYPES = ("lease_completed", "payment_received")
LEASE_NOTICE_TYPES = ("lease_completed", "lease_received")


class NoticeService(BaseService):
    """Send, list and read notices."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.repo = NoticeRepository(session)
        self.properties = PropertyRepository(session)
        self.leases = LeaseRepository(session)
        self.users = UserRepository(session)

    async def create_notice(
        self,
        user: dict,
        data: Dict[str, Any],
        files: Sequence[Any] = (),
    ) -> Notice:
        """Create a notice from the caller, with optional attachments.

        Landlords write to a renter of one of their properties; renters write
        to the landlord of a property they lease.
        """
        if data.get("type") not in NOTICE_TYPES:
            raise ValidationError(f"Invalid notice type. Must be one of: {', '.join(NOTICE_TYPES)}", field="type")

        sender_id = int(user["sub"])
        prop_id = data["property_id"]
        if user.get("role") == Role.landlord.value:
            prop = await self.properties.get_owned(prop_id, sender_id)
            if not prop:
                raise NotFoundError("Property", prop_id)
            renter_email = (data.get("renter_email") or "").lower()
            if not renter_email:
                raise ValidationError("renter_email is required", field="renter_email")
            sender_role = Role.landlord.value
        else:
            prop = await self.properties.get(prop_id)
            renter_email = user["email"].lower()
            lease = await self.leases.find_for_renter_on_property(prop_id, renter_email) if prop else None
            if not prop or not lease or lease.status != "active":
                raise NotFoundError("Property", prop_id)
            sender_role = Role.renter.value

        for upload in files:
            storage.validate_attachment(upload)
        attachments = []
        for upload in files:
            key = storage.upload_file(upload, f"notices/{sender_id}")
            upload.file.seek(0, 2)
            attachments.append({
                "name": upload.filename,
                "size": upload.file.tell(),
                "type": upload.content_type,
                "key": key,
            })

        renter = await self.users.get_by_email(renter_email)
        notice = await self.repo.create(obj_in={
            "landlord_id": prop.landlord_id,
            "property_id": prop.id,
            "renter_id": renter.id if renter else None,
            "renter_email": renter_email,
            "sender_role": sender_role,
            "type": data["type"],
            "subject": data["subject"],
            "message": data["message"],
            "attachments": attachments,
        })
        logger.info("Notice %s (%s) sent on property %s", notice.id, notice.type, prop.id)
        return notice

    async def send_system_notice(
        self,
        *,
        landlord_id: int,
        property_id: int,
        renter_email: str,
        type: str,
        subject: str,
        message: str,
        renter_id: Optional[int] = None,
        invoice_id: Optional[int] = None,
    ) -> Notice:
        """Notices generated by lease, invoice and payment workflows"""
        if type not in SYSTEM_NOTICE_TYPES:
            raise ValidationError(f"Unknown system notice type: {type}", field="type")
        return await self.repo.create(obj_in={
            "landlord_id": landlord_id,
            "property_id": property_id,
            "renter_id": renter_id,
            "renter_email": renter_email.lower(),
            "sender_role": "system",
            "type": type,
            "subject": subject,
            "message": message,
            "attachments": [],
            "invoice_id": invoice_id,
        })

    async def get_property_notices(self, landlord_id: int, property_id: int) -> List[Notice]:
        if not await self.properties.get_owned(property_id, landlord_id):
            raise NotFoundError("Property", property_id)
        return await self.repo.get_by_property(property_id)

    async def get_renter_notices(self, renter_email: str) -> List[Notice]:
        return await self.repo.get_for_email(renter_email, exclude_types=LANDLORD_ONLY_TYPES)

    async def get_landlord_notices(self, landlord_id: int) -> List[Notice]:
        return await self.repo.get_by_landlord(landlord_id)

    async def get_landlord_lease_notices(self, landlord_id: int) -> List[Notice]:
        return await self.repo.get_by_landlord(landlord_id, types=LEASE_NOTICE_TYPES)

    async def get_unread_notices_count(self, renter_email: str) -> int:
        return await self.repo.count_unread_for_email(renter_email, exclude_types=LANDLORD_ONLY_TYPES)

    async def get_notice(self, user: dict, notice_id: int) -> Notice:
        notice = await self.repo.get(notice_id)
        if not notice or not self._can_see(user, notice):
            raise NotFoundError("Notice", notice_id)
        return notice

    async def mark_as_read(self, user: dict, notice_id: int) -> Notice:
        notice = await self.get_notice(user, notice_id)
        if notice.read_at is None:
            notice.read_at = utcnow()
            await self.session.flush()
        return notice

    async def delete_notice(self, user: dict, notice_id: int) -> None:
        notice = await self.get_notice(user, notice_id)
        if user.get("role") != Role.landlord.value:
            raise AuthorizationError("Only the landlord can delete notices")
        for attachment in notice.attachments or []:
            if attachment.get("key"):
                storage.delete_object(attachment["key"])
        await self.repo.delete(id=notice.id)

    def _can_see(self, user: dict, notice: Notice) -> bool:
        role = user.get("role")
        if role == Role.admin.value:
            return True
        if role == Role.landlord.value:
            return notice.landlord_id == int(user["sub"])
        if notice.type in LANDLORD_ONLY_TYPES:
            return False
        return (notice.renter_email or "").lower() == (user.get("email") or "").lower()
