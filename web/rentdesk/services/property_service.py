"""Landlord property management."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from .. import storage
from ..core import BaseService, NotFoundError, ValidationError, ConflictError
from ..infrastructure.repositories import (
    PropertyRepository, LeaseRepository, InvitationRepository, ApplicationRepository,
)
from ..models import Property
from ..roles import Role

logger = logging.getLogger(__name__)

PROPERTY_TYPES = ("apartment", "house", "condo", "townhouse", "other")
PROPERTY_STATUSES = ("available", "occupied", "maintenance")


class PropertyService(BaseService):
    """Service for property operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.repo = PropertyRepository(session)

    def _validate(self, data: Dict[str, Any]) -> None:
        if "type" in data and data["type"] not in PROPERTY_TYPES:
            raise ValidationError(f"Invalid property type. Must be one of: {', '.join(PROPERTY_TYPES)}", field="type")
        if "status" in data and data["status"] not in PROPERTY_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(PROPERTY_STATUSES)}", field="status")
        for field in ("monthly_rent", "security_deposit", "application_fee"):
            if data.get(field) is not None and data[field] < 0:
                raise ValidationError(f"{field} cannot be negative", field=field)

    async def list_landlord_properties(self, landlord_id: int) -> List[Property]:
        return await self.repo.get_by_landlord(landlord_id)

    async def get_property(self, landlord_id: int, property_id: int) -> Property:
        """Property owned by *landlord_id*.

        Raises:
            NotFoundError: If it does not exist or belongs to someone else
        """
        prop = await self.repo.get_owned(property_id, landlord_id)
        if not prop:
            raise NotFoundError("Property", property_id)
        return prop

    async def get_property_for_user(self, user: dict, property_id: int) -> Property:
        """Property as seen by any role.

        Renters may read a property they were invited to, applied to or lease.
        """
        prop = await self.repo.get(property_id)
        if not prop:
            raise NotFoundError("Property", property_id)
        role = user.get("role")
        if role == Role.admin.value:
            return prop
        if role == Role.landlord.value:
            if prop.landlord_id != int(user["sub"]):
                raise NotFoundError("Property", property_id)
            return prop

        email = (user.get("email") or "").lower()
        invited = any(
            inv.property_id == property_id
            for inv in await InvitationRepository(self.session).get_by_email(email)
        )
        applied = any(
            app.property_id == property_id
            for app in await ApplicationRepository(self.session).get_by_renter(int(user["sub"]), email)
        )
        leasing = any(
            lease.property_id == property_id
            for lease in await LeaseRepository(self.session).get_by_renter(int(user["sub"]), email)
        )
        if not (invited or applied or leasing):
            raise NotFoundError("Property", property_id)
        return prop

    async def add_property(self, landlord_id: int, data: Dict[str, Any]) -> Property:
        self._validate(data)
        prop = await self.repo.create(obj_in={**data, "landlord_id": landlord_id, "images": []})
        logger.info("Landlord %s added property %s", landlord_id, prop.id)
        return prop

    async def update_property(self, landlord_id: int, property_id: int, data: Dict[str, Any]) -> Property:
        """Partial update; ``landlord_id`` and ``images`` are never overwritten here"""
        prop = await self.get_property(landlord_id, property_id)
        self._validate(data)
        for field, value in data.items():
            if field in ("id", "landlord_id", "images"):
                continue
            if hasattr(prop, field):
                setattr(prop, field, value)
        await self.session.flush()
        return prop

    async def delete_property(self, landlord_id: int, property_id: int) -> None:
        prop = await self.get_property(landlord_id, property_id)
        if await LeaseRepository(self.session).has_active_on_property(property_id):
            raise ConflictError("Property has an active lease and cannot be deleted", entity="Lease")
        for key in prop.images or []:
            storage.delete_object(key)
        await self.repo.delete(id=property_id)
        logger.info("Landlord %s deleted property %s", landlord_id, property_id)

    async def upload_images(self, landlord_id: int, property_id: int, files: Sequence[Any]) -> Property:
        """Validate then store every file, appending the keys to the property"""
        prop = await self.get_property(landlord_id, property_id)
        if not files:
            raise ValidationError("No files uploaded", field="files")
        for upload in files:
            storage.validate_image(upload)
        keys = [storage.upload_file(upload, f"properties/{property_id}") for upload in files]
        # Reassign so the JSON column is marked dirty
        prop.images = list(prop.images or []) + keys
        await self.session.flush()
        return prop

    async def delete_image(self, landlord_id: int, property_id: int, key: str) -> Property:
        prop = await self.get_property(landlord_id, property_id)
        if key not in (prop.images or []):
            raise NotFoundError("Image")
        prop.images = [k for k in prop.images if k != key]
        await self.session.flush()
        storage.delete_object(key)
        return prop


def property_snapshot(prop: Property) -> Dict[str, Any]:
    """JSON-safe copy of the fields shown on invoices and renter dashboards"""
    return {
        "id": prop.id,
        "address": prop.address_line,
        "city": prop.city,
        "state": prop.state,
        "type": prop.type,
        "bedrooms": prop.bedrooms,
        "bathrooms": str(prop.bathrooms),
        "monthly_rent": str(prop.monthly_rent),
    }
