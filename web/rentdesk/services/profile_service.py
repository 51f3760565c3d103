from typing import Any, Dict, Optional
import phonenumbers

from ..core import ValidationError, NotFoundError
from ..core.unit_of_work import UnitOfWork
from ..models import LandlordProfile, RenterProfile, User


class ProfileService:
    """Service for landlord and renter profile operations"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def validate_phone_number(self, phone_number: Optional[str]) -> Optional[str]:
        """Validate and format an international phone number.

        Args:
            phone_number: Phone number to validate

        Returns:
            Formatted E.164 phone number, or None for an empty value

        Raises:
            ValidationError: If the phone number is invalid
        """
        if not phone_number or phone_number.strip() == '':
            return None

        try:
            parsed = phonenumbers.parse(phone_number, None)
        except phonenumbers.NumberParseException:
            raise ValidationError(
                "Invalid phone number format. Please include country code (e.g. +1 for the US).",
                field="phone",
            )
        if not phonenumbers.is_valid_number(parsed):
            raise ValidationError("Invalid phone number format", field="phone")

        # Format to E.164 standard (e.g. +12125551234)
        return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(data)
        if "phone" in data:
            data["phone"] = self.validate_phone_number(data["phone"])
        return data

    async def get_landlord_profile(self, user_id: int) -> LandlordProfile:
        async with self.uow:
            profile = await self.uow.landlord_profile.get_by_user_id(user_id)
        if not profile:
            raise NotFoundError("Landlord profile")
        return profile

    async def update_landlord_profile(self, user_id: int, data: Dict[str, Any]) -> LandlordProfile:
        data = self._clean(data)
        async with self.uow:
            profile = await self.uow.landlord_profile.upsert(user_id, data)
            await self.uow.commit()
            return profile

    async def get_renter_profile(self, user_id: int) -> RenterProfile:
        async with self.uow:
            profile = await self.uow.renter_profile.get_by_user_id(user_id)
        if not profile:
            raise NotFoundError("Renter profile")
        return profile

    async def update_renter_profile(self, user_id: int, data: Dict[str, Any]) -> RenterProfile:
        data = self._clean(data)
        async with self.uow:
            profile = await self.uow.renter_profile.upsert(user_id, data)
            await self.uow.commit()
            return profile

    async def update_current_property(
        self, renter_id: int, property_id: Optional[int], details: Optional[Dict[str, Any]] = None
    ) -> User:
        """Record the property the renter currently lives in"""
        async with self.uow:
            user = await self.uow.users.update(
                id=renter_id,
                obj_in={"current_property_id": property_id, "current_property_details": details},
            )
            if not user:
                raise NotFoundError("User", renter_id)
            return user
