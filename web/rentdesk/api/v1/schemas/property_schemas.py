from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field

PROPERTY_TYPE_PATTERN = "^(apartment|house|condo|townhouse|other)$"
PROPERTY_STATUS_PATTERN = "^(available|occupied|maintenance)$"


class PetPolicy(BaseModel):
    allowed: bool = False
    max_pets: Optional[int] = Field(None, ge=0)
    fee: Optional[Decimal] = Field(None, ge=0)
    restrictions: Optional[str] = None


class PropertyIn(BaseModel):
    """Schema for creating properties"""
    street: str = Field(..., min_length=1, max_length=200)
    unit: Optional[str] = Field(None, max_length=32)
    city: str = Field(..., min_length=1, max_length=120)
    state: str = Field(..., min_length=1, max_length=64)
    country: str = Field("US", max_length=64)
    postal_code: str = Field(..., min_length=1, max_length=20)
    type: str = Field("apartment", pattern=PROPERTY_TYPE_PATTERN)
    bedrooms: int = Field(1, ge=0)
    bathrooms: Decimal = Field(Decimal("1"), ge=0)
    square_feet: Optional[int] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=4000)
    amenities: List[str] = []
    monthly_rent: Decimal = Field(..., ge=0)
    security_deposit: Decimal = Field(Decimal("0"), ge=0)
    application_fee: Decimal = Field(Decimal("0"), ge=0)
    pet_policy: Optional[PetPolicy] = None
    status: str = Field("available", pattern=PROPERTY_STATUS_PATTERN)


class PropertyUpdate(BaseModel):
    """Schema for partial property updates"""
    street: Optional[str] = Field(None, min_length=1, max_length=200)
    unit: Optional[str] = Field(None, max_length=32)
    city: Optional[str] = Field(None, min_length=1, max_length=120)
    state: Optional[str] = Field(None, min_length=1, max_length=64)
    country: Optional[str] = Field(None, max_length=64)
    postal_code: Optional[str] = Field(None, min_length=1, max_length=20)
    type: Optional[str] = Field(None, pattern=PROPERTY_TYPE_PATTERN)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[Decimal] = Field(None, ge=0)
    square_feet: Optional[int] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=4000)
    amenities: Optional[List[str]] = None
    monthly_rent: Optional[Decimal] = Field(None, ge=0)
    security_deposit: Optional[Decimal] = Field(None, ge=0)
    application_fee: Optional[Decimal] = Field(None, ge=0)
    pet_policy: Optional[PetPolicy] = None
    status: Optional[str] = Field(None, pattern=PROPERTY_STATUS_PATTERN)


class PropertyOut(BaseModel):
    """Schema for property response"""
    id: int
    landlord_id: int
    street: str
    unit: Optional[str] = None
    city: str
    state: str
    country: str
    postal_code: str
    type: str
    bedrooms: int
    bathrooms: float
    square_feet: Optional[int] = None
    description: Optional[str] = None
    images: List[str] = []
    image_urls: List[str] = []
    amenities: List[str] = []
    monthly_rent: float
    security_deposit: float
    application_fee: float
    pet_policy: Optional[PetPolicy] = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
    }
