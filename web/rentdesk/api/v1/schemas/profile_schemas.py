from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field


class BankDetails(BaseModel):
    account_number: str
    routing_number: str
    bank_name: str


class Address(BaseModel):
    street: str
    unit: Optional[str] = None
    city: str
    state: str
    country: str = "US"
    postal_code: str


class Employment(BaseModel):
    company: str
    job_title: Optional[str] = None
    monthly_income: Optional[Decimal] = Field(None, ge=0)
    employment_type: Optional[str] = Field(None, pattern="^(full_time|part_time|contract|self_employed)$")
    start_date: Optional[date] = None
    supervisor_name: Optional[str] = None
    supervisor_phone: Optional[str] = None


class RentHistoryEntry(BaseModel):
    address: Address
    landlord_name: Optional[str] = None
    landlord_phone: Optional[str] = None
    monthly_rent: Optional[Decimal] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason_for_leaving: Optional[str] = None


class Reference(BaseModel):
    name: str
    relationship: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None


class EmergencyContact(BaseModel):
    name: str
    relationship: Optional[str] = None
    phone: str


class PaymentMethodInfo(BaseModel):
    type: str = Field(..., pattern="^(card|bank_account)$")
    last4: Optional[str] = Field(None, max_length=4)
    brand: Optional[str] = None


class LandlordProfileIn(BaseModel):
    full_name: Optional[str] = Field(None, max_length=120)
    contact_email: Optional[EmailStr] = None
    phone: Optional[str] = None
    mailing_address: Optional[str] = Field(None, max_length=500)
    business_name: Optional[str] = Field(None, max_length=200)
    bank_details: Optional[BankDetails] = None
    preferred_jurisdiction: Optional[str] = Field(None, max_length=120)


class LandlordProfileOut(BaseModel):
    user_id: int
    full_name: str
    contact_email: Optional[str] = None
    phone: Optional[str] = None
    mailing_address: Optional[str] = None
    business_name: Optional[str] = None
    bank_details: Optional[BankDetails] = None
    preferred_jurisdiction: Optional[str] = None
    updated_at: datetime

    model_config = {"from_attributes": True}


class RenterProfileIn(BaseModel):
    full_name: Optional[str] = Field(None, max_length=120)
    date_of_birth: Optional[date] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    current_address: Optional[Address] = None
    employment: Optional[Employment] = None
    rent_history: Optional[List[RentHistoryEntry]] = None
    references: Optional[List[Reference]] = None
    emergency_contact: Optional[EmergencyContact] = None
    payment_method: Optional[PaymentMethodInfo] = None


class RenterProfileOut(BaseModel):
    user_id: int
    full_name: str
    date_of_birth: Optional[date] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    current_address: Optional[dict] = None
    employment: Optional[dict] = None
    rent_history: List[dict] = []
    references: List[dict] = []
    emergency_contact: Optional[dict] = None
    payment_method: Optional[dict] = None
    updated_at: datetime

    model_config = {"from_attributes": True}
