from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, EmailStr, Field, model_validator


class LeaseTerms(BaseModel):
    pet_policy: Optional[str] = None
    pet_deposit: Optional[Decimal] = Field(None, ge=0)
    smoking_allowed: bool = False
    utilities_included: List[str] = []
    parking_included: bool = False
    custom_clauses: List[str] = []


class LeaseIn(BaseModel):
    """Schema for creating leases"""
    property_id: int
    renter_email: EmailStr
    application_id: Optional[int] = None
    template_id: Optional[int] = None
    start_date: date
    end_date: date
    monthly_rent: Decimal = Field(..., ge=0)
    security_deposit: Decimal = Field(Decimal("0"), ge=0)
    status: str = Field("draft", pattern="^(draft|pending_signature|active)$")
    lease_terms: LeaseTerms = LeaseTerms()
    co_signer_required: bool = False

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class LeaseUpdate(BaseModel):
    """Schema for partial lease updates"""
    renter_email: Optional[EmailStr] = None
    template_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    monthly_rent: Optional[Decimal] = Field(None, ge=0)
    security_deposit: Optional[Decimal] = Field(None, ge=0)
    status: Optional[str] = Field(None, pattern="^(draft|pending_signature|active|expired|terminated)$")
    lease_terms: Optional[LeaseTerms] = None
    co_signer_required: Optional[bool] = None


class SignatureStatus(BaseModel):
    renter_signed: bool
    renter_signed_at: Optional[datetime] = None
    co_signer_required: bool
    co_signer_signed: bool
    co_signer_signed_at: Optional[datetime] = None
    landlord_signed: bool
    landlord_signed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class LeaseOut(BaseModel):
    id: int
    property_id: int
    landlord_id: int
    renter_id: Optional[int] = None
    renter_email: str
    application_id: Optional[int] = None
    template_id: Optional[int] = None
    start_date: date
    end_date: date
    monthly_rent: float
    security_deposit: float
    status: str
    lease_terms: Dict[str, Any] = {}
    signature_status: SignatureStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LeaseSignIn(BaseModel):
    party: str = Field("renter", pattern="^(renter|co_signer|landlord)$")
    signature_data: Optional[str] = None


class LeaseRejectIn(BaseModel):
    reason: Optional[str] = Field(None, max_length=2000)


class LeaseStartIn(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
