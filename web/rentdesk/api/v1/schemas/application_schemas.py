from datetime import datetime
from decimal import Decimal
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class SignatureIn(BaseModel):
    signed_by: Optional[str] = None
    signature_data: str = Field(..., min_length=1)


class ApplicationIn(BaseModel):
    """Schema for submitting a rental application"""
    invitation_id: int
    full_name: Optional[str] = Field(None, max_length=120)
    phone: Optional[str] = Field(None, max_length=32)
    employment_company: Optional[str] = Field(None, max_length=200)
    employment_job_title: Optional[str] = Field(None, max_length=120)
    employment_monthly_income: Optional[Decimal] = Field(None, ge=0)
    application_data: Dict[str, Any] = {}
    signature: Optional[SignatureIn] = None
    draft: bool = False


class ApplicationOut(BaseModel):
    id: int
    invitation_id: int
    property_id: int
    landlord_id: int
    renter_id: Optional[int] = None
    renter_email: str
    full_name: str
    phone: Optional[str] = None
    employment_company: Optional[str] = None
    employment_job_title: Optional[str] = None
    employment_monthly_income: Optional[float] = None
    application_data: Dict[str, Any] = {}
    status: str
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    signature: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ApplicationReview(BaseModel):
    status: str = Field(..., pattern="^(under_review|approved|rejected)$")
