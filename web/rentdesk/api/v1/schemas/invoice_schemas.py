from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, EmailStr, Field


class InvoiceIn(BaseModel):
    """Schema for billing a renter"""
    property_id: int
    renter_email: EmailStr
    include_pet_fee: bool = False
    notes: Optional[str] = Field(None, max_length=2000)


class InvoiceOut(BaseModel):
    id: int
    landlord_id: int
    property_id: int
    notice_id: Optional[int] = None
    renter_id: Optional[int] = None
    renter_email: str
    amount: float
    monthly_rent: float
    security_deposit: float
    application_fee: float
    pet_fee: float
    include_pet_fee: bool
    notes: Optional[str] = None
    status: str
    property_details: Optional[Dict[str, Any]] = None
    paid_at: Optional[datetime] = None
    transaction_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class InvoiceStatusIn(BaseModel):
    status: str = Field(..., pattern="^(draft|sent|paid|cancelled)$")
