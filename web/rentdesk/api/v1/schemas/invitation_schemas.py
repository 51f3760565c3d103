from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class InvitationIn(BaseModel):
    """Schema for inviting a renter to apply"""
    property_id: int
    renter_email: EmailStr
    message: Optional[str] = Field(None, max_length=2000)


class InvitationOut(BaseModel):
    id: int
    landlord_id: int
    property_id: int
    renter_email: str
    status: str
    message: Optional[str] = None
    invited_at: datetime
    responded_at: Optional[datetime] = None
    expires_at: datetime

    model_config = {"from_attributes": True}


class InvitationRespond(BaseModel):
    accept: bool
