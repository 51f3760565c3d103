from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

STAGE_PATTERN = "^(invite|application|lease|lease_rejected|accepted|payment|leased)$"


class RenterStatusIn(BaseModel):
    property_id: int
    renter_email: EmailStr
    renter_name: Optional[str] = Field(None, max_length=120)
    status: str = Field("invite", pattern=STAGE_PATTERN)
    notes: Optional[str] = Field(None, max_length=2000)


class RenterStatusUpdate(BaseModel):
    renter_name: Optional[str] = Field(None, max_length=120)
    status: Optional[str] = Field(None, pattern=STAGE_PATTERN)
    notes: Optional[str] = Field(None, max_length=2000)


class RenterStatusMove(BaseModel):
    status: str = Field(..., pattern=STAGE_PATTERN)
    notes: Optional[str] = Field(None, max_length=2000)


class RenterStatusOut(BaseModel):
    id: int
    property_id: int
    landlord_id: int
    renter_email: str
    renter_name: Optional[str] = None
    status: str
    invitation_id: Optional[int] = None
    application_id: Optional[int] = None
    lease_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
