from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Dict, List, Any
from pydantic import BaseModel, Field

PAYMENT_STATUS_PATTERN = "^(pending|paid|overdue|partial)$"
PAYMENT_TYPE_PATTERN = "^(monthly_rent|security_deposit|application_fee|pet_fee)$"


class PaymentIn(BaseModel):
    """Schema for recording a payment"""
    lease_id: int
    amount: Decimal = Field(..., gt=0)
    due_date: date
    status: str = Field("pending", pattern=PAYMENT_STATUS_PATTERN)
    payment_type: str = Field("monthly_rent", pattern=PAYMENT_TYPE_PATTERN)
    payment_method: Optional[str] = Field(None, max_length=64)
    transaction_id: Optional[str] = Field(None, max_length=128)
    paid_date: Optional[datetime] = None


class PaymentUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0)
    due_date: Optional[date] = None
    paid_date: Optional[datetime] = None
    status: Optional[str] = Field(None, pattern=PAYMENT_STATUS_PATTERN)
    payment_type: Optional[str] = Field(None, pattern=PAYMENT_TYPE_PATTERN)
    payment_method: Optional[str] = Field(None, max_length=64)
    transaction_id: Optional[str] = Field(None, max_length=128)


class PaymentOut(BaseModel):
    id: int
    lease_id: Optional[int] = None
    property_id: Optional[int] = None
    landlord_id: int
    renter_id: Optional[int] = None
    renter_email: Optional[str] = None
    invoice_id: Optional[int] = None
    amount: float
    due_date: date
    paid_date: Optional[datetime] = None
    status: str
    payment_type: str
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PaymentIntentIn(BaseModel):
    amount: Optional[Decimal] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    invoice_id: Optional[int] = None
    payment_id: Optional[int] = None


class PaymentIntentOut(BaseModel):
    id: str
    client_secret: str


class PayIn(BaseModel):
    payment_intent_id: str = Field(..., min_length=1)


class IncomeEntry(BaseModel):
    property_id: Optional[int] = None
    property_address: Optional[str] = None
    renter_email: Optional[str] = None
    total: float
    breakdown: Dict[str, float]
    payments: int
    last_paid: Optional[datetime] = None


class IncomeSummary(BaseModel):
    total: float
    incomes: List[IncomeEntry]


class DedupeOut(BaseModel):
    removed: int


class DepositOut(BaseModel):
    id: int
    lease_id: Optional[int] = None
    property_id: Optional[int] = None
    renter_id: Optional[int] = None
    renter_email: Optional[str] = None
    landlord_id: int
    amount: float
    paid_date: datetime
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    invoice_id: Optional[int] = None

    model_config = {"from_attributes": True}
