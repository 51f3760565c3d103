from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel


class AttachmentOut(BaseModel):
    name: str
    size: Optional[int] = None
    type: Optional[str] = None
    key: str
    url: Optional[str] = None


class NoticeOut(BaseModel):
    id: int
    landlord_id: int
    property_id: int
    renter_id: Optional[int] = None
    renter_email: str
    sender_role: str
    type: str
    subject: str
    message: str
    attachments: List[AttachmentOut] = []
    invoice_id: Optional[int] = None
    sent_at: datetime
    read_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class NotificationOut(BaseModel):
    id: int
    type: str
    title: str
    message: str
    data: Optional[Dict[str, Any]] = None
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CountOut(BaseModel):
    count: int
