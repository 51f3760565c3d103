from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class DocumentOut(BaseModel):
    id: int
    property_id: int
    lease_id: Optional[int] = None
    renter_email: Optional[str] = None
    type: str
    name: str
    key: str
    status: str
    uploaded_at: datetime
    url: Optional[str] = None

    model_config = {"from_attributes": True}


class PropertyDocumentOut(BaseModel):
    id: Optional[int] = None
    name: str
    type: str
    source: str
    url: Optional[str] = None
    uploaded_at: datetime
