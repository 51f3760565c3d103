from typing import Optional, List, Dict, Any
from pydantic import BaseModel

from .invitation_schemas import InvitationOut
from .invoice_schemas import InvoiceOut
from .lease_schemas import LeaseOut
from .payment_schemas import PaymentOut


class LandlordStats(BaseModel):
    total_properties: int
    active_leases: int
    monthly_revenue: float
    overdue_payments: int
    pending_signatures: int
    pending_applications: int
    active_invitations: int


class RenterDashboard(BaseModel):
    leases: List[LeaseOut]
    next_payment: Optional[PaymentOut] = None
    outstanding_balance: float
    unread_notices: int
    pending_invitations: List[InvitationOut]
    open_invoices: List[InvoiceOut]
    current_property: Optional[Dict[str, Any]] = None


class MaintenanceOut(BaseModel):
    overdue_payments: int
    expired_invitations: int
    expired_leases: int
