from .auth_schemas import (
    SignupRequest, LoginRequest, LoginResponse, RefreshTokenRequest, RefreshTokenResponse,
    ChangePasswordRequest, UserCreate, UserOut
)
from .profile_schemas import LandlordProfileIn, LandlordProfileOut, RenterProfileIn, RenterProfileOut
from .property_schemas import PropertyIn, PropertyUpdate, PropertyOut, PetPolicy
from .invitation_schemas import InvitationIn, InvitationOut, InvitationRespond
from .application_schemas import ApplicationIn, ApplicationOut, ApplicationReview
from .lease_schemas import LeaseIn, LeaseUpdate, LeaseOut, LeaseSignIn, LeaseRejectIn, LeaseStartIn
from .payment_schemas import (
    PaymentIn, PaymentUpdate, PaymentOut, PaymentIntentIn, PaymentIntentOut, PayIn,
    IncomeSummary, DedupeOut, DepositOut
)
from .invoice_schemas import InvoiceIn, InvoiceOut, InvoiceStatusIn
from .notice_schemas import NoticeOut, NotificationOut, CountOut
from .renter_status_schemas import RenterStatusIn, RenterStatusUpdate, RenterStatusMove, RenterStatusOut
from .document_schemas import DocumentOut, PropertyDocumentOut
from .template_schemas import (
    TemplateIn, TemplateUpdate, TemplateOut, TemplateValuesIn, TemplateValidationOut
)
from .dashboard_schemas import LandlordStats, RenterDashboard, MaintenanceOut

__all__ = [
    # Auth schemas
    "SignupRequest",
    "LoginRequest",
    "LoginResponse",
    "RefreshTokenRequest",
    "RefreshTokenResponse",
    "ChangePasswordRequest",
    "UserCreate",
    "UserOut",

    # Profile schemas
    "LandlordProfileIn",
    "LandlordProfileOut",
    "RenterProfileIn",
    "RenterProfileOut",

    # Property schemas
    "PropertyIn",
    "PropertyUpdate",
    "PropertyOut",
    "PetPolicy",

    # Invitation & application schemas
    "InvitationIn",
    "InvitationOut",
    "InvitationRespond",
    "ApplicationIn",
    "ApplicationOut",
    "ApplicationReview",

    # Lease schemas
    "LeaseIn",
    "LeaseUpdate",
    "LeaseOut",
    "LeaseSignIn",
    "LeaseRejectIn",
    "LeaseStartIn",

    # Money schemas
    "PaymentIn",
    "PaymentUpdate",
    "PaymentOut",
    "PaymentIntentIn",
    "PaymentIntentOut",
    "PayIn",
    "IncomeSummary",
    "DedupeOut",
    "DepositOut",
    "InvoiceIn",
    "InvoiceOut",
    "InvoiceStatusIn",

    # Messaging schemas
    "NoticeOut",
    "NotificationOut",
    "CountOut",
    "RenterStatusIn",
    "RenterStatusUpdate",
    "RenterStatusMove",
    "RenterStatusOut",

    # Documents & templates
    "DocumentOut",
    "PropertyDocumentOut",
    "TemplateIn",
    "TemplateUpdate",
    "TemplateOut",
    "TemplateValuesIn",
    "TemplateValidationOut",

    # Dashboards
    "LandlordStats",
    "RenterDashboard",
    "MaintenanceOut",
]
