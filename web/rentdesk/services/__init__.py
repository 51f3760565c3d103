from .auth_service import AuthService
from .profile_service import ProfileService
from .property_service import PropertyService
from .invitation_service import InvitationService
from .application_service import ApplicationService
from .lease_service import LeaseService
from .payment_service import PaymentService
from .stripe_service import StripeService
from .invoice_service import InvoiceService
from .security_deposit_service import SecurityDepositService
from .notice_service import NoticeService
from .notification_service import NotificationService
from .renter_status_service import RenterStatusService
from .document_service import DocumentService
from .template_service import TemplateService
from .dashboard_service import DashboardService
from .admin_service import AdminService, MaintenanceService

__all__ = [
    "AuthService",
    "ProfileService",
    "PropertyService",
    "InvitationService",
    "ApplicationService",
    "LeaseService",
    "PaymentService",
    "StripeService",
    "InvoiceService",
    "SecurityDepositService",
    "NoticeService",
    "NotificationService",
    "RenterStatusService",
    "DocumentService",
    "TemplateService",
    "DashboardService",
    "AdminService",
    "MaintenanceService",
]
