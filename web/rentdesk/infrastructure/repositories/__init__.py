from .user_repository import UserRepository
from .profile_repository import LandlordProfileRepository, RenterProfileRepository
from .property_repository import PropertyRepository
from .invitation_repository import InvitationRepository
from .application_repository import ApplicationRepository
from .lease_repository import LeaseRepository
from .payment_repository import RentPaymentRepository, SecurityDepositRepository
from .invoice_repository import InvoiceRepository
from .notice_repository import NoticeRepository
from .notification_repository import NotificationRepository
from .renter_status_repository import RenterStatusRepository
from .template_repository import LeaseTemplateRepository
from .document_repository import DocumentRepository

__all__ = [
    "UserRepository",
    "LandlordProfileRepository",
    "RenterProfileRepository",
    "PropertyRepository",
    "InvitationRepository",
    "ApplicationRepository",
    "LeaseRepository",
    "RentPaymentRepository",
    "SecurityDepositRepository",
    "InvoiceRepository",
    "NoticeRepository",
    "NotificationRepository",
    "RenterStatusRepository",
    "LeaseTemplateRepository",
    "DocumentRepository",
]
