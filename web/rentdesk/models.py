from datetime import datetime, timezone

from sqlalchemy import (
    String, Integer, ForeignKey, Numeric, DateTime, Date, Boolean, JSON,
    UniqueConstraint, Index,
)
from sqlalchemy.orm import mapped_column, DeclarativeBase

from .roles import Role


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase): ...


# ---------- Accounts ----------
class User(Base):
    __tablename__ = "users"
    id            = mapped_column(Integer, primary_key=True)
    email         = mapped_column(String(255), unique=True, nullable=False)
    password_hash = mapped_column(String(128), nullable=False)
    name          = mapped_column(String(120), nullable=False, default="")
    # landlord | renter | admin
    role          = mapped_column(String(16), default=Role.renter.value, nullable=False)
    # Renters only: the property they currently live in
    current_property_id      = mapped_column(Integer, nullable=True)
    current_property_details = mapped_column(JSON, nullable=True)
    created_at    = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at    = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class LandlordProfile(Base):
    __tablename__ = "landlord_profiles"
    id              = mapped_column(Integer, primary_key=True)
    user_id         = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    full_name       = mapped_column(String(120), nullable=False, default="")
    contact_email   = mapped_column(String(255), nullable=True)
    phone           = mapped_column(String(32), nullable=True)
    mailing_address = mapped_column(String(500), nullable=True)
    business_name   = mapped_column(String(200), nullable=True)
    bank_details    = mapped_column(JSON, nullable=True, comment="{account_number, routing_number, bank_name}")
    preferred_jurisdiction = mapped_column(String(120), nullable=True)
    created_at      = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at      = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class RenterProfile(Base):
    __tablename__ = "renter_profiles"
    id                = mapped_column(Integer, primary_key=True)
    user_id           = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    full_name         = mapped_column(String(120), nullable=False, default="")
    date_of_birth     = mapped_column(Date, nullable=True)
    phone             = mapped_column(String(32), nullable=True)
    email             = mapped_column(String(255), nullable=True)
    current_address   = mapped_column(JSON, nullable=True)
    employment        = mapped_column(JSON, nullable=True)
    rent_history      = mapped_column(JSON, nullable=False, default=list)
    references        = mapped_column(JSON, nullable=False, default=list)
    emergency_contact = mapped_column(JSON, nullable=True)
    payment_method    = mapped_column(JSON, nullable=True)
    created_at        = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at        = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


# ---------- Properties ----------
class Property(Base):
    __tablename__ = "properties"
    id               = mapped_column(Integer, primary_key=True)
    landlord_id      = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    street           = mapped_column(String(200), nullable=False)
    unit             = mapped_column(String(32), nullable=True)
    city             = mapped_column(String(120), nullable=False)
    state            = mapped_column(String(64), nullable=False)
    country          = mapped_column(String(64), nullable=False, default="US")
    postal_code      = mapped_column(String(20), nullable=False)
    # apartment | house | condo | townhouse | other
    type             = mapped_column(String(16), nullable=False, default="apartment")
    bedrooms         = mapped_column(Integer, nullable=False, default=1)
    bathrooms        = mapped_column(Numeric(4, 1), nullable=False, default=1)
    square_feet      = mapped_column(Integer, nullable=True)
    description      = mapped_column(String(4000), nullable=True)
    images           = mapped_column(JSON, nullable=False, default=list, comment="storage object keys")
    amenities        = mapped_column(JSON, nullable=False, default=list)
    monthly_rent     = mapped_column(Numeric(10, 2), nullable=False, default=0)
    security_deposit = mapped_column(Numeric(10, 2), nullable=False, default=0)
    application_fee  = mapped_column(Numeric(10, 2), nullable=False, default=0)
    pet_policy       = mapped_column(JSON, nullable=True, comment="{allowed, max_pets, fee, restrictions}")
    # available | occupied | maintenance
    status           = mapped_column(String(16), nullable=False, default="available")
    created_at       = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at       = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def address_line(self) -> str:
        unit = f", Unit {self.unit}" if self.unit else ""
        return f"{self.street}{unit}, {self.city}, {self.state}"

    @property
    def pet_fee(self):
        policy = self.pet_policy or {}
        return policy.get("fee") or 0


# ---------- Invitations & applications ----------
class Invitation(Base):
    __tablename__ = "invitations"
    id           = mapped_column(Integer, primary_key=True)
    landlord_id  = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    property_id  = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    renter_email = mapped_column(String(255), nullable=False, index=True)
    # pending | accepted | declined | expired
    status       = mapped_column(String(16), nullable=False, default="pending")
    message      = mapped_column(String(2000), nullable=True)
    invited_at   = mapped_column(DateTime, default=utcnow, nullable=False)
    responded_at = mapped_column(DateTime, nullable=True)
    expires_at   = mapped_column(DateTime, nullable=False)
    updated_at   = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Application(Base):
    __tablename__ = "applications"
    id            = mapped_column(Integer, primary_key=True)
    invitation_id = mapped_column(ForeignKey("invitations.id", ondelete="CASCADE"), unique=True, nullable=False)
    property_id   = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    landlord_id   = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    renter_id     = mapped_column(ForeignKey("users.id"), nullable=True)
    renter_email  = mapped_column(String(255), nullable=False)
    full_name     = mapped_column(String(120), nullable=False)
    phone         = mapped_column(String(32), nullable=True)
    employment_company        = mapped_column(String(200), nullable=True)
    employment_job_title      = mapped_column(String(120), nullable=True)
    employment_monthly_income = mapped_column(Numeric(10, 2), nullable=True)
    application_data = mapped_column(JSON, nullable=False, default=dict)
    # draft | submitted | under_review | approved | rejected
    status        = mapped_column(String(16), nullable=False, default="submitted")
    submitted_at  = mapped_column(DateTime, nullable=True)
    reviewed_at   = mapped_column(DateTime, nullable=True)
    signature     = mapped_column(JSON, nullable=True, comment="{signed_by, signed_at, ip_address, signature_data}")
    created_at    = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at    = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


# ---------- Leases ----------
class Lease(Base):
    __tablename__ = "leases"
    id               = mapped_column(Integer, primary_key=True)
    property_id      = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    landlord_id      = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    renter_id        = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    renter_email     = mapped_column(String(255), nullable=False, index=True)
    application_id   = mapped_column(ForeignKey("applications.id", ondelete="SET NULL"), nullable=True)
    template_id      = mapped_column(ForeignKey("lease_templates.id", ondelete="SET NULL"), nullable=True)
    start_date       = mapped_column(Date, nullable=False)
    end_date         = mapped_column(Date, nullable=False)
    monthly_rent     = mapped_column(Numeric(10, 2), nullable=False)
    security_deposit = mapped_column(Numeric(10, 2), nullable=False, default=0)
    # draft | pending_signature | active | expired | terminated
    status           = mapped_column(String(20), nullable=False, default="draft")
    lease_terms      = mapped_column(JSON, nullable=False, default=dict)
    # Signature status
    renter_signed       = mapped_column(Boolean, nullable=False, default=False)
    renter_signed_at    = mapped_column(DateTime, nullable=True)
    co_signer_required  = mapped_column(Boolean, nullable=False, default=False)
    co_signer_signed    = mapped_column(Boolean, nullable=False, default=False)
    co_signer_signed_at = mapped_column(DateTime, nullable=True)
    landlord_signed     = mapped_column(Boolean, nullable=False, default=False)
    landlord_signed_at  = mapped_column(DateTime, nullable=True)
    completed_at        = mapped_column(DateTime, nullable=True)
    signatures          = mapped_column(JSON, nullable=False, default=list, comment="[{party, signed_by, signed_at, ip_address, signature_data}]")
    created_at       = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at       = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def signature_status(self) -> dict:
        return {
            "renter_signed": self.renter_signed,
            "renter_signed_at": self.renter_signed_at,
            "co_signer_required": self.co_signer_required,
            "co_signer_signed": self.co_signer_signed,
            "co_signer_signed_at": self.co_signer_signed_at,
            "landlord_signed": self.landlord_signed,
            "landlord_signed_at": self.landlord_signed_at,
            "completed_at": self.completed_at,
        }

    @property
    def fully_signed(self) -> bool:
        if self.co_signer_required and not self.co_signer_signed:
            return False
        return bool(self.renter_signed and self.landlord_signed)


# ---------- Money ----------
class RentPayment(Base):
    __tablename__ = "rent_payments"
    id             = mapped_column(Integer, primary_key=True)
    lease_id       = mapped_column(ForeignKey("leases.id", ondelete="CASCADE"), nullable=True, index=True)
    property_id    = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=True)
    landlord_id    = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    renter_id      = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    renter_email   = mapped_column(String(255), nullable=True)
    invoice_id     = mapped_column(ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True)
    amount         = mapped_column(Numeric(10, 2), nullable=False)
    due_date       = mapped_column(Date, nullable=False)
    paid_date      = mapped_column(DateTime, nullable=True)
    # pending | paid | overdue | partial
    status         = mapped_column(String(16), nullable=False, default="pending")
    # monthly_rent | security_deposit | application_fee | pet_fee
    payment_type   = mapped_column(String(24), nullable=False, default="monthly_rent")
    payment_method = mapped_column(String(64), nullable=True)
    transaction_id = mapped_column(String(128), nullable=True)
    created_at     = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at     = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_rent_payments_status_due", "status", "due_date"),
    )


class Invoice(Base):
    __tablename__ = "invoices"
    id               = mapped_column(Integer, primary_key=True)
    landlord_id      = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    property_id      = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    notice_id        = mapped_column(Integer, nullable=True)
    renter_id        = mapped_column(ForeignKey("users.id"), nullable=True)
    renter_email     = mapped_column(String(255), nullable=False, index=True)
    amount           = mapped_column(Numeric(10, 2), nullable=False)
    monthly_rent     = mapped_column(Numeric(10, 2), nullable=False, default=0)
    security_deposit = mapped_column(Numeric(10, 2), nullable=False, default=0)
    application_fee  = mapped_column(Numeric(10, 2), nullable=False, default=0)
    pet_fee          = mapped_column(Numeric(10, 2), nullable=False, default=0)
    include_pet_fee  = mapped_column(Boolean, nullable=False, default=False)
    notes            = mapped_column(String(2000), nullable=True)
    # draft | sent | paid | cancelled
    status           = mapped_column(String(16), nullable=False, default="sent")
    property_details = mapped_column(JSON, nullable=True, comment="snapshot of the property when invoiced")
    paid_at          = mapped_column(DateTime, nullable=True)
    transaction_id   = mapped_column(String(128), nullable=True)
    created_at       = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at       = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class SecurityDeposit(Base):
    __tablename__ = "security_deposits"
    id             = mapped_column(Integer, primary_key=True)
    lease_id       = mapped_column(ForeignKey("leases.id", ondelete="CASCADE"), nullable=True, index=True)
    property_id    = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=True)
    renter_id      = mapped_column(ForeignKey("users.id"), nullable=True)
    renter_email   = mapped_column(String(255), nullable=True)
    landlord_id    = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    amount         = mapped_column(Numeric(10, 2), nullable=False)
    paid_date      = mapped_column(DateTime, nullable=False, default=utcnow)
    payment_method = mapped_column(String(64), nullable=True)
    transaction_id = mapped_column(String(128), nullable=True)
    invoice_id     = mapped_column(ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True)
    created_at     = mapped_column(DateTime, default=utcnow, nullable=False)


# ---------- Messaging ----------
class Notice(Base):
    __tablename__ = "notices"
    id           = mapped_column(Integer, primary_key=True)
    landlord_id  = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    property_id  = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    renter_id    = mapped_column(ForeignKey("users.id"), nullable=True)
    renter_email = mapped_column(String(255), nullable=False, index=True)
    # landlord | renter | system
    sender_role  = mapped_column(String(16), nullable=False, default="landlord")
    type         = mapped_column(String(32), nullable=False)
    subject      = mapped_column(String(200), nullable=False)
    message      = mapped_column(String(5000), nullable=False)
    attachments  = mapped_column(JSON, nullable=False, default=list, comment="[{name, size, type, key}]")
    invoice_id   = mapped_column(Integer, nullable=True)
    sent_at      = mapped_column(DateTime, default=utcnow, nullable=False)
    read_at      = mapped_column(DateTime, nullable=True)
    updated_at   = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Notification(Base):
    __tablename__ = "notifications"
    id          = mapped_column(Integer, primary_key=True)
    landlord_id = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type        = mapped_column(String(32), nullable=False)
    title       = mapped_column(String(200), nullable=False)
    message     = mapped_column(String(2000), nullable=False)
    data        = mapped_column(JSON, nullable=True)
    read_at     = mapped_column(DateTime, nullable=True)
    created_at  = mapped_column(DateTime, default=utcnow, nullable=False)


class RenterStatus(Base):
    __tablename__ = "renter_statuses"
    id             = mapped_column(Integer, primary_key=True)
    property_id    = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    landlord_id    = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    renter_email   = mapped_column(String(255), nullable=False)
    renter_name    = mapped_column(String(120), nullable=True)
    # invite | application | lease | lease_rejected | accepted | payment | leased
    status         = mapped_column(String(16), nullable=False, default="invite")
    invitation_id  = mapped_column(Integer, nullable=True)
    application_id = mapped_column(Integer, nullable=True)
    lease_id       = mapped_column(Integer, nullable=True)
    notes          = mapped_column(String(2000), nullable=True)
    created_at     = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at     = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("property_id", "renter_email", name="uix_renter_status_property_email"),
    )


# ---------- Templates & documents ----------
class LeaseTemplate(Base):
    __tablename__ = "lease_templates"
    id            = mapped_column(Integer, primary_key=True)
    name          = mapped_column(String(200), nullable=False)
    region        = mapped_column(String(120), nullable=False)
    country       = mapped_column(String(64), nullable=False, default="US")
    state         = mapped_column(String(64), nullable=True)
    document_type = mapped_column(String(32), nullable=False, default="lease")
    fields        = mapped_column(JSON, nullable=False, default=list)
    created_by    = mapped_column(ForeignKey("users.id"), nullable=True)
    version       = mapped_column(Integer, nullable=False, default=1)
    is_active     = mapped_column(Boolean, nullable=False, default=True)
    created_at    = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at    = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Document(Base):
    __tablename__ = "documents"
    id           = mapped_column(Integer, primary_key=True)
    property_id  = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    lease_id     = mapped_column(ForeignKey("leases.id", ondelete="SET NULL"), nullable=True)
    landlord_id  = mapped_column(ForeignKey("users.id"), nullable=False)
    renter_email = mapped_column(String(255), nullable=True)
    type         = mapped_column(String(32), nullable=False, default="lease")
    name         = mapped_column(String(255), nullable=False)
    key          = mapped_column(String(512), nullable=False)
    status       = mapped_column(String(16), nullable=False, default="completed")
    uploaded_at  = mapped_column(DateTime, default=utcnow, nullable=False)
