from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated: bool = True):
    cols = [sa.Column('created_at', sa.DateTime(), nullable=False)]
    if updated:
        cols.append(sa.Column('updated_at', sa.DateTime(), nullable=False))
    return cols


def _money(name: str, nullable: bool = False):
    return sa.Column(name, sa.Numeric(10, 2), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(128), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('role', sa.String(16), nullable=False),
        sa.Column('current_property_id', sa.Integer(), nullable=True),
        sa.Column('current_property_details', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'landlord_profiles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('full_name', sa.String(120), nullable=False),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(32), nullable=True),
        sa.Column('mailing_address', sa.String(500), nullable=True),
        sa.Column('business_name', sa.String(200), nullable=True),
        sa.Column('bank_details', sa.JSON(), nullable=True),
        sa.Column('preferred_jurisdiction', sa.String(120), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'renter_profiles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('full_name', sa.String(120), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('phone', sa.String(32), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('current_address', sa.JSON(), nullable=True),
        sa.Column('employment', sa.JSON(), nullable=True),
        sa.Column('rent_history', sa.JSON(), nullable=False),
        sa.Column('references', sa.JSON(), nullable=False),
        sa.Column('emergency_contact', sa.JSON(), nullable=True),
        sa.Column('payment_method', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'lease_templates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('region', sa.String(120), nullable=False),
        sa.Column('country', sa.String(64), nullable=False),
        sa.Column('state', sa.String(64), nullable=True),
        sa.Column('document_type', sa.String(32), nullable=False),
        sa.Column('fields', sa.JSON(), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'properties',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('landlord_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('street', sa.String(200), nullable=False),
        sa.Column('unit', sa.String(32), nullable=True),
        sa.Column('city', sa.String(120), nullable=False),
        sa.Column('state', sa.String(64), nullable=False),
        sa.Column('country', sa.String(64), nullable=False),
        sa.Column('postal_code', sa.String(20), nullable=False),
        sa.Column('type', sa.String(16), nullable=False),
        sa.Column('bedrooms', sa.Integer(), nullable=False),
        sa.Column('bathrooms', sa.Numeric(4, 1), nullable=False),
        sa.Column('square_feet', sa.Integer(), nullable=True),
        sa.Column('description', sa.String(4000), nullable=True),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('amenities', sa.JSON(), nullable=False),
        _money('monthly_rent'),
        _money('security_deposit'),
        _money('application_fee'),
        sa.Column('pet_policy', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(16), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'invitations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('landlord_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('property_id', sa.Integer(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('renter_email', sa.String(255), nullable=False, index=True),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('message', sa.String(2000), nullable=True),
        sa.Column('invited_at', sa.DateTime(), nullable=False),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'applications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('invitation_id', sa.Integer(), sa.ForeignKey('invitations.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('property_id', sa.Integer(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('landlord_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('renter_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('renter_email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(120), nullable=False),
        sa.Column('phone', sa.String(32), nullable=True),
        sa.Column('employment_company', sa.String(200), nullable=True),
        sa.Column('employment_job_title', sa.String(120), nullable=True),
        _money('employment_monthly_income', nullable=True),
        sa.Column('application_data', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('signature', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'leases',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('property_id', sa.Integer(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('landlord_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('renter_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True, index=True),
        sa.Column('renter_email', sa.String(255), nullable=False, index=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id', ondelete='SET NULL'), nullable=True),
        sa.Column('template_id', sa.Integer(), sa.ForeignKey('lease_templates.id', ondelete='SET NULL'), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        _money('monthly_rent'),
        _money('security_deposit'),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('lease_terms', sa.JSON(), nullable=False),
        sa.Column('renter_signed', sa.Boolean(), nullable=False),
        sa.Column('renter_signed_at', sa.DateTime(), nullable=True),
        sa.Column('co_signer_required', sa.Boolean(), nullable=False),
        sa.Column('co_signer_signed', sa.Boolean(), nullable=False),
        sa.Column('co_signer_signed_at', sa.DateTime(), nullable=True),
        sa.Column('landlord_signed', sa.Boolean(), nullable=False),
        sa.Column('landlord_signed_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('signatures', sa.JSON(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('landlord_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('property_id', sa.Integer(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('notice_id', sa.Integer(), nullable=True),
        sa.Column('renter_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('renter_email', sa.String(255), nullable=False, index=True),
        _money('amount'),
        _money('monthly_rent'),
        _money('security_deposit'),
        _money('application_fee'),
        _money('pet_fee'),
        sa.Column('include_pet_fee', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.String(2000), nullable=True),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('property_details', sa.JSON(), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('transaction_id', sa.String(128), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'rent_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('lease_id', sa.Integer(), sa.ForeignKey('leases.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('property_id', sa.Integer(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=True),
        sa.Column('landlord_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('renter_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True, index=True),
        sa.Column('renter_email', sa.String(255), nullable=True),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id', ondelete='SET NULL'), nullable=True),
        _money('amount'),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('paid_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('payment_type', sa.String(24), nullable=False),
        sa.Column('payment_method', sa.String(64), nullable=True),
        sa.Column('transaction_id', sa.String(128), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_rent_payments_status_due', 'rent_payments', ['status', 'due_date'])

    op.create_table(
        'security_deposits',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('lease_id', sa.Integer(), sa.ForeignKey('leases.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('property_id', sa.Integer(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=True),
        sa.Column('renter_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('renter_email', sa.String(255), nullable=True),
        sa.Column('landlord_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        _money('amount'),
        sa.Column('paid_date', sa.DateTime(), nullable=False),
        sa.Column('payment_method', sa.String(64), nullable=True),
        sa.Column('transaction_id', sa.String(128), nullable=True),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(updated=False),
    )

    op.create_table(
        'notices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('landlord_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('property_id', sa.Integer(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('renter_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('renter_email', sa.String(255), nullable=False, index=True),
        sa.Column('sender_role', sa.String(16), nullable=False),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('subject', sa.String(200), nullable=False),
        sa.Column('message', sa.String(5000), nullable=False),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('landlord_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.String(2000), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        *_timestamps(updated=False),
    )

    op.create_table(
        'renter_statuses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('property_id', sa.Integer(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('landlord_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('renter_email', sa.String(255), nullable=False),
        sa.Column('renter_name', sa.String(120), nullable=True),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('invitation_id', sa.Integer(), nullable=True),
        sa.Column('application_id', sa.Integer(), nullable=True),
        sa.Column('lease_id', sa.Integer(), nullable=True),
        sa.Column('notes', sa.String(2000), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('property_id', 'renter_email', name='uix_renter_status_property_email'),
    )

    op.create_table(
        'documents',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('property_id', sa.Integer(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('lease_id', sa.Integer(), sa.ForeignKey('leases.id', ondelete='SET NULL'), nullable=True),
        sa.Column('landlord_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('renter_email', sa.String(255), nullable=True),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('key', sa.String(512), nullable=False),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    for table in (
        'documents', 'renter_statuses', 'notifications', 'notices', 'security_deposits',
        'rent_payments', 'invoices', 'leases', 'applications', 'invitations', 'properties',
        'lease_templates', 'renter_profiles', 'landlord_profiles', 'users',
    ):
        op.drop_table(table)
