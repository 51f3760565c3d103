from fastapi import APIRouter

from rentdesk.api.v1.endpoints import (
    auth, profile, properties, invitations, applications, leases, payments, invoices,
    deposits, notices, notifications, renter_status, documents, templates, dashboard, admin,
)


# Create main API router
api_v1_router = APIRouter()

# Include auth endpoints (public access)
api_v1_router.include_router(auth.router, prefix="/auth", tags=["auth"])

api_v1_router.include_router(profile.router, prefix="/profile", tags=["profile"])

# Landlord property management
api_v1_router.include_router(properties.router, prefix="/properties", tags=["properties"])

# Renter onboarding: invitation -> application -> lease
api_v1_router.include_router(invitations.router, prefix="/invitations", tags=["invitations"])
api_v1_router.include_router(applications.router, prefix="/applications", tags=["applications"])
api_v1_router.include_router(leases.router, prefix="/leases", tags=["leases"])

# Money
api_v1_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_v1_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
api_v1_router.include_router(deposits.router, prefix="/deposits", tags=["deposits"])

# Messaging
api_v1_router.include_router(notices.router, prefix="/notices", tags=["notices"])
api_v1_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])

api_v1_router.include_router(renter_status.router, prefix="/renter-status", tags=["renter-status"])
api_v1_router.include_router(documents.router, prefix="/documents", tags=["documents"])
api_v1_router.include_router(templates.router, prefix="/templates", tags=["templates"])
api_v1_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])

# Include admin endpoints (admin access)
api_v1_router.include_router(admin.router, prefix="/admin", tags=["admin"])
