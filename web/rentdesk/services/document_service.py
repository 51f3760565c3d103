"""Lease agreement PDFs and other property documents."""

from __future__ import annotations

import io
import logging
import time
from decimal import Decimal
from typing import Any, Dict, List

from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas as _canvas
from sqlalchemy.ext.asyncio import AsyncSession

from .. import storage
from ..core import BaseService, NotFoundError
from ..infrastructure.repositories import (
    DocumentRepository, LeaseRepository, PropertyRepository, ApplicationRepository,
    UserRepository,
)
from ..models import Document, Lease, Property, utcnow
from ..roles import Role

logger = logging.getLogger(__name__)

_MARGIN = 60
_LINE = 16


def _money(value) -> str:
    return f"${Decimal(str(value or 0)):,.2f}"


def render_lease_pdf(lease: Lease, prop: Property, landlord_name: str) -> bytes:
    """Render a plain lease agreement for *lease* and return the PDF bytes."""
    buf = io.BytesIO()
    pdf = _canvas.Canvas(buf, pagesize=LETTER)
    page_w, page_h = LETTER
    y = page_h - _MARGIN

    def line(text: str, font: str = "Helvetica", size: int = 11, gap: int = _LINE) -> None:
        nonlocal y
        if y < _MARGIN:
            pdf.showPage()
            y = page_h - _MARGIN
        pdf.setFont(font, size)
        pdf.drawString(_MARGIN, y, text)
        y -= gap

    pdf.setTitle(f"Lease agreement #{lease.id}")
    line("RESIDENTIAL LEASE AGREEMENT", "Helvetica-Bold", 16, 28)
    line(f"Property: {prop.address_line} {prop.postal_code}")
    line(f"Landlord: {landlord_name}")
    line(f"Tenant: {lease.renter_email}", gap=28)

    line("Term and rent", "Helvetica-Bold", 12)
    line(f"Lease term: {lease.start_date.isoformat()} to {lease.end_date.isoformat()}")
    line(f"Monthly rent: {_money(lease.monthly_rent)}")
    line(f"Security deposit: {_money(lease.security_deposit)}", gap=28)

    terms = lease.lease_terms or {}
    line("Terms", "Helvetica-Bold", 12)
    if "pet_policy" in terms:
        line(f"Pets: {terms['pet_policy']}")
    if terms.get("pet_deposit"):
        line(f"Pet deposit: {_money(terms['pet_deposit'])}")
    for key, label in (
        ("smoking_allowed", "Smoking allowed"),
        ("utilities_included", "Utilities included"),
        ("parking_included", "Parking included"),
    ):
        if key in terms:
            line(f"{label}: {'yes' if terms[key] else 'no'}")
    for number, clause in enumerate(terms.get("custom_clauses") or [], start=1):
        line(f"{number}. {clause}")

    y -= _LINE
    line("Signatures", "Helvetica-Bold", 12)
    status = lease.signature_status
    for party, label in (("renter", "Tenant"), ("landlord", "Landlord"), ("co_signer", "Co-signer")):
        if party == "co_signer" and not status["co_signer_required"]:
            continue
        signed_at = status[f"{party}_signed_at"]
        when = signed_at.strftime("%Y-%m-%d %H:%M UTC") if signed_at else "not signed"
        line(f"{label}: {when}")

    pdf.setFont("Helvetica", 8)
    pdf.drawString(_MARGIN, _MARGIN / 2, f"Generated {utcnow():%Y-%m-%d %H:%M} UTC")
    pdf.showPage()
    pdf.save()
    return buf.getvalue()


class DocumentService(BaseService):
    """Service for stored documents."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.repo = DocumentRepository(session)
        self.properties = PropertyRepository(session)

    async def generate_lease_document(self, landlord_id: int, lease_id: int) -> Document:
        lease = await LeaseRepository(self.session).get(lease_id)
        if not lease or lease.landlord_id != landlord_id:
            raise NotFoundError("Lease", lease_id)
        prop = await self.properties.get(lease.property_id)
        landlord = await UserRepository(self.session).get(landlord_id)

        data = render_lease_pdf(lease, prop, landlord.name or landlord.email)
        key = storage.put_bytes(
            f"documents/{prop.id}/lease_{lease.id}_{int(time.time() * 1000)}.pdf", data
        )
        document = await self.repo.create(obj_in={
            "property_id": prop.id,
            "lease_id": lease.id,
            "landlord_id": landlord_id,
            "renter_email": lease.renter_email,
            "type": "lease",
            "name": f"Lease agreement #{lease.id}.pdf",
            "key": key,
            "status": "completed",
        })
        logger.info("Lease document %s stored at %s", document.id, key)
        return document

    async def _check_access(self, user: dict, property_id: int) -> Property:
        prop = await self.properties.get(property_id)
        if not prop:
            raise NotFoundError("Property", property_id)
        role = user.get("role")
        if role == Role.admin.value:
            return prop
        if role == Role.landlord.value and prop.landlord_id == int(user["sub"]):
            return prop
        if role == Role.renter.value:
            lease = await LeaseRepository(self.session).find_for_renter_on_property(property_id, user["email"])
            if lease:
                return prop
        raise NotFoundError("Property", property_id)

    def _visible(self, user: dict, documents: List[Document]) -> List[Document]:
        if user.get("role") != Role.renter.value:
            return documents
        email = user["email"].lower()
        return [d for d in documents if (d.renter_email or "").lower() == email]

    async def get_lease_documents(self, user: dict, property_id: int) -> List[Document]:
        await self._check_access(user, property_id)
        return self._visible(user, await self.repo.get_by_property(property_id, "lease"))

    async def get_latest_lease_document(self, user: dict, property_id: int) -> Document:
        documents = await self.get_lease_documents(user, property_id)
        if not documents:
            raise NotFoundError("Lease document")
        return documents[0]

    async def get_property_documents(self, user: dict, property_id: int) -> List[Dict[str, Any]]:
        """Lease documents plus files attached to applications, newest first"""
        await self._check_access(user, property_id)
        entries: List[Dict[str, Any]] = [
            {
                "id": doc.id,
                "name": doc.name,
                "type": doc.type,
                "source": "document",
                "url": storage.presigned(doc.key),
                "uploaded_at": doc.uploaded_at,
            }
            for doc in self._visible(user, await self.repo.get_by_property(property_id))
        ]

        applications = await ApplicationRepository(self.session).get_by_property(property_id)
        if user.get("role") == Role.renter.value:
            applications = [a for a in applications if a.renter_email.lower() == user["email"].lower()]
        for application in applications:
            for item in (application.application_data or {}).get("documents") or []:
                url = item.get("url") or (storage.presigned(item["key"]) if item.get("key") else None)
                entries.append({
                    "id": None,
                    "name": item.get("name", "document"),
                    "type": item.get("type", "application"),
                    "source": f"application:{application.id}",
                    "url": url,
                    "uploaded_at": application.submitted_at or application.created_at,
                })

        entries.sort(key=lambda e: e["uploaded_at"], reverse=True)
        return entries
