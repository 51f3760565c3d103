from sqlalchemy import select

from rentdesk.models import Lease, Notice, Property, RenterStatus, RentPayment, User
from rentdesk.services import PaymentService


async def _create(client, landlord, payload):
    resp = await client.post("/api/v1/leases", json=payload, headers=landlord)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_end_date_must_follow_start_date(client, landlord, lease_payload):
    resp = await client.post(
        "/api/v1/leases", json=lease_payload(start_date="2025-05-01", end_date="2025-05-01"), headers=landlord
    )
    assert resp.status_code == 422


async def test_pending_lease_is_sent_to_renter(client, landlord, renter, lease_payload, session):
    lease = await _create(client, landlord, lease_payload(lease_terms={"pet_deposit": "300", "custom_clauses": ["No smoking"]}))
    assert lease["status"] == "pending_signature"
    assert lease["renter_id"] is not None
    assert lease["lease_terms"]["custom_clauses"] == ["No smoking"]
    assert lease["signature_status"]["renter_signed"] is False

    notices = await client.get("/api/v1/notices/mine", headers=renter)
    assert [n["type"] for n in notices.json()] == ["lease_received"]
    row = await session.scalar(select(RenterStatus))
    assert row.status == "lease"

    mine = await client.get("/api/v1/leases/mine", headers=renter)
    assert [lease_["id"] for lease_ in mine.json()] == [lease["id"]]


async def test_signing_by_all_parties(client, landlord, renter, lease_payload, session):
    lease = await _create(client, landlord, lease_payload())

    resp = await client.post(
        f"/api/v1/leases/{lease['id']}/sign", json={"party": "renter", "signature_data": "sig"}, headers=renter
    )
    assert resp.status_code == 200
    status = resp.json()["signature_status"]
    assert status["renter_signed"] is True
    assert status["completed_at"] is None

    again = await client.post(f"/api/v1/leases/{lease['id']}/sign", json={"party": "renter"}, headers=renter)
    assert again.status_code == 409

    forged = await client.post(f"/api/v1/leases/{lease['id']}/sign", json={"party": "landlord"}, headers=renter)
    assert forged.status_code == 403

    resp = await client.post(f"/api/v1/leases/{lease['id']}/sign", json={"party": "landlord"}, headers=landlord)
    assert resp.status_code == 200
    assert resp.json()["signature_status"]["completed_at"] is not None
    assert resp.json()["status"] == "pending_signature"

    lease_notices = await client.get("/api/v1/notices/lease", headers=landlord)
    assert {n["type"] for n in lease_notices.json()} == {"lease_received", "lease_completed"}
    renter_types = [n["type"] for n in (await client.get("/api/v1/notices/mine", headers=renter)).json()]
    assert "lease_completed" not in renter_types


async def test_co_signer_is_required_before_completion(client, landlord, renter, lease_payload):
    lease = await _create(client, landlord, lease_payload(co_signer_required=True))
    await client.post(f"/api/v1/leases/{lease['id']}/sign", json={"party": "renter"}, headers=renter)
    resp = await client.post(f"/api/v1/leases/{lease['id']}/sign", json={"party": "landlord"}, headers=landlord)
    assert resp.json()["signature_status"]["completed_at"] is None

    resp = await client.post(f"/api/v1/leases/{lease['id']}/sign", json={"party": "co_signer"}, headers=renter)
    assert resp.status_code == 200
    assert resp.json()["signature_status"]["co_signer_signed"] is True
    assert resp.json()["signature_status"]["completed_at"] is not None


async def test_co_signer_not_required(client, landlord, renter, lease_payload):
    lease = await _create(client, landlord, lease_payload())
    resp = await client.post(f"/api/v1/leases/{lease['id']}/sign", json={"party": "co_signer"}, headers=renter)
    assert resp.status_code == 422


async def test_renter_rejects_lease(client, landlord, renter, lease_payload, session):
    lease = await _create(client, landlord, lease_payload())
    resp = await client.post(f"/api/v1/leases/{lease['id']}/reject", json={"reason": "Too expensive"}, headers=renter)
    assert resp.status_code == 200
    assert resp.json()["status"] == "terminated"
    assert resp.json()["lease_terms"]["rejection_reason"] == "Too expensive"
    row = await session.scalar(select(RenterStatus))
    assert row.status == "lease_rejected"

    sign = await client.post(f"/api/v1/leases/{lease['id']}/sign", json={"party": "renter"}, headers=renter)
    assert sign.status_code == 422


async def test_start_lease_moves_renter_in(client, landlord, renter, property_id, lease_payload, session):
    lease = await _create(client, landlord, lease_payload(status="draft"))
    resp = await client.post(f"/api/v1/leases/{lease['id']}/start", json={}, headers=landlord)
    assert resp.status_code == 200
    assert resp.json()["status"] == "active"

    prop = await session.get(Property, property_id)
    assert prop.status == "occupied"
    user = await session.scalar(select(User).where(User.email == "renter@example.com"))
    assert user.current_property_id == property_id
    assert user.current_property_details["city"] == "Springfield"
    due_dates = (await session.scalars(
        select(RentPayment.due_date).where(RentPayment.lease_id == lease["id"]).order_by(RentPayment.due_date)
    )).all()
    assert [d.isoformat() for d in due_dates] == [
        "2025-01-31", "2025-02-28", "2025-03-31", "2025-04-30", "2025-05-31", "2025-06-30",
    ]

    again = await client.post(f"/api/v1/leases/{lease['id']}/start", json={}, headers=landlord)
    assert again.status_code == 422


async def test_update_to_active_generates_schedule_once(client, landlord, lease_payload, session):
    lease = await _create(client, landlord, lease_payload(status="draft", start_date="2025-01-01", end_date="2025-04-01"))
    resp = await client.patch(f"/api/v1/leases/{lease['id']}", json={"status": "active"}, headers=landlord)
    assert resp.status_code == 200
    await client.patch(f"/api/v1/leases/{lease['id']}", json={"monthly_rent": "1200.00"}, headers=landlord)
    count = len((await session.scalars(select(RentPayment).where(RentPayment.lease_id == lease["id"]))).all())
    assert count == 3


async def test_failed_schedule_does_not_block_activation(client, landlord, lease_payload, session, monkeypatch):
    async def broken_schedule(self, lease):
        # amount and due_date are NOT NULL
        self.session.add(RentPayment(lease_id=lease.id, landlord_id=lease.landlord_id))
        await self.session.flush()

    monkeypatch.setattr(PaymentService, "generate_monthly_schedule", broken_schedule)
    lease = await _create(client, landlord, lease_payload(status="draft"))
    resp = await client.patch(f"/api/v1/leases/{lease['id']}", json={"status": "active"}, headers=landlord)
    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == "active"

    stored = await session.get(Lease, lease["id"])
    assert stored.status == "active"
    assert (await session.scalars(select(RentPayment))).all() == []


async def test_lease_is_private_to_its_parties(client, landlord, other_renter, lease_payload):
    lease = await _create(client, landlord, lease_payload())
    assert (await client.get(f"/api/v1/leases/{lease['id']}", headers=landlord)).status_code == 200
    assert (await client.get(f"/api/v1/leases/{lease['id']}", headers=other_renter)).status_code == 404


async def test_generate_lease_document(client, landlord, renter, property_id, lease_payload, fake_storage):
    lease = await _create(client, landlord, lease_payload())
    resp = await client.post(f"/api/v1/leases/{lease['id']}/document", headers=landlord)
    assert resp.status_code == 201
    document = resp.json()
    assert document["type"] == "lease"
    assert document["key"].startswith(f"documents/{property_id}/lease_{lease['id']}_")
    data, content_type = fake_storage.objects[document["key"]]
    assert content_type == "application/pdf"
    assert data.startswith(b"%PDF")

    latest = await client.get(f"/api/v1/documents/{property_id}/latest", headers=renter)
    assert latest.status_code == 200
    assert latest.json()["id"] == document["id"]
    assert latest.json()["url"].startswith("http://files.test/")

    listing = await client.get(f"/api/v1/properties/{property_id}/documents", headers=landlord)
    assert [d["source"] for d in listing.json()] == ["document"]


async def test_delete_lease(client, landlord, lease_payload):
    lease = await _create(client, landlord, lease_payload(status="draft"))
    assert (await client.delete(f"/api/v1/leases/{lease['id']}", headers=landlord)).status_code == 204
    assert (await client.get(f"/api/v1/leases/{lease['id']}", headers=landlord)).status_code == 404
