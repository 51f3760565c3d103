from datetime import date

import stripe
from sqlalchemy import select

from rentdesk.models import Lease, Notification, RenterStatus, RentPayment, SecurityDeposit, User


async def _invoice(client, landlord, property_id, **extra):
    resp = await client.post(
        "/api/v1/invoices",
        json={"property_id": property_id, "renter_email": "Renter@Example.com", **extra},
        headers=landlord,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_invoice_bills_move_in_costs(client, landlord, renter, property_id, session):
    invoice = await _invoice(client, landlord, property_id)
    assert invoice["status"] == "sent"
    assert invoice["renter_email"] == "renter@example.com"
    assert invoice["amount"] == 2450.0
    assert invoice["pet_fee"] == 0.0
    assert invoice["property_details"]["city"] == "Springfield"
    assert invoice["notice_id"] is not None

    with_pet = await _invoice(client, landlord, property_id, include_pet_fee=True)
    assert with_pet["amount"] == 2700.0
    assert with_pet["pet_fee"] == 250.0

    notices = (await client.get("/api/v1/notices/mine", headers=renter)).json()
    assert [n["type"] for n in notices] == ["invoice_sent", "invoice_sent"]
    mine = (await client.get("/api/v1/invoices/mine", headers=renter)).json()
    assert len(mine) == 2

    row = await session.scalar(select(RenterStatus))
    assert row.status == "payment"


async def test_invoice_visibility(client, landlord, renter, other_renter, property_id):
    invoice = await _invoice(client, landlord, property_id)
    assert (await client.get(f"/api/v1/invoices/{invoice['id']}", headers=renter)).status_code == 200
    assert (await client.get(f"/api/v1/invoices/{invoice['id']}", headers=other_renter)).status_code == 404
    assert (await client.get("/api/v1/invoices/mine", headers=other_renter)).json() == []


async def test_pay_invoice_moves_renter_in(client, landlord, renter, property_id, fake_stripe, session):
    invoice = await _invoice(client, landlord, property_id)

    intent = await client.post("/api/v1/payments/intent", json={"invoice_id": invoice["id"]}, headers=renter)
    assert intent.status_code == 200, intent.text
    assert fake_stripe.created[0]["amount"] == 245000
    assert fake_stripe.created[0]["metadata"]["invoice_id"] == str(invoice["id"])

    resp = await client.post(
        f"/api/v1/invoices/{invoice['id']}/pay", json={"payment_intent_id": intent.json()["id"]}, headers=renter
    )
    assert resp.status_code == 200, resp.text
    paid = resp.json()
    assert paid["status"] == "paid"
    assert paid["transaction_id"] == "pi_1"
    assert paid["paid_at"] is not None

    lease = await session.scalar(select(Lease))
    assert lease.status == "active"
    assert lease.start_date == date.today()
    assert lease.renter_signed and lease.landlord_signed

    deposits = (await client.get(f"/api/v1/deposits/lease/{lease.id}", headers=renter)).json()
    assert [d["amount"] for d in deposits] == [1200.0]
    assert deposits[0]["invoice_id"] == invoice["id"]

    settled = (await session.scalars(select(RentPayment).where(RentPayment.invoice_id == invoice["id"]))).all()
    assert sorted(p.payment_type for p in settled) == ["application_fee", "monthly_rent"]
    assert {p.status for p in settled} == {"paid"}
    assert {p.due_date for p in settled} == {lease.start_date}

    prop = (await client.get(f"/api/v1/properties/{property_id}", headers=landlord)).json()
    assert prop["status"] == "occupied"
    user = await session.scalar(select(User).where(User.email == "renter@example.com"))
    assert user.current_property_id == property_id

    renter_notices = {n["type"] for n in (await client.get("/api/v1/notices/mine", headers=renter)).json()}
    assert "payment_successful" in renter_notices
    assert "payment_received" not in renter_notices
    landlord_notices = {n["type"] for n in (await client.get("/api/v1/notices", headers=landlord)).json()}
    assert {"payment_received", "payment_successful"} <= landlord_notices

    moved_in = await session.scalar(select(Notification).where(Notification.type == "tenant_moved_in"))
    assert moved_in is not None
    row = await session.scalar(select(RenterStatus))
    assert row.status == "leased"


async def test_paying_twice_is_a_no_op(client, landlord, renter, property_id, fake_stripe, session):
    invoice = await _invoice(client, landlord, property_id)
    intent = (await client.post("/api/v1/payments/intent", json={"invoice_id": invoice["id"]}, headers=renter)).json()
    body = {"payment_intent_id": intent["id"]}
    await client.post(f"/api/v1/invoices/{invoice['id']}/pay", json=body, headers=renter)
    again = await client.post(f"/api/v1/invoices/{invoice['id']}/pay", json=body, headers=renter)
    assert again.status_code == 200

    deposits = (await session.scalars(select(SecurityDeposit))).all()
    assert len(deposits) == 1
    leases = (await session.scalars(select(Lease))).all()
    assert len(leases) == 1

    closed = await client.post("/api/v1/payments/intent", json={"invoice_id": invoice["id"]}, headers=renter)
    assert closed.status_code == 400
    assert closed.json()["details"] == {"field": "invoice_id"}


async def test_pay_invoice_requires_matching_intent(client, landlord, renter, property_id, fake_stripe):
    invoice = await _invoice(client, landlord, property_id)
    fake_stripe.intents["pi_small"] = {"id": "pi_small", "status": "succeeded", "amount": 5000}
    resp = await client.post(
        f"/api/v1/invoices/{invoice['id']}/pay", json={"payment_intent_id": "pi_small"}, headers=renter
    )
    assert resp.status_code == 422
    assert resp.json()["details"]["rule"] == "payment_amount_mismatch"
    assert (await client.get(f"/api/v1/invoices/{invoice['id']}", headers=renter)).json()["status"] == "sent"


async def test_invoice_intent_pays_only_its_invoice(client, landlord, renter, property_id, fake_stripe):
    first = await _invoice(client, landlord, property_id)
    second = await _invoice(client, landlord, property_id)
    intent = (await client.post("/api/v1/payments/intent", json={"invoice_id": first["id"]}, headers=renter)).json()

    resp = await client.post(
        f"/api/v1/invoices/{second['id']}/pay", json={"payment_intent_id": intent["id"]}, headers=renter
    )
    assert resp.status_code == 422
    assert resp.json()["details"]["rule"] == "payment_intent_mismatch"

    resp = await client.post(
        f"/api/v1/invoices/{first['id']}/pay", json={"payment_intent_id": intent["id"]}, headers=renter
    )
    assert resp.status_code == 200, resp.text

    resp = await client.post(
        f"/api/v1/invoices/{second['id']}/pay", json={"payment_intent_id": intent["id"]}, headers=renter
    )
    assert resp.status_code == 422
    assert resp.json()["details"] == {"rule": "payment_intent_reused", "payment_intent_id": intent["id"]}
    assert (await client.get(f"/api/v1/invoices/{second['id']}", headers=renter)).json()["status"] == "sent"


async def test_settlement_uses_existing_lease(client, landlord, renter, property_id, lease_payload, session):
    lease = (await client.post("/api/v1/leases", json=lease_payload(), headers=landlord)).json()
    invoice = await _invoice(client, landlord, property_id, include_pet_fee=True)

    resp = await client.patch(f"/api/v1/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=landlord)
    assert resp.status_code == 200
    assert resp.json()["transaction_id"] is None

    leases = (await session.scalars(select(Lease))).all()
    assert [row.id for row in leases] == [lease["id"]]
    assert leases[0].status == "active"
    settled = (await session.scalars(select(RentPayment).where(RentPayment.invoice_id == invoice["id"]))).all()
    assert sorted(p.payment_type for p in settled) == ["application_fee", "monthly_rent", "pet_fee"]
    assert {p.payment_method for p in settled} == {"manual"}
    assert {p.due_date for p in settled} == {date(2025, 1, 31)}

    cancel = await client.patch(
        f"/api/v1/invoices/{invoice['id']}/status", json={"status": "cancelled"}, headers=landlord
    )
    assert cancel.status_code == 422
    assert cancel.json()["details"]["rule"] == "invoice_paid"


async def test_cancelled_invoice_cannot_be_paid(client, landlord, renter, property_id):
    invoice = await _invoice(client, landlord, property_id)
    await client.patch(f"/api/v1/invoices/{invoice['id']}/status", json={"status": "cancelled"}, headers=landlord)
    resp = await client.post(
        f"/api/v1/invoices/{invoice['id']}/pay", json={"payment_intent_id": "pi_1"}, headers=renter
    )
    assert resp.status_code == 422
    assert resp.json()["details"]["rule"] == "invoice_not_payable"


async def test_webhook_settles_invoice(client, landlord, renter, property_id, monkeypatch, session):
    invoice = await _invoice(client, landlord, property_id)
    received = {}

    def construct_event(payload, sig_header, secret):
        received.update(payload=payload, sig=sig_header, secret=secret)
        return {
            "type": "payment_intent.succeeded",
            "data": {"object": {
                "id": "pi_hook",
                "amount": 245000,
                "metadata": {"invoice_id": str(invoice["id"])},
            }},
        }

    monkeypatch.setattr(stripe.Webhook, "construct_event", construct_event)
    resp = await client.post("/api/v1/payments/webhook", content=b"{}", headers={"Stripe-Signature": "t=1,v1=abc"})
    assert resp.status_code == 200
    assert resp.json() == {"received": True}
    assert received == {"payload": b"{}", "sig": "t=1,v1=abc", "secret": "whsec_test"}

    stored = (await client.get(f"/api/v1/invoices/{invoice['id']}", headers=landlord)).json()
    assert stored["status"] == "paid"
    assert stored["transaction_id"] == "pi_hook"
    assert await session.scalar(select(Lease).where(Lease.status == "active")) is not None


async def test_webhook_ignores_intent_for_another_amount(client, landlord, renter, property_id, monkeypatch, session):
    invoice = await _invoice(client, landlord, property_id)

    def construct_event(payload, sig_header, secret):
        return {
            "type": "payment_intent.succeeded",
            "data": {"object": {"id": "pi_cheap", "amount": 100, "metadata": {"invoice_id": str(invoice["id"])}}},
        }

    monkeypatch.setattr(stripe.Webhook, "construct_event", construct_event)
    resp = await client.post("/api/v1/payments/webhook", content=b"{}", headers={"Stripe-Signature": "t=1,v1=abc"})
    assert resp.status_code == 200
    assert resp.json() == {"received": True}

    stored = (await client.get(f"/api/v1/invoices/{invoice['id']}", headers=landlord)).json()
    assert stored["status"] == "sent"
    assert stored["transaction_id"] is None
    assert await session.scalar(select(Lease)) is None


async def test_webhook_rejects_bad_signature(client, monkeypatch):
    def construct_event(payload, sig_header, secret):
        raise stripe.SignatureVerificationError("bad signature", sig_header)

    monkeypatch.setattr(stripe.Webhook, "construct_event", construct_event)
    resp = await client.post("/api/v1/payments/webhook", content=b"{}", headers={"Stripe-Signature": "nope"})
    assert resp.status_code == 400
    assert resp.json()["details"] == {"field": "Stripe-Signature"}
