from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from rentdesk.core import BusinessLogicError
from rentdesk.models import Lease, RentPayment
from rentdesk.services import PaymentService
from rentdesk.services.payment_service import add_months


@pytest.mark.parametrize(
    "start, months, expected",
    [
        (date(2025, 1, 31), 1, date(2025, 2, 28)),
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2025, 1, 31), 2, date(2025, 3, 31)),
        (date(2025, 11, 15), 3, date(2026, 2, 15)),
    ],
)
def test_add_months_clamps_to_month_length(start, months, expected):
    assert add_months(start, months) == expected


async def _active_lease(client, landlord, lease_payload, **overrides):
    resp = await client.post("/api/v1/leases", json=lease_payload(status="active", **overrides), headers=landlord)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_active_lease_gets_monthly_schedule(client, landlord, renter, lease_payload):
    lease = await _active_lease(client, landlord, lease_payload, start_date="2025-03-10", end_date="2025-06-10")
    resp = await client.get(f"/api/v1/payments/lease/{lease['id']}", headers=renter)
    assert resp.status_code == 200
    payments = resp.json()
    assert [p["due_date"] for p in payments] == ["2025-05-10", "2025-04-10", "2025-03-10"]
    assert {p["status"] for p in payments} == {"pending"}
    assert {p["amount"] for p in payments} == {1200.0}

    pending = await client.get(f"/api/v1/payments/lease/{lease['id']}/pending", headers=landlord)
    assert len(pending.json()) == 3


async def test_schedule_skips_months_already_covered(client, landlord, lease_payload, session):
    lease = await _active_lease(client, landlord, lease_payload, start_date="2025-01-01", end_date="2025-03-01")
    stored = await session.get(Lease, lease["id"])
    created = await PaymentService(session).generate_monthly_schedule(stored)
    assert created == []

    service = PaymentService(session)
    assert await service.check_existing_payment(lease["id"], Decimal("1200.00"), date(2025, 2, 20))
    assert not await service.check_existing_payment(lease["id"], Decimal("999.00"), date(2025, 2, 20))
    assert not await service.check_existing_payment(lease["id"], Decimal("1200.00"), date(2025, 4, 1))


async def test_remove_duplicate_payments_keeps_paid_one(client, landlord, lease_payload):
    lease = await _active_lease(client, landlord, lease_payload, start_date="2025-01-01", end_date="2025-02-01")

    paid = await client.post(
        "/api/v1/payments",
        json={"lease_id": lease["id"], "amount": "1200.00", "due_date": "2025-01-15", "status": "paid"},
        headers=landlord,
    )
    assert paid.status_code == 201
    assert paid.json()["paid_date"] is not None
    await client.post(
        "/api/v1/payments",
        json={"lease_id": lease["id"], "amount": "1200.00", "due_date": "2025-01-20"},
        headers=landlord,
    )

    resp = await client.post(f"/api/v1/payments/lease/{lease['id']}/dedupe", headers=landlord)
    assert resp.status_code == 200
    assert resp.json() == {"removed": 2}

    remaining = (await client.get(f"/api/v1/payments/lease/{lease['id']}", headers=landlord)).json()
    assert [p["id"] for p in remaining] == [paid.json()["id"]]


async def test_mark_overdue(client, landlord, renter, lease_payload, session):
    lease = await _active_lease(client, landlord, lease_payload, start_date="2025-01-01", end_date="2025-03-01")
    count = await PaymentService(session).mark_overdue(date(2025, 1, 15))
    await session.commit()
    assert count == 1

    overdue = await client.get(f"/api/v1/payments/lease/{lease['id']}/overdue", headers=renter)
    assert [p["due_date"] for p in overdue.json()] == ["2025-01-01"]
    listed = await client.get("/api/v1/payments", params={"status": "overdue"}, headers=landlord)
    assert len(listed.json()) == 1


async def test_update_payment(client, landlord, lease_payload):
    lease = await _active_lease(client, landlord, lease_payload, start_date="2025-01-01", end_date="2025-02-01")
    payment = (await client.get(f"/api/v1/payments/lease/{lease['id']}", headers=landlord)).json()[0]
    resp = await client.patch(
        f"/api/v1/payments/{payment['id']}", json={"status": "paid", "payment_method": "cash"}, headers=landlord
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "paid"
    assert resp.json()["payment_method"] == "cash"
    assert resp.json()["paid_date"] is not None


async def test_other_renter_cannot_read_lease_payments(client, landlord, other_renter, lease_payload):
    lease = await _active_lease(client, landlord, lease_payload)
    resp = await client.get(f"/api/v1/payments/lease/{lease['id']}", headers=other_renter)
    assert resp.status_code == 404


async def test_card_payment_through_intent(client, landlord, renter, lease_payload, fake_stripe):
    lease = await _active_lease(client, landlord, lease_payload, start_date="2025-01-01", end_date="2025-02-01")
    payment = (await client.get("/api/v1/payments/mine", headers=renter)).json()[0]
    assert payment["lease_id"] == lease["id"]

    intent = await client.post("/api/v1/payments/intent", json={"payment_id": payment["id"]}, headers=renter)
    assert intent.status_code == 200
    assert intent.json()["client_secret"] == "pi_1_secret"
    params = fake_stripe.created[0]
    assert params["amount"] == 120000
    assert params["payment_method_types"] == ["card"]
    assert params["metadata"]["payment_id"] == str(payment["id"])

    resp = await client.post(
        f"/api/v1/payments/{payment['id']}/pay", json={"payment_intent_id": intent.json()["id"]}, headers=renter
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "paid"
    assert resp.json()["transaction_id"] == "pi_1"

    again = await client.post(
        f"/api/v1/payments/{payment['id']}/pay", json={"payment_intent_id": "pi_1"}, headers=renter
    )
    assert again.status_code == 422


async def test_intent_pays_only_its_own_payment(client, landlord, renter, lease_payload):
    await _active_lease(client, landlord, lease_payload, start_date="2025-03-10", end_date="2025-06-10")
    first, second = (await client.get("/api/v1/payments/mine", headers=renter)).json()[:2]
    intent = (await client.post("/api/v1/payments/intent", json={"payment_id": first["id"]}, headers=renter)).json()

    resp = await client.post(
        f"/api/v1/payments/{second['id']}/pay", json={"payment_intent_id": intent["id"]}, headers=renter
    )
    assert resp.status_code == 422
    assert resp.json()["details"]["rule"] == "payment_intent_mismatch"

    resp = await client.post(
        f"/api/v1/payments/{first['id']}/pay", json={"payment_intent_id": intent["id"]}, headers=renter
    )
    assert resp.status_code == 200

    resp = await client.post(
        f"/api/v1/payments/{second['id']}/pay", json={"payment_intent_id": intent["id"]}, headers=renter
    )
    assert resp.status_code == 422
    assert resp.json()["details"] == {"rule": "payment_intent_reused", "payment_intent_id": intent["id"]}
    statuses = {p["id"]: p["status"] for p in (await client.get("/api/v1/payments/mine", headers=renter)).json()}
    assert statuses[first["id"]] == "paid"
    assert statuses[second["id"]] == "pending"


async def test_pay_rejects_unsuccessful_intent(client, landlord, renter, lease_payload, fake_stripe):
    await _active_lease(client, landlord, lease_payload, start_date="2025-01-01", end_date="2025-02-01")
    payment = (await client.get("/api/v1/payments/mine", headers=renter)).json()[0]
    fake_stripe.intents["pi_pending"] = {"id": "pi_pending", "status": "requires_payment_method", "amount": 120000}
    fake_stripe.intents["pi_short"] = {"id": "pi_short", "status": "succeeded", "amount": 100}

    resp = await client.post(
        f"/api/v1/payments/{payment['id']}/pay", json={"payment_intent_id": "pi_pending"}, headers=renter
    )
    assert resp.json()["details"]["rule"] == "payment_not_succeeded"
    resp = await client.post(
        f"/api/v1/payments/{payment['id']}/pay", json={"payment_intent_id": "pi_short"}, headers=renter
    )
    assert resp.json()["details"]["rule"] == "payment_amount_mismatch"
    assert resp.json()["details"]["payment_intent_id"] == "pi_short"


async def test_intent_requires_positive_amount(client, renter):
    resp = await client.post("/api/v1/payments/intent", json={}, headers=renter)
    assert resp.status_code == 400
    assert resp.json()["details"] == {"field": "amount"}
    resp = await client.post("/api/v1/payments/intent", json={"amount": "0"}, headers=renter)
    assert resp.status_code == 400


async def test_income_summary(client, landlord, lease_payload):
    lease = await _active_lease(client, landlord, lease_payload, start_date="2025-01-01", end_date="2025-03-01")
    payments = (await client.get(f"/api/v1/payments/lease/{lease['id']}", headers=landlord)).json()
    for payment in payments:
        await client.patch(f"/api/v1/payments/{payment['id']}", json={"status": "paid"}, headers=landlord)
    await client.post(
        "/api/v1/payments",
        json={
            "lease_id": lease["id"], "amount": "250.00", "due_date": "2025-01-01",
            "status": "paid", "payment_type": "pet_fee",
        },
        headers=landlord,
    )

    resp = await client.get("/api/v1/payments/income", headers=landlord)
    assert resp.status_code == 200
    summary = resp.json()
    assert summary["total"] == 2650.0
    entry = summary["incomes"][0]
    assert entry["renter_email"] == "renter@example.com"
    assert entry["breakdown"]["monthly_rent"] == 2400.0
    assert entry["breakdown"]["pet_fee"] == 250.0
    assert entry["payments"] == 3
    assert entry["property_address"] == "12 Elm Street, Unit 4B, Springfield, IL"


async def test_pay_rejects_settled_payment(client, landlord, lease_payload, session):
    lease = await _active_lease(client, landlord, lease_payload, start_date="2025-01-01", end_date="2025-02-01")
    payment = await session.scalar(select(RentPayment).where(RentPayment.lease_id == lease["id"]))
    payment.status = "paid"
    await session.flush()
    admin = {"sub": "999", "role": "admin", "email": "admin@example.com"}
    with pytest.raises(BusinessLogicError):
        await PaymentService(session).pay(admin, payment.id, "pi_x")
