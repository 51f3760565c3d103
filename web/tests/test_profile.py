import pytest

from rentdesk.core import ValidationError
from rentdesk.core.unit_of_work import UnitOfWork
from rentdesk.services import ProfileService


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("+1 650-253-0000", "+16502530000"),
        ("+44 20 7031 3000", "+442070313000"),
        ("", None),
        (None, None),
    ],
)
def test_phone_numbers_are_stored_as_e164(raw, expected):
    assert ProfileService(None).validate_phone_number(raw) == expected


@pytest.mark.parametrize("raw", ["650-253-0000", "+1 123", "not a number"])
def test_invalid_phone_numbers(raw):
    with pytest.raises(ValidationError) as exc:
        ProfileService(None).validate_phone_number(raw)
    assert exc.value.details == {"field": "phone"}


async def test_landlord_profile_update(client, landlord):
    resp = await client.put(
        "/api/v1/profile/landlord",
        json={
            "phone": "+1 (650) 253-0000",
            "business_name": "Lord Lettings",
            "bank_details": {"account_number": "000123", "routing_number": "110000000", "bank_name": "First"},
        },
        headers=landlord,
    )
    assert resp.status_code == 200, resp.text
    profile = resp.json()
    assert profile["phone"] == "+16502530000"
    assert profile["full_name"] == "Lana Lord"
    assert profile["bank_details"]["bank_name"] == "First"

    again = await client.put("/api/v1/profile/landlord", json={"mailing_address": "PO Box 1"}, headers=landlord)
    assert again.json()["business_name"] == "Lord Lettings"
    assert again.json()["mailing_address"] == "PO Box 1"


async def test_bad_phone_is_rejected(client, renter):
    resp = await client.put("/api/v1/profile/renter", json={"phone": "12345"}, headers=renter)
    assert resp.status_code == 400
    assert resp.json()["details"] == {"field": "phone"}


async def test_renter_profile_update(client, renter, session):
    resp = await client.put(
        "/api/v1/profile/renter",
        json={
            "date_of_birth": "1990-04-01",
            "employment": {"company": "Acme", "monthly_income": "5400.50", "employment_type": "full_time"},
            "references": [{"name": "Ref One", "email": "ref@example.com"}],
            "emergency_contact": {"name": "Mom", "phone": "+1 650 253 0000"},
        },
        headers=renter,
    )
    assert resp.status_code == 200, resp.text
    profile = resp.json()
    assert profile["full_name"] == "Rita Renter"
    assert profile["date_of_birth"] == "1990-04-01"
    assert profile["employment"]["monthly_income"] == 5400.5
    assert profile["references"][0]["name"] == "Ref One"

    stored = await ProfileService(UnitOfWork(session)).get_renter_profile(profile["user_id"])
    assert stored.employment["company"] == "Acme"


async def test_profiles_are_role_bound(client, landlord, renter):
    assert (await client.get("/api/v1/profile/renter", headers=landlord)).status_code == 403
    assert (await client.get("/api/v1/profile/landlord", headers=renter)).status_code == 403
