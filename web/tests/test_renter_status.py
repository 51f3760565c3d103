from sqlalchemy import select

from rentdesk.models import Invitation


async def _create(client, landlord, property_id, **extra):
    return await client.post(
        "/api/v1/renter-status",
        json={"property_id": property_id, "renter_email": "Prospect@Example.com", "renter_name": "Pat", **extra},
        headers=landlord,
    )


async def test_board_crud(client, landlord, property_id):
    resp = await _create(client, landlord, property_id, notes="met at viewing")
    assert resp.status_code == 201, resp.text
    row = resp.json()
    assert row["status"] == "invite"
    assert row["renter_email"] == "prospect@example.com"

    dup = await _create(client, landlord, property_id)
    assert dup.status_code == 409
    assert dup.json()["details"] == {"entity": "Renter status"}

    resp = await client.patch(f"/api/v1/renter-status/{row['id']}", json={"renter_name": "Pat Prospect"}, headers=landlord)
    assert resp.json()["renter_name"] == "Pat Prospect"
    assert resp.json()["notes"] == "met at viewing"

    resp = await client.post(
        f"/api/v1/renter-status/{row['id']}/move", json={"status": "application", "notes": "sent form"}, headers=landlord
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "application"
    assert resp.json()["notes"] == "sent form"

    bad = await client.post(f"/api/v1/renter-status/{row['id']}/move", json={"status": "moved"}, headers=landlord)
    assert bad.status_code == 422

    listed = (await client.get("/api/v1/renter-status", headers=landlord)).json()
    assert [r["id"] for r in listed] == [row["id"]]
    by_property = (await client.get(f"/api/v1/properties/{property_id}/renter-status", headers=landlord)).json()
    assert [r["id"] for r in by_property] == [row["id"]]

    assert (await client.delete(f"/api/v1/renter-status/{row['id']}", headers=landlord)).status_code == 204
    assert (await client.get("/api/v1/renter-status", headers=landlord)).json() == []


async def test_board_is_private(client, landlord, renter, property_id):
    row = (await _create(client, landlord, property_id)).json()
    other = await client.post(
        "/api/v1/auth/signup/landlord",
        json={"email": "second@example.com", "password": "secret123", "name": "Sam Second"},
    )
    headers = {"Authorization": f"Bearer {other.json()['access_token']}"}

    assert (await client.post(f"/api/v1/renter-status/{row['id']}/move", json={"status": "lease"}, headers=headers)).status_code == 404
    assert (await _create(client, headers, property_id)).status_code == 404
    assert (await client.get("/api/v1/renter-status", headers=renter)).status_code == 403


async def test_sync_rebuilds_board(client, landlord, renter, property_id, accepted_invitation, lease_payload, session):
    await client.post(
        "/api/v1/invitations",
        json={"property_id": property_id, "renter_email": "pending@example.com"},
        headers=landlord,
    )
    await client.post("/api/v1/leases", json=lease_payload(), headers=landlord)

    rows = (await client.get("/api/v1/renter-status", headers=landlord)).json()
    for row in rows:
        await client.delete(f"/api/v1/renter-status/{row['id']}", headers=landlord)

    resp = await client.post(f"/api/v1/properties/{property_id}/renter-status/sync", headers=landlord)
    assert resp.status_code == 200
    board = {r["renter_email"]: r for r in resp.json()}
    # only accepted invitations make it onto the board
    assert set(board) == {"renter@example.com"}
    assert board["renter@example.com"]["status"] == "lease"
    assert board["renter@example.com"]["invitation_id"] == accepted_invitation
    assert board["renter@example.com"]["lease_id"] is not None

    pending = await session.scalar(select(Invitation).where(Invitation.renter_email == "pending@example.com"))
    assert pending.status == "pending"


async def test_sync_prefers_newest_lease(client, landlord, renter, property_id, lease_payload):
    rejected = (await client.post("/api/v1/leases", json=lease_payload(), headers=landlord)).json()
    resp = await client.post(f"/api/v1/leases/{rejected['id']}/reject", json={}, headers=renter)
    assert resp.status_code == 200
    offered = (await client.post("/api/v1/leases", json=lease_payload(), headers=landlord)).json()

    resp = await client.post(f"/api/v1/properties/{property_id}/renter-status/sync", headers=landlord)
    assert resp.status_code == 200
    assert [(r["status"], r["lease_id"]) for r in resp.json()] == [("lease", offered["id"])]
