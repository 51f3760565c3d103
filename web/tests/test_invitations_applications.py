from datetime import timedelta

from sqlalchemy import select

from rentdesk.models import Invitation, Notification, RenterStatus


async def test_invitation_flow_and_notifications(client, landlord, renter, property_id, session):
    resp = await client.post(
        "/api/v1/invitations",
        json={"property_id": property_id, "renter_email": "Renter@Example.com", "message": "Welcome"},
        headers=landlord,
    )
    assert resp.status_code == 201
    invitation = resp.json()
    assert invitation["renter_email"] == "renter@example.com"
    assert invitation["status"] == "pending"

    mine = await client.get("/api/v1/invitations/mine", headers=renter)
    assert [i["id"] for i in mine.json()] == [invitation["id"]]

    resp = await client.post(f"/api/v1/invitations/{invitation['id']}/respond", json={"accept": True}, headers=renter)
    assert resp.status_code == 200
    assert resp.json()["status"] == "accepted"
    assert resp.json()["responded_at"] is not None

    types = (await session.scalars(select(Notification.type).order_by(Notification.id))).all()
    assert types == ["invitation_sent", "invitation_accepted"]
    row = await session.scalar(select(RenterStatus))
    assert row.status == "invite"
    assert row.invitation_id == invitation["id"]


async def test_duplicate_pending_invitation_conflicts(client, landlord, property_id):
    body = {"property_id": property_id, "renter_email": "renter@example.com"}
    assert (await client.post("/api/v1/invitations", json=body, headers=landlord)).status_code == 201
    resp = await client.post("/api/v1/invitations", json=body, headers=landlord)
    assert resp.status_code == 409


async def test_invitation_for_foreign_property(client, renter, property_id):
    signup = await client.post(
        "/api/v1/auth/signup/landlord",
        json={"email": "rival@example.com", "password": "secret123", "name": "Rival"},
    )
    headers = {"Authorization": f"Bearer {signup.json()['access_token']}"}
    resp = await client.post(
        "/api/v1/invitations", json={"property_id": property_id, "renter_email": "renter@example.com"}, headers=headers
    )
    assert resp.status_code == 404


async def test_other_renter_cannot_respond(client, landlord, other_renter, property_id):
    resp = await client.post(
        "/api/v1/invitations", json={"property_id": property_id, "renter_email": "renter@example.com"}, headers=landlord
    )
    resp = await client.post(f"/api/v1/invitations/{resp.json()['id']}/respond", json={"accept": True}, headers=other_renter)
    assert resp.status_code == 404


async def test_expired_invitation_is_marked_expired(client, landlord, renter, property_id, session):
    resp = await client.post(
        "/api/v1/invitations", json={"property_id": property_id, "renter_email": "renter@example.com"}, headers=landlord
    )
    invitation_id = resp.json()["id"]
    invitation = await session.get(Invitation, invitation_id)
    invitation.expires_at = invitation.invited_at - timedelta(days=1)
    await session.commit()

    resp = await client.post(f"/api/v1/invitations/{invitation_id}/respond", json={"accept": True}, headers=renter)
    assert resp.status_code == 422
    assert resp.json()["details"]["rule"] == "invitation_expired"

    mine = await client.get("/api/v1/invitations/mine", params={"status": "expired"}, headers=renter)
    assert [i["id"] for i in mine.json()] == [invitation_id]


async def test_application_requires_accepted_invitation(client, landlord, renter, property_id):
    resp = await client.post(
        "/api/v1/invitations", json={"property_id": property_id, "renter_email": "renter@example.com"}, headers=landlord
    )
    resp = await client.post(
        "/api/v1/applications", json={"invitation_id": resp.json()["id"], "full_name": "Rita"}, headers=renter
    )
    assert resp.status_code == 422
    assert resp.json()["details"]["rule"] == "invitation_not_accepted"


async def test_submit_and_review_application(client, landlord, renter, property_id, accepted_invitation, session):
    resp = await client.post(
        "/api/v1/applications",
        json={
            "invitation_id": accepted_invitation,
            "full_name": "Rita Renter",
            "phone": "+12125551234",
            "employment_company": "Acme",
            "employment_monthly_income": "5400.50",
            "application_data": {"pets": 1},
            "signature": {"signature_data": "data:image/png;base64,AAAA"},
        },
        headers={**renter, "X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    assert resp.status_code == 201, resp.text
    application = resp.json()
    assert application["status"] == "submitted"
    assert application["property_id"] == property_id
    assert application["employment_monthly_income"] == 5400.5
    assert application["signature"]["ip_address"] == "203.0.113.7"
    assert application["signature"]["signed_by"] == "Rita Renter"

    dup = await client.post(
        "/api/v1/applications", json={"invitation_id": accepted_invitation, "full_name": "Again"}, headers=renter
    )
    assert dup.status_code == 409

    listed = await client.get("/api/v1/applications", params={"status": "submitted"}, headers=landlord)
    assert [a["id"] for a in listed.json()] == [application["id"]]

    resp = await client.post(
        f"/api/v1/applications/{application['id']}/review", json={"status": "approved"}, headers=landlord
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"
    assert resp.json()["reviewed_at"] is not None

    again = await client.post(
        f"/api/v1/applications/{application['id']}/review", json={"status": "rejected"}, headers=landlord
    )
    assert again.status_code == 422

    row = await session.scalar(select(RenterStatus))
    assert row.status == "accepted"
    assert row.application_id == application["id"]
    types = (await session.scalars(select(Notification.type))).all()
    assert "application_submitted" in types
    assert "application_approved" in types


async def test_draft_application_has_no_side_effects(client, renter, accepted_invitation, session):
    resp = await client.post(
        "/api/v1/applications", json={"invitation_id": accepted_invitation, "draft": True}, headers=renter
    )
    assert resp.status_code == 201
    assert resp.json()["status"] == "draft"
    assert resp.json()["submitted_at"] is None
    types = (await session.scalars(select(Notification.type))).all()
    assert "application_submitted" not in types


async def test_renter_sees_only_own_applications(client, renter, other_renter, accepted_invitation):
    resp = await client.post(
        "/api/v1/applications", json={"invitation_id": accepted_invitation, "full_name": "Rita"}, headers=renter
    )
    application_id = resp.json()["id"]
    assert (await client.get(f"/api/v1/applications/{application_id}", headers=renter)).status_code == 200
    assert (await client.get(f"/api/v1/applications/{application_id}", headers=other_renter)).status_code == 404
    assert (await client.get("/api/v1/applications/mine", headers=other_renter)).json() == []
