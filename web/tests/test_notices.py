from sqlalchemy import select

from rentdesk.models import Notice


def _form(property_id, **extra):
    return {
        "property_id": str(property_id),
        "type": "inspection",
        "subject": "Annual inspection",
        "message": "We will inspect the smoke detectors on Monday at 10am.",
        "renter_email": "renter@example.com",
        **extra,
    }


async def test_landlord_sends_notice_with_attachments(client, landlord, renter, property_id, fake_storage):
    files = [
        ("attachments", ("checklist.pdf", b"%PDF-1.4 checklist", "application/pdf")),
        ("attachments", ("floor plan.png", b"\x89PNG plan", "image/png")),
    ]
    resp = await client.post("/api/v1/notices", data=_form(property_id), files=files, headers=landlord)
    assert resp.status_code == 201, resp.text
    notice = resp.json()
    assert notice["sender_role"] == "landlord"
    assert notice["read_at"] is None
    names = [a["name"] for a in notice["attachments"]]
    assert names == ["checklist.pdf", "floor plan.png"]
    first = notice["attachments"][0]
    assert first["size"] == len(b"%PDF-1.4 checklist")
    assert first["type"] == "application/pdf"
    assert first["key"].startswith("notices/")
    assert first["url"] == f"http://files.test/rentdesk/{first['key']}"
    assert fake_storage.objects[first["key"]] == (b"%PDF-1.4 checklist", "application/pdf")
    assert notice["attachments"][1]["key"].endswith("_floor_plan.png")

    inbox = (await client.get("/api/v1/notices/mine", headers=renter)).json()
    assert [n["id"] for n in inbox] == [notice["id"]]


async def test_notice_without_attachments(client, landlord, property_id):
    resp = await client.post("/api/v1/notices", data=_form(property_id, type="late_rent"), headers=landlord)
    assert resp.status_code == 201
    assert resp.json()["attachments"] == []


async def test_notice_validation(client, landlord, property_id):
    resp = await client.post("/api/v1/notices", data=_form(property_id, type="party"), headers=landlord)
    assert resp.status_code == 400
    assert resp.json()["details"] == {"field": "type"}

    form = _form(property_id)
    del form["renter_email"]
    resp = await client.post("/api/v1/notices", data=form, headers=landlord)
    assert resp.status_code == 400
    assert resp.json()["details"] == {"field": "renter_email"}

    resp = await client.post("/api/v1/notices", data=_form(property_id, subject=""), headers=landlord)
    assert resp.status_code == 422


async def test_landlord_cannot_notice_foreign_property(client, landlord, property_id):
    other = await client.post(
        "/api/v1/auth/signup/landlord",
        json={"email": "second@example.com", "password": "secret123", "name": "Sam Second"},
    )
    headers = {"Authorization": f"Bearer {other.json()['access_token']}"}
    resp = await client.post("/api/v1/notices", data=_form(property_id), headers=headers)
    assert resp.status_code == 404


async def test_renter_needs_active_lease_to_write(client, landlord, renter, property_id, lease_payload):
    form = _form(property_id, type="maintenance", subject="Leaking tap")
    resp = await client.post("/api/v1/notices", data=form, headers=renter)
    assert resp.status_code == 404

    await client.post("/api/v1/leases", json=lease_payload(status="active"), headers=landlord)
    resp = await client.post("/api/v1/notices", data=form, headers=renter)
    assert resp.status_code == 201
    assert resp.json()["sender_role"] == "renter"
    assert resp.json()["renter_email"] == "renter@example.com"

    landlord_inbox = (await client.get("/api/v1/notices", headers=landlord)).json()
    assert "Leaking tap" in [n["subject"] for n in landlord_inbox]
    props = (await client.get(f"/api/v1/properties/{property_id}/notices", headers=landlord)).json()
    assert "Leaking tap" in [n["subject"] for n in props]


async def test_unread_count_and_mark_read(client, landlord, renter, other_renter, property_id):
    for subject in ("First", "Second"):
        await client.post("/api/v1/notices", data=_form(property_id, subject=subject), headers=landlord)

    count = await client.get("/api/v1/notices/unread-count", headers=renter)
    assert count.json() == {"count": 2}

    notice_id = (await client.get("/api/v1/notices/mine", headers=renter)).json()[0]["id"]
    resp = await client.post(f"/api/v1/notices/{notice_id}/read", headers=renter)
    assert resp.status_code == 200
    assert resp.json()["read_at"] is not None
    assert (await client.get("/api/v1/notices/unread-count", headers=renter)).json() == {"count": 1}

    assert (await client.get(f"/api/v1/notices/{notice_id}", headers=other_renter)).status_code == 404
    assert (await client.post(f"/api/v1/notices/{notice_id}/read", headers=other_renter)).status_code == 404


async def test_delete_notice_removes_attachments(client, landlord, renter, property_id, fake_storage, session):
    files = [("attachments", ("photo.jpg", b"jpeg-bytes", "image/jpeg"))]
    notice = (await client.post("/api/v1/notices", data=_form(property_id), files=files, headers=landlord)).json()
    assert len(fake_storage.objects) == 1

    assert (await client.delete(f"/api/v1/notices/{notice['id']}", headers=renter)).status_code == 403
    resp = await client.delete(f"/api/v1/notices/{notice['id']}", headers=landlord)
    assert resp.status_code == 204
    assert fake_storage.objects == {}
    assert await session.get(Notice, notice["id"]) is None
    assert (await session.scalars(select(Notice))).all() == []
