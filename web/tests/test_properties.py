from io import BytesIO


async def test_create_and_list_properties(client, landlord, property_data):
    resp = await client.post("/api/v1/properties", json=property_data, headers=landlord)
    assert resp.status_code == 201
    prop = resp.json()
    assert prop["monthly_rent"] == 1200.0
    assert prop["bathrooms"] == 1.5
    assert float(prop["pet_policy"]["fee"]) == 250
    assert prop["images"] == []

    listed = await client.get("/api/v1/properties", headers=landlord)
    assert [p["id"] for p in listed.json()] == [prop["id"]]


async def test_invalid_property_type_is_rejected(client, landlord, property_data):
    property_data["type"] = "castle"
    resp = await client.post("/api/v1/properties", json=property_data, headers=landlord)
    assert resp.status_code == 422
    assert resp.json()["error"] == "Validation error"


async def test_partial_update(client, landlord, property_id):
    resp = await client.patch(
        f"/api/v1/properties/{property_id}", json={"monthly_rent": "1350", "status": "maintenance"}, headers=landlord
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["monthly_rent"] == 1350.0
    assert body["status"] == "maintenance"
    assert body["street"] == "12 Elm Street"


async def test_other_landlord_cannot_see_property(client, property_id):
    signup = await client.post(
        "/api/v1/auth/signup/landlord",
        json={"email": "rival@example.com", "password": "secret123", "name": "Rival"},
    )
    headers = {"Authorization": f"Bearer {signup.json()['access_token']}"}
    resp = await client.get(f"/api/v1/properties/{property_id}", headers=headers)
    assert resp.status_code == 404


async def test_image_upload_and_delete(client, landlord, property_id, fake_storage):
    files = [
        ("files", ("front.jpg", BytesIO(b"jpeg-bytes"), "image/jpeg")),
        ("files", ("back.png", BytesIO(b"png-bytes"), "image/png")),
    ]
    resp = await client.post(f"/api/v1/properties/{property_id}/images", files=files, headers=landlord)
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["images"]) == 2
    assert all(key.startswith(f"properties/{property_id}/") for key in body["images"])
    assert body["image_urls"][0].startswith("http://files.test/")
    assert set(fake_storage.objects) == set(body["images"])

    key = body["images"][0]
    resp = await client.delete(f"/api/v1/properties/{property_id}/images", params={"key": key}, headers=landlord)
    assert resp.status_code == 200
    assert key not in resp.json()["images"]
    assert key not in fake_storage.objects


async def test_non_image_upload_is_rejected(client, landlord, property_id, fake_storage):
    files = [("files", ("notes.txt", BytesIO(b"hello"), "text/plain"))]
    resp = await client.post(f"/api/v1/properties/{property_id}/images", files=files, headers=landlord)
    assert resp.status_code == 400
    assert resp.json()["details"]["field"] == "files"
    assert fake_storage.objects == {}


async def test_delete_property(client, landlord, property_id):
    resp = await client.delete(f"/api/v1/properties/{property_id}", headers=landlord)
    assert resp.status_code == 204
    resp = await client.get(f"/api/v1/properties/{property_id}", headers=landlord)
    assert resp.status_code == 404


async def test_property_with_active_lease_cannot_be_deleted(client, landlord, property_id, lease_payload):
    resp = await client.post("/api/v1/leases", json=lease_payload(status="active"), headers=landlord)
    assert resp.status_code == 201
    resp = await client.delete(f"/api/v1/properties/{property_id}", headers=landlord)
    assert resp.status_code == 409


async def test_public_view_requires_a_relationship(client, renter, other_renter, property_id, accepted_invitation):
    resp = await client.get(f"/api/v1/properties/{property_id}/public", headers=renter)
    assert resp.status_code == 200
    assert resp.json()["city"] == "Springfield"

    resp = await client.get(f"/api/v1/properties/{property_id}/public", headers=other_renter)
    assert resp.status_code == 404
