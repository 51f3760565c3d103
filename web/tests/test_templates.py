import pytest

from rentdesk.core import ValidationError
from rentdesk.services import TemplateService
from rentdesk.services.template_service import validate_fields


def _fields():
    return [
        {"id": "f1", "name": "tenant_name", "label": "Tenant name", "type": "text", "required": True, "order": 1},
        {
            "id": "f2", "name": "has_pets", "label": "Pets?", "type": "select",
            "options": ["yes", "no"], "required": True, "order": 2,
        },
        {
            "id": "f3", "name": "pet_count", "label": "Number of pets", "type": "number", "required": True,
            "order": 3, "conditional_logic": {"depends_on": "f2", "condition": "equals", "value": "yes"},
        },
    ]


def _template(**extra):
    return {"name": "Illinois residential", "region": "Illinois", "state": "IL", "fields": _fields(), **extra}


async def test_admin_manages_templates(client, admin, landlord):
    resp = await client.post("/api/v1/templates", json=_template(), headers=admin)
    assert resp.status_code == 201, resp.text
    template = resp.json()
    assert template["version"] == 1
    assert template["created_by"] == 999
    assert template["document_type"] == "lease"
    assert [f["name"] for f in template["fields"]] == ["tenant_name", "has_pets", "pet_count"]
    assert template["fields"][2]["conditional_logic"]["depends_on"] == "f2"

    renamed = await client.put(f"/api/v1/templates/{template['id']}", json={"name": "IL lease"}, headers=admin)
    assert renamed.json()["name"] == "IL lease"
    assert renamed.json()["version"] == 1

    fields = _fields()[:2]
    changed = await client.put(f"/api/v1/templates/{template['id']}", json={"fields": fields}, headers=admin)
    assert changed.json()["version"] == 2
    assert len(changed.json()["fields"]) == 2

    seen = await client.get(f"/api/v1/templates/{template['id']}", headers=landlord)
    assert seen.status_code == 200

    assert (await client.delete(f"/api/v1/templates/{template['id']}", headers=admin)).status_code == 204
    assert (await client.get(f"/api/v1/templates/{template['id']}", headers=landlord)).status_code == 404


async def test_non_admin_cannot_write_templates(client, landlord, renter):
    assert (await client.post("/api/v1/templates", json=_template(), headers=landlord)).status_code == 403
    assert (await client.post("/api/v1/templates", json=_template(), headers=renter)).status_code == 403


async def test_list_filters_are_case_insensitive(client, admin, renter, session):
    await client.post("/api/v1/templates", json=_template(), headers=admin)
    await client.post("/api/v1/templates", json=_template(name="Texas", region="Texas", state="TX"), headers=admin)
    await client.post(
        "/api/v1/templates", json=_template(name="IL addendum", document_type="addendum"), headers=admin
    )

    everything = (await client.get("/api/v1/templates", headers=renter)).json()
    assert [t["name"] for t in everything] == ["IL addendum", "Texas", "Illinois residential"]

    illinois = (await client.get("/api/v1/templates", params={"region": "ILLINOIS"}, headers=renter)).json()
    assert {t["name"] for t in illinois} == {"Illinois residential", "IL addendum"}
    leases = (await client.get("/api/v1/templates", params={"type": "Lease", "region": "illinois"}, headers=renter)).json()
    assert [t["name"] for t in leases] == ["Illinois residential"]

    service = TemplateService(session)
    assert [t.name for t in await service.by_type("ADDENDUM")] == ["IL addendum"]
    assert [t.name for t in await service.by_region("texas")] == ["Texas"]


@pytest.mark.parametrize(
    "mutate",
    [
        lambda f: f[1].pop("options"),
        lambda f: f[2].update(name="tenant_name"),
        lambda f: f[2]["conditional_logic"].update(depends_on="missing"),
        lambda f: f[2]["conditional_logic"].update(depends_on="f3"),
    ],
    ids=["select-without-options", "duplicate-name", "unknown-dependency", "self-dependency"],
)
def test_field_definition_errors(mutate):
    fields = _fields()
    mutate(fields)
    with pytest.raises(ValidationError):
        validate_fields(fields)


async def test_invalid_fields_are_rejected_by_api(client, admin):
    fields = _fields()
    fields[1]["options"] = []
    resp = await client.post("/api/v1/templates", json=_template(fields=fields), headers=admin)
    assert resp.status_code == 400
    assert resp.json()["details"] == {"field": "fields"}

    fields = _fields()
    fields[0]["type"] = "colour"
    resp = await client.post("/api/v1/templates", json=_template(fields=fields), headers=admin)
    assert resp.status_code == 422


async def test_validate_values(client, admin, landlord):
    template = (await client.post("/api/v1/templates", json=_template(), headers=admin)).json()
    url = f"/api/v1/templates/{template['id']}/validate"

    ok = await client.post(url, json={"values": {"tenant_name": "Rita", "has_pets": "no"}}, headers=landlord)
    assert ok.json() == {"valid": True, "errors": []}

    resp = await client.post(url, json={"values": {"has_pets": "yes", "pet_count": "two"}}, headers=landlord)
    body = resp.json()
    assert body["valid"] is False
    assert [e["field"] for e in body["errors"]] == ["tenant_name", "pet_count"]
    assert body["errors"][0]["message"] == "Tenant name is required"

    resp = await client.post(url, json={"values": {"tenant_name": "Rita", "has_pets": "maybe"}}, headers=landlord)
    assert resp.json()["errors"] == [{"field": "has_pets", "message": "Value is not one of the allowed options"}]

    resp = await client.post(url, json={"values": {"tenant_name": "Rita", "has_pets": "yes"}}, headers=landlord)
    assert resp.json()["errors"] == [{"field": "pet_count", "message": "Number of pets is required"}]
