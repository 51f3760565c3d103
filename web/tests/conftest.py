import os
import tempfile

# Settings are read at import time: configure the environment first
_DB_PATH = os.path.join(tempfile.mkdtemp(prefix="rentdesk-"), "test.db")
os.environ["DB_DSN"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["COOKIE_SECURE"] = "false"
os.environ["S3_ENDPOINT"] = "localhost:9000"
os.environ["PUBLIC_S3_ENDPOINT"] = ""
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
os.environ["ADMIN_EMAIL"] = ""

import pytest  # noqa: E402
import stripe  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from rentdesk import storage  # noqa: E402
from rentdesk.infrastructure.database import engine, AsyncSessionFactory  # noqa: E402
from rentdesk.main import app  # noqa: E402
from rentdesk.models import Base  # noqa: E402
from rentdesk.security import mint_tokens  # noqa: E402


class FakeMinio:
    """In-memory stand-in for the minio client"""

    def __init__(self):
        self.objects = {}

    def put_object(self, bucket_name, object_name, data, length, part_size=0, content_type=None):
        self.objects[object_name] = (data.read(), content_type)

    def remove_object(self, bucket_name, object_name):
        self.objects.pop(object_name, None)

    def presigned_get_object(self, bucket_name, object_name, expires=None):
        return f"http://files.test/{bucket_name}/{object_name}"

    def bucket_exists(self, bucket_name):
        return True


class FakeStripe:
    """Records PaymentIntent calls; intents succeed unless told otherwise"""

    def __init__(self):
        self.created = []
        self.intents = {}

    def create(self, **params):
        intent_id = f"pi_{len(self.created) + 1}"
        self.created.append(params)
        self.intents[intent_id] = {
            "id": intent_id,
            "status": "succeeded",
            "amount": params["amount"],
            "metadata": dict(params.get("metadata") or {}),
        }
        return {"id": intent_id, "client_secret": f"{intent_id}_secret"}

    def retrieve(self, intent_id):
        return self.intents[intent_id]


@pytest.fixture(autouse=True)
async def db():
    await engine.dispose()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture(autouse=True)
def fake_storage(monkeypatch):
    fake = FakeMinio()
    monkeypatch.setattr(storage, "client", fake)
    return fake


@pytest.fixture(autouse=True)
def fake_stripe(monkeypatch):
    fake = FakeStripe()
    monkeypatch.setattr(stripe.PaymentIntent, "create", fake.create)
    monkeypatch.setattr(stripe.PaymentIntent, "retrieve", fake.retrieve)
    return fake


@pytest.fixture
async def session():
    async with AsyncSessionFactory() as sess:
        yield sess


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def _signup(client, role, email, name):
    resp = await client.post(
        f"/api/v1/auth/signup/{role}",
        json={"email": email, "password": "secret123", "name": name},
    )
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
async def landlord(client):
    return await _signup(client, "landlord", "lord@example.com", "Lana Lord")


@pytest.fixture
async def renter(client):
    return await _signup(client, "renter", "renter@example.com", "Rita Renter")


@pytest.fixture
async def other_renter(client):
    return await _signup(client, "renter", "other@example.com", "Otto Other")


@pytest.fixture
def admin():
    access, _ = mint_tokens(sub=999, role="admin", email="admin@example.com")
    return {"Authorization": f"Bearer {access}"}


PROPERTY_DATA = {
    "street": "12 Elm Street",
    "unit": "4B",
    "city": "Springfield",
    "state": "IL",
    "postal_code": "62701",
    "type": "apartment",
    "bedrooms": 2,
    "bathrooms": "1.5",
    "monthly_rent": "1200.00",
    "security_deposit": "1200.00",
    "application_fee": "50.00",
    "pet_policy": {"allowed": True, "max_pets": 1, "fee": "250.00"},
}


@pytest.fixture
async def property_id(client, landlord):
    resp = await client.post("/api/v1/properties", json=PROPERTY_DATA, headers=landlord)
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


@pytest.fixture
async def accepted_invitation(client, landlord, renter, property_id):
    resp = await client.post(
        "/api/v1/invitations",
        json={"property_id": property_id, "renter_email": "renter@example.com"},
        headers=landlord,
    )
    assert resp.status_code == 201, resp.text
    invitation_id = resp.json()["id"]
    resp = await client.post(f"/api/v1/invitations/{invitation_id}/respond", json={"accept": True}, headers=renter)
    assert resp.status_code == 200, resp.text
    return invitation_id


@pytest.fixture
def property_data():
    return dict(PROPERTY_DATA)


@pytest.fixture
def lease_payload(property_id):
    """Builds a lease request body for the test property"""

    def build(**overrides):
        data = {
            "property_id": property_id,
            "renter_email": "renter@example.com",
            "start_date": "2025-01-31",
            "end_date": "2025-07-31",
            "monthly_rent": "1200.00",
            "security_deposit": "1200.00",
            "status": "pending_signature",
        }
        data.update(overrides)
        return data

    return build
