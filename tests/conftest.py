import os
import tempfile

# must be set before careconnect.config is imported anywhere
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("EMAIL_PROVIDER", "dummy")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="careconnect-logs-"))

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from careconnect.database import init_db
from careconnect.main import app

MONGODB_TEST_URI = os.environ.get("MONGODB_TEST_URI", "mongodb://localhost:27017")

PASSWORD = "secret123"

VITAL_PROFILE = {
    "name": "Victor Perera",
    "age": 72,
    "gender": "Male",
    "health_needs": "Needs help with daily insulin and mobility",
    "health_tags": ["diabetes"],
    "location": {"city": "Colombo"},
    "contact_preference": "Phone",
}

GUARDIAN_PROFILE = {
    "name": "Grace Silva",
    "age": 35,
    "gender": "Female",
    "experience": 8,
    "specialization": ["Diabetes Care", "Elderly Care"],
    "languages": ["English", "Sinhala"],
    "introduction": "Registered nurse with home-care experience.",
    "availability": {
        "days": ["Monday", "Tuesday", "Wednesday"],
        "hours": {"start": "08:00", "end": "17:00"},
        "shift_type": "Morning",
    },
    "service_radius": 20,
    "location": {"city": "Colombo", "coordinates": {"lat": 6.9271, "lng": 79.8612}},
    "phone_number": "0771234567",
}


@pytest.fixture
async def db():
    """Fresh throwaway database per test, dropped afterwards.

    Tests that touch MongoDB are skipped when no server answers at MONGODB_TEST_URI.
    """
    mongo = AsyncMongoClient(MONGODB_TEST_URI, serverSelectionTimeoutMS=1500)
    try:
        await mongo.admin.command("ping")
    except PyMongoError:
        await mongo.close()
        pytest.skip(f"MongoDB not reachable at {MONGODB_TEST_URI}")

    name = f"careconnect_test_{uuid4().hex[:12]}"
    await init_db(mongo, db_name=name)
    yield mongo[name]
    await mongo.drop_database(name)
    await mongo.close()


@pytest.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def register(client: AsyncClient, email: str, role: str) -> dict:
    """Register an account and return Bearer headers for it."""
    resp = await client.post("/api/auth/register", json={"email": email, "password": PASSWORD, "role": role})
    assert resp.status_code == 201, resp.text
    # the session cookie would otherwise authenticate every later request
    client.cookies.clear()
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


async def create_vital(client: AsyncClient, email: str = "vital@example.com", **overrides) -> tuple[dict, dict]:
    headers = await register(client, email, "VITAL")
    resp = await client.post("/api/vital/profile", json={**VITAL_PROFILE, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return headers, resp.json()


async def create_guardian(client: AsyncClient, email: str = "guardian@example.com", **overrides) -> tuple[dict, dict]:
    headers = await register(client, email, "GUARDIAN")
    resp = await client.post("/api/guardian/profile", json={**GUARDIAN_PROFILE, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return headers, resp.json()


async def book(client: AsyncClient, vital_headers: dict, guardian_id: str) -> dict:
    resp = await client.post("/api/bookings", json={"guardian_id": guardian_id}, headers=vital_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def act(client: AsyncClient, guardian_headers: dict, booking_id: str, action: str):
    return await client.patch(
        f"/api/guardian/bookings/{booking_id}",
        json={"action": action},
        headers=guardian_headers,
    )


@pytest.fixture
async def pair(client):
    """A vital and a guardian with profiles: (vital_headers, vital, guardian_headers, guardian)."""
    vital_headers, vital = await create_vital(client)
    guardian_headers, guardian = await create_guardian(client)
    return vital_headers, vital, guardian_headers, guardian
