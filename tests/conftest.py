import pytest
from fastapi.testclient import TestClient

from invoice_api.config import Settings
from invoice_api.dependencies import get_auth_client, get_database
from invoice_api.main import app
from invoice_api.ratelimit import RateLimiter

from .fakes import FakeAuth, FakeDatabase

USER_ID = "user-1"
OTHER_USER_ID = "user-2"
TOKEN = "valid-token"
OTHER_TOKEN = "other-token"


@pytest.fixture(autouse=True)
def no_auth_delays(monkeypatch):
    monkeypatch.setattr("invoice_api.auth.time.sleep", lambda seconds: None)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def auth():
    return FakeAuth({TOKEN: USER_ID, OTHER_TOKEN: OTHER_USER_ID})


@pytest.fixture
def client(db, auth):
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_auth_client] = lambda: auth
    app.state.rate_limiter = RateLimiter(max_requests=1000)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture
def other_headers():
    return {"Authorization": f"Bearer {OTHER_TOKEN}"}


@pytest.fixture
def invoice_payload():
    return {
        "document_type": "invoice",
        "customer_name": "Rajan Kumar",
        "customer_phone": "9876543210",
        "customer_address": "12 MG Road, Bengaluru",
        "customer_email": "rajan@example.com",
        "services": [
            {"description": "Modular kitchen cabinets", "quantity": 1, "rate": 45000, "amount": 45000},
            {"description": "Wardrobe shutters", "quantity": 2, "rate": 2500.5, "amount": 5001},
        ],
        "subtotal": 50001,
        "tax_enabled": True,
        "tax_percentage": 18,
        "tax_amount": 9000.18,
        "discount_amount": 1.18,
        "total_amount": 59000,
        "invoice_date": "2026-02-12",
        "due_date": "2026-03-12",
        "notes": "50% advance, balance on completion.",
    }
