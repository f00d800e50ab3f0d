# tests/conftest.py
import os
from datetime import datetime, timezone

# Settings are read once and cached; pin them before anything imports the package
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("SIMULATED_DELAY_MS", "0")
os.environ.setdefault("PAYMENT_DELAY_MS", "0")
os.environ.setdefault("INSURANCE_VERIFICATION_DELAY_MS", "0")

import pytest
from httpx import ASGITransport, AsyncClient

from clinicdesk.audit import AuditLogger
from clinicdesk.config import TestingConfig
from clinicdesk.dependencies import get_app_settings, get_clock, get_store
from clinicdesk.main import app
from clinicdesk.seed import initialize_mock_data
from clinicdesk.services.auth_service import issue_token
from clinicdesk.store import InMemoryStore

FIXED_NOW = datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc)

USERS_BY_ROLE = {
    "admin": "user-1",
    "triage_nurse": "user-2",
    "practitioner": "user-3",
    "billing_staff": "user-4",
    "receptionist": "user-5",
    "patient": "user-6",
    "lab_technician": "user-7",
}


def fixed_clock():
    return FIXED_NOW


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def empty_store():
    return InMemoryStore()


@pytest.fixture
def store():
    store = InMemoryStore()
    initialize_mock_data(store, clock=fixed_clock)
    return store


@pytest.fixture
def audit(store):
    return AuditLogger(store, actor_id="user-1", clock=fixed_clock)


@pytest.fixture
def make_service(store, audit):
    """Build any service over the seeded store with no latency and the fixed clock."""
    def _make(service_cls, **kwargs):
        kwargs.setdefault("audit", audit)
        kwargs.setdefault("clock", fixed_clock)
        return service_cls(store, **kwargs)
    return _make


@pytest.fixture
async def async_client(store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: fixed_clock
    app.dependency_overrides[get_app_settings] = lambda: TestingConfig()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(role: str = "admin"):
        token = issue_token(USERS_BY_ROLE[role], int(FIXED_NOW.timestamp() * 1000))
        return {"Authorization": f"Bearer {token}"}
    return _headers
