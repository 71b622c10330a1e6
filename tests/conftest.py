"""Pytest configuration and fixtures for parking payment tests."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from parking_pay.config import AppConfig
from parking_pay.errors import BackingStoreError
from parking_pay.main import create_app
from parking_pay.payments import PlaceholderPaymentProcessor
from parking_pay.services import (
    PaymentOrchestrator,
    RateCatalog,
    RegistrationLedger,
    StaffExemptionList,
    StatusResolver,
)
from parking_pay.storage import InMemoryRowStore

T0 = datetime(2025, 6, 2, 9, 0, tzinfo=timezone.utc)

ADMIN_PASSWORD = "s3cret"


class FakeClock:
    """Controllable replacement for utcnow."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class UnreachableStore(InMemoryRowStore):
    """Row store whose every call fails as if the network were down."""

    async def all(self, table, match=None):
        raise BackingStoreError("connection refused")

    async def get(self, table, row_id):
        raise BackingStoreError("connection refused")

    async def create(self, table, fields):
        raise BackingStoreError("connection refused")

    async def update(self, table, row_id, fields):
        raise BackingStoreError("connection refused")


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def store():
    return InMemoryRowStore()


@pytest.fixture
def rates(store, clock):
    return RateCatalog(store, clock=clock)


@pytest.fixture
def ledger(store, rates, clock):
    return RegistrationLedger(store, rates, clock=clock)


@pytest.fixture
def exemptions(store, clock):
    return StaffExemptionList(store, clock=clock)


@pytest.fixture
def resolver(exemptions, ledger, clock):
    return StatusResolver(exemptions, ledger, clock=clock)


@pytest.fixture
def orchestrator(ledger):
    return PaymentOrchestrator(ledger, PlaceholderPaymentProcessor())


@pytest.fixture
def config():
    """Development config that ignores credentials in the environment."""
    return AppConfig(
        environment="development",
        airtable={"api_key": "", "base_id": ""},
        stripe={"secret_key": ""},
        admin={"username": "admin", "password": ADMIN_PASSWORD, "secret_key": "test-secret"},
    )


@pytest.fixture
def client(config, store, clock):
    """Test client over an in-memory store and placeholder payments."""
    app = create_app(
        config=config,
        store=store,
        payment_processor=PlaceholderPaymentProcessor(),
        clock=clock,
    )
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/admin/login", json={"username": "admin", "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
