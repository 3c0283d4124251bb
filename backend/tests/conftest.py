"""
Pytest configuration and fixtures for the backend tests.
"""
import os
import tempfile

# Settings are validated at import time, so the environment must be ready first
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_PASSWORD", "admin-test-password")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("USE_MONGO", "false")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="aztech-logs-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta
from typing import Any, Dict, List, Tuple

import pytest
from faker import Faker
from fastapi.testclient import TestClient

from main import app
from api.dependencies import get_repository, get_otp_service, get_payment_service, get_admin_service, get_lead_service
from db.repository import InMemoryRepository
from services.admin_service import AdminService
from services.lead_service import LeadService
from services.otp_service import OtpService
from services.payment_service import PaymentOrderService

fake = Faker()

TEST_KEY_ID = "rzp_test_key"
TEST_KEY_SECRET = "rzp_test_secret"


class FrozenClock:
    """Deterministic stand-in for datetime.utcnow."""

    def __init__(self, start: datetime = None):
        self.now = start or datetime(2026, 1, 15, 9, 30, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingMailer:
    """Captures OTP emails instead of talking to SMTP."""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []
        self.fail = False

    def __call__(self, to_email: str, otp_code: str, purpose: str, expiry_minutes: int = 10) -> bool:
        self.sent.append({"email": to_email, "code": otp_code, "purpose": purpose, "expiry_minutes": expiry_minutes})
        return not self.fail

    @property
    def last_code(self) -> str:
        return self.sent[-1]["code"]


class FakeGateway:
    """Records order payloads and replays a canned (status, body) response."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.status = 200
        self.body: Any = None
        self.error: Exception = None

    async def create_order(self, payload: Dict[str, Any]) -> Tuple[int, Any]:
        self.calls.append(payload)
        if self.error is not None:
            raise self.error
        body = self.body
        if body is None:
            body = {
                "id": f"order_{len(self.calls):04d}",
                "entity": "order",
                "amount": payload["amount"],
                "currency": payload["currency"],
                "receipt": payload["receipt"],
                "status": "created",
            }
        return self.status, body


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def otp_service(repository, mailer, clock) -> OtpService:
    return OtpService(repository, mailer=mailer, clock=clock, expiry_minutes=10)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def payment_service(gateway) -> PaymentOrderService:
    return PaymentOrderService(TEST_KEY_ID, TEST_KEY_SECRET, gateway=gateway, clock_ms=lambda: 1767225600000)


@pytest.fixture
def admin_service(repository, clock) -> AdminService:
    return AdminService(repository, clock=clock)


@pytest.fixture
def client(repository, otp_service, payment_service, admin_service, clock) -> TestClient:
    """Test client wired to the in-memory repository and fake collaborators."""
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_otp_service] = lambda: otp_service
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    app.dependency_overrides[get_admin_service] = lambda: admin_service
    app.dependency_overrides[get_lead_service] = lambda: LeadService(repository, clock=clock)

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client) -> Dict[str, str]:
    response = client.post("/admin/login", json={"password": os.environ["ADMIN_PASSWORD"]})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def user_email() -> str:
    return fake.email()
