"""
Pytest configuration and fixtures for the payment collection orchestrator.
"""
import os

# Required settings must exist before the application is imported.
os.environ.setdefault("TINK_CLIENT_ID", "test-client-id-0123456789abcdef")
os.environ.setdefault("TINK_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("SMTP_USERNAME", "mailer@example.com")
os.environ.setdefault("SMTP_PASSWORD", "smtp-password")
os.environ.setdefault("MAIL_FROM_NAME", "Payments")
os.environ.setdefault("MAIL_FROM_ADDRESS", "payments@example.com")

from datetime import datetime, timezone
from decimal import Decimal
from typing import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from paylink.core.dependencies import get_orchestrator, get_session_store
from paylink.main import app
from paylink.models.schemas import (
    AccessCredential,
    CollectionRequest,
    GrantType,
    PaymentDetail,
    VerificationReport,
)
from paylink.services.notification_service import EmailNotificationService
from paylink.services.orchestrator import CollectionOrchestrator
from paylink.services.payment_api import PaymentApiClient
from paylink.services.session_store import InMemorySessionStore
from paylink.utils.links import LinkBuilder


class FakeClock:
    """Settable clock for session expiry tests."""

    def __init__(self, now: datetime = None):
        self.now = now or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_store(clock) -> InMemorySessionStore:
    """Session store with a one hour TTL and a controllable clock."""
    return InMemorySessionStore(ttl_seconds=3600, clock=clock)


@pytest.fixture
def client_credential() -> AccessCredential:
    return AccessCredential(
        access_token="client-token", grant_type=GrantType.CLIENT_CREDENTIALS
    )


@pytest.fixture
def user_credential() -> AccessCredential:
    return AccessCredential(
        access_token="user-token", grant_type=GrantType.AUTHORIZATION_CODE
    )


@pytest.fixture
def sample_report() -> VerificationReport:
    """Verification report with one Spanish account."""
    return VerificationReport.model_validate(
        {
            "id": "report-123",
            "userDataByProvider": [
                {
                    "accounts": [
                        {
                            "iban": "ES9121000418450200051332",
                            "holderName": "Ana García",
                            "name": "Cuenta Nómina",
                        }
                    ]
                }
            ],
        }
    )


@pytest.fixture
def api_client(client_credential, user_credential, sample_report) -> AsyncMock:
    """Payment API client whose calls all succeed."""
    mock = AsyncMock(spec=PaymentApiClient)
    mock.fetch_client_token.return_value = client_credential
    mock.fetch_user_token.return_value = user_credential
    mock.fetch_verification_report.return_value = sample_report
    mock.create_payment_request.return_value = "pr-456"
    mock.fetch_payment_detail.return_value = PaymentDetail.model_validate(
        {
            "id": "pr-456",
            "status": "COMPLETED",
            "amount": 25.5,
            "currency": "EUR",
            "recipient": {"accountNumber": "ES9121000418450200051332", "accountType": "iban"},
            "recipientName": "Ana García",
        }
    )
    return mock


@pytest.fixture
def notifier() -> AsyncMock:
    """Email service that accepts every message."""
    return AsyncMock(spec=EmailNotificationService)


@pytest.fixture
def link_builder() -> LinkBuilder:
    return LinkBuilder(
        client_id="test-client-id",
        link_host="link.tink.com",
        locale="es_ES",
        default_market="ES",
        callback_url="http://localhost:3000/callback",
        input_provider="es-demobank-open-banking-embedded",
    )


@pytest.fixture
def orchestrator(session_store, api_client, notifier, link_builder) -> CollectionOrchestrator:
    return CollectionOrchestrator(
        session_store=session_store,
        api_client=api_client,
        notifier=notifier,
        links=link_builder,
    )


@pytest.fixture
def collection_request() -> CollectionRequest:
    return CollectionRequest(
        verification_email="payer@example.com",
        payment_email="payer.pay@example.com",
        amount=Decimal("25.50"),
        currency="EUR",
    )


@pytest.fixture
def client(orchestrator, session_store) -> Generator[TestClient, None, None]:
    """
    Create a test client for the FastAPI application.

    The orchestrator and session store are replaced by the fixtures above,
    so no request leaves the process.
    """
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_session_store] = lambda: session_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_headers() -> dict:
    """Sample request headers with correlation ID."""
    return {"X-Correlation-ID": "test-correlation-123"}


@pytest.fixture
def sample_form() -> dict:
    """Valid submission as posted by the entry page."""
    return {
        "emailVerification": "payer@example.com",
        "emailPayment": "payer.pay@example.com",
        "amount": "25.50",
        "currency": "eur",
    }
