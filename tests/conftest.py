"""Pytest configuration and fixtures for the VIN report service tests.

This module provides reusable fixtures for testing:
- Carsimulcast and Resend HTTP stubs (httpx.MockTransport)
- Stripe webhook signing
- DynamoDB mocking with moto
- A wired FastAPI app with dependency overrides
"""

import base64
import hashlib
import hmac
import json
import os
import time
from collections.abc import Callable
from typing import Any, Generator
from unittest.mock import MagicMock

import boto3
import httpx
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before any vinreport import reads them
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-vinreport")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_abc123xyz")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret_for_testing")
os.environ.setdefault("RESEND_API_KEY", "re_test_key")

from vinreport.api.dependencies import (  # noqa: E402
    get_email_service,
    get_provider_client,
    get_stripe_service,
    get_webhook_handler,
    reset_services,
)
from vinreport.services.artifact_provider import (  # noqa: E402
    ArtifactProvider,
    Base64PdfArtifactProvider,
    CachingArtifactProvider,
)
from vinreport.services.artifact_store import ArtifactStore  # noqa: E402
from vinreport.services.email_service import EmailService  # noqa: E402
from vinreport.services.fulfillment import (  # noqa: E402
    FulfillmentService,
    InMemoryFulfillmentJobStore,
)
from vinreport.services.provider_client import CarsimulcastClient  # noqa: E402
from vinreport.services.stripe_service import StripeService  # noqa: E402
from vinreport.services.webhook_handler import WebhookHandler  # noqa: E402

TEST_WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]
TEST_VIN = "1HGCM82633A004352"
TEST_EMAIL = "buyer@example.com"
TEST_VEHICLE = "2003 Honda Accord"
SUPPORT_EMAIL = "support@example.com"

# Long enough to pass payload validation
SAMPLE_PAYLOAD = base64.b64encode(b"<html>vehicle history report " + b"x" * 200 + b"</html>").decode()
SAMPLE_PDF = b"%PDF-1.4 sample vehicle history report"


# === HTTP stubs ===


class ProviderStub:
    """Carsimulcast stand-in served through httpx.MockTransport.

    Records every request as (method, path) so tests can count provider
    fetches and conversions.
    """

    def __init__(self) -> None:
        self.summary: dict[str, Any] | None = {"year": "2003", "make": "HONDA", "model": "Accord"}
        self.summary_status = 200
        self.payload = SAMPLE_PAYLOAD
        self.pdf = SAMPLE_PDF
        self.pdf_status = 200
        self.calls: list[tuple[str, str]] = []
        self.form_bodies: list[bytes] = []

    def count(self, path_prefix: str) -> int:
        return sum(1 for _, path in self.calls if path.startswith(path_prefix))

    @property
    def fetches(self) -> int:
        return self.count("/getrecord/")

    @property
    def conversions(self) -> int:
        return self.count("/pdf/")

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))

        if path.startswith("/checkrecords/"):
            if self.summary is None:
                return httpx.Response(404, text="No record found")
            return httpx.Response(self.summary_status, json=self.summary)
        if path.startswith("/getrecord/"):
            return httpx.Response(200, text=self.payload)
        if path == "/pdf/":
            self.form_bodies.append(request.content)
            return httpx.Response(
                self.pdf_status, content=self.pdf, headers={"content-type": "application/pdf"}
            )
        return httpx.Response(404)

    def client(self) -> CarsimulcastClient:
        return CarsimulcastClient(
            "https://provider.test",
            "key",
            "secret",
            transport=httpx.MockTransport(self.handler),
        )


class ResendStub:
    """Resend stand-in that keeps every posted email body."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.headers: list[httpx.Headers] = []
        self.status = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.sent.append(json.loads(request.content))
        self.headers.append(request.headers)
        if self.status >= 400:
            return httpx.Response(self.status, json={"message": "rejected"})
        return httpx.Response(200, json={"id": f"email_{len(self.sent)}"})

    def service(self) -> EmailService:
        return EmailService(
            "re_test_key",
            "Reports <reports@example.com>",
            SUPPORT_EMAIL,
            base_url="https://resend.test",
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def resend_stub() -> ResendStub:
    return ResendStub()


# === Stripe helpers ===


def create_stripe_signature(
    payload: bytes,
    secret: str = TEST_WEBHOOK_SECRET,
    timestamp: int | None = None,
) -> str:
    """Create a Stripe webhook signature (valid for the default secret and current time).

    Stripe signatures use HMAC-SHA256 with format: t={timestamp},v1={signature}
    """
    timestamp = str(int(time.time()) if timestamp is None else timestamp)
    signed_payload = f"{timestamp}.{payload.decode('utf-8')}"
    signature = hmac.new(
        secret.encode("utf-8"),
        signed_payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def create_checkout_completed_event(
    event_id: str = "evt_1ABC123DEF456",
    session_id: str = "cs_test_abc123",
    vin: str = TEST_VIN,
    email: str = TEST_EMAIL,
    vehicle: str = TEST_VEHICLE,
    payment_status: str = "paid",
) -> dict[str, Any]:
    """Create a checkout.session.completed webhook event."""
    return {
        "id": event_id,
        "type": "checkout.session.completed",
        "created": int(time.time()),
        "data": {
            "object": {
                "id": session_id,
                "payment_status": payment_status,
                "amount_total": 1499,
                "currency": "usd",
                "metadata": {"vin": vin, "email": email, "vehicle": vehicle},
            },
        },
    }


@pytest.fixture
def sign() -> Callable[..., str]:
    return create_stripe_signature


@pytest.fixture
def checkout_event() -> Callable[..., dict[str, Any]]:
    return create_checkout_completed_event


@pytest.fixture
def mock_stripe_session() -> MagicMock:
    session = MagicMock()
    session.id = "cs_test_abc123"
    session.url = "https://checkout.stripe.com/c/pay/cs_test_abc123"
    session.expires_at = int(time.time()) + 1800
    return session


# === Service wiring ===


class Services:
    """Everything the webhook path needs, built from stubs."""

    def __init__(
        self,
        provider_stub: ProviderStub,
        resend_stub: ResendStub,
        store: ArtifactStore | None = None,
    ) -> None:
        self.provider = provider_stub.client()
        self.email = resend_stub.service()
        self.stripe = StripeService("sk_test_abc123xyz", TEST_WEBHOOK_SECRET)
        self.jobs = InMemoryFulfillmentJobStore()

        artifacts: ArtifactProvider = Base64PdfArtifactProvider(self.provider)
        if store is not None:
            artifacts = CachingArtifactProvider(artifacts, store)
        self.artifacts = artifacts
        self.fulfillment = FulfillmentService(artifacts, self.email, self.jobs)
        self.webhook_handler = WebhookHandler(self.fulfillment)


@pytest.fixture
def make_services(provider_stub: ProviderStub, resend_stub: ResendStub) -> Callable[..., Services]:
    """Build Services over the shared stubs, optionally with a report store."""

    def build(store: ArtifactStore | None = None) -> Services:
        return Services(provider_stub, resend_stub, store)

    return build


@pytest.fixture
def services(make_services: Callable[..., Services]) -> Services:
    return make_services()


@pytest.fixture(autouse=True)
def reset_service_cache() -> Generator[None, None, None]:
    """Drop cached services (and Settings) around every test."""
    reset_services()
    yield
    reset_services()


@pytest.fixture
def app(services: Services) -> Generator[Any, None, None]:
    """FastAPI app whose dependencies resolve to the stubbed services."""
    from vinreport.api.main import app as fastapi_app

    fastapi_app.dependency_overrides[get_provider_client] = lambda: services.provider
    fastapi_app.dependency_overrides[get_email_service] = lambda: services.email
    fastapi_app.dependency_overrides[get_stripe_service] = lambda: services.stripe
    fastapi_app.dependency_overrides[get_webhook_handler] = lambda: services.webhook_handler
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app: Any) -> Any:
    from fastapi.testclient import TestClient

    return TestClient(app)


# === AWS Fixtures ===


@pytest.fixture
def dynamodb_resource() -> Generator[Any, None, None]:
    """Mocked DynamoDB resource with the fulfillment jobs table."""
    with mock_aws():
        resource = boto3.resource("dynamodb", region_name="us-east-1")
        resource.create_table(
            TableName="test-vinreport-fulfillment-jobs",
            KeySchema=[{"AttributeName": "session_id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "session_id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        yield resource


@pytest.fixture
def s3_client() -> Generator[Any, None, None]:
    """Mocked S3 client with a report bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket="test-reports")
        yield client
