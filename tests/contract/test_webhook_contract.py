"""Contract tests for POST /webhook.

Test categories:
- Signature validation (400, no side effects)
- checkout.session.completed fulfillment (200)
- Duplicate deliveries (200 - duplicate)
- Unhandled event types (200 - skipped)
- Fulfillment failures still acknowledged (200 - error)
"""

import json
from typing import Any

import pytest
from starlette.status import HTTP_200_OK, HTTP_400_BAD_REQUEST

from vinreport.api.dependencies import get_webhook_handler

VIN = "1HGCM82633A004352"


def _post(client, event: dict[str, Any], signature: str | None) -> Any:
    payload = json.dumps(event).encode()
    headers = {"Content-Type": "application/json"}
    if signature is not None:
        headers["Stripe-Signature"] = signature
    return client.post("/webhook", content=payload, headers=headers)


def _post_signed(client, sign, event: dict[str, Any]) -> Any:
    payload = json.dumps(event).encode()
    return client.post(
        "/webhook",
        content=payload,
        headers={"Content-Type": "application/json", "Stripe-Signature": sign(payload)},
    )


class TestSignatureValidation:
    def test_missing_header_is_400(self, client, checkout_event, provider_stub, resend_stub):
        response = _post(client, checkout_event(), None)

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "ERR_STRIPE_001"
        assert provider_stub.calls == []
        assert resend_stub.sent == []

    def test_invalid_signature_is_400_with_no_side_effects(
        self, client, checkout_event, provider_stub, resend_stub, services
    ):
        response = _post(client, checkout_event(), "t=1700000000,v1=deadbeef")

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.json()["success"] is False
        assert provider_stub.calls == []
        assert resend_stub.sent == []
        assert services.jobs.get("cs_test_abc123") is None

    def test_signature_over_different_body_is_400(self, client, sign, checkout_event, provider_stub):
        original = json.dumps(checkout_event()).encode()
        forged = checkout_event(email="thief@example.com")

        response = _post(client, forged, sign(original))

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert provider_stub.calls == []


class TestCheckoutCompleted:
    def test_valid_event_fetches_once_and_emails_buyer(
        self, client, sign, checkout_event, provider_stub, resend_stub
    ):
        response = _post_signed(client, sign, checkout_event(vin=VIN, email="buyer@example.com"))

        assert response.status_code == HTTP_200_OK
        body = response.json()
        assert body["received"] is True
        assert body["processing_result"] == "success"
        assert body["event_type"] == "checkout.session.completed"

        assert provider_stub.fetches == 1
        assert provider_stub.conversions <= 1
        assert len(resend_stub.sent) == 1
        assert resend_stub.sent[0]["to"] == ["buyer@example.com"]
        assert resend_stub.sent[0]["attachments"][0]["filename"] == f"{VIN}.pdf"

    def test_redelivery_is_duplicate(self, client, sign, checkout_event, provider_stub, resend_stub):
        _post_signed(client, sign, checkout_event())
        calls_before = len(provider_stub.calls)

        response = _post_signed(client, sign, checkout_event())

        assert response.status_code == HTTP_200_OK
        assert response.json()["processing_result"] == "duplicate"
        assert len(provider_stub.calls) == calls_before
        assert len(resend_stub.sent) == 1

    def test_malformed_vin_in_metadata_is_not_fulfilled(
        self, client, sign, checkout_event, provider_stub, resend_stub, services
    ):
        response = _post_signed(client, sign, checkout_event(vin="../../escaped"))

        assert response.status_code == HTTP_200_OK
        assert response.json()["processing_result"] == "error"
        assert provider_stub.calls == []
        assert resend_stub.sent == []
        assert services.jobs.get("cs_test_abc123") is None

    def test_unpaid_session_is_skipped(self, client, sign, checkout_event, provider_stub):
        response = _post_signed(client, sign, checkout_event(payment_status="unpaid"))

        assert response.status_code == HTTP_200_OK
        assert response.json()["processing_result"] == "skipped"
        assert provider_stub.calls == []


class TestAcknowledgement:
    def test_unhandled_event_type_is_skipped(self, client, sign, provider_stub):
        event = {"id": "evt_other", "type": "payment_intent.created", "data": {"object": {}}}

        response = _post_signed(client, sign, event)

        assert response.status_code == HTTP_200_OK
        assert response.json()["processing_result"] == "skipped"
        assert provider_stub.calls == []

    def test_fulfillment_failure_still_returns_200(self, client, sign, checkout_event, resend_stub, services):
        resend_stub.status = 500

        response = _post_signed(client, sign, checkout_event())

        assert response.status_code == HTTP_200_OK
        assert response.json()["processing_result"] == "error"
        job = services.jobs.get("cs_test_abc123")
        assert job is not None
        assert job.status.value == "failed"

    def test_unexpected_handler_error_still_returns_200(self, app, client, sign, checkout_event):
        class ExplodingHandler:
            async def handle_event(self, event):
                raise RuntimeError("job store unreachable")

        app.dependency_overrides[get_webhook_handler] = lambda: ExplodingHandler()

        response = _post_signed(client, sign, checkout_event())

        assert response.status_code == HTTP_200_OK
        body = response.json()
        assert body["processing_result"] == "error"
        assert "RuntimeError" in body["message"]


@pytest.mark.parametrize("method", ["get", "put"])
def test_only_post_is_routed(client, method):
    response = getattr(client, method)("/webhook")
    assert response.status_code == 405
