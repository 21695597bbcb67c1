"""Contract tests for POST /create-checkout-session."""

from unittest.mock import patch

import pytest
import stripe
from starlette.status import HTTP_200_OK, HTTP_500_INTERNAL_SERVER_ERROR

REQUEST = {"vin": "1FTFW1ET1EFC12345", "email": "buyer@example.com", "vehicle": "2014 Ford F-150"}


@pytest.fixture
def mock_stripe_client():
    with patch("vinreport.services.stripe_service.StripeClient") as mock_client_class:
        yield mock_client_class.return_value


def test_returns_redirect_url_and_exact_metadata(client, mock_stripe_client, mock_stripe_session, provider_stub):
    mock_stripe_client.checkout.sessions.create.return_value = mock_stripe_session

    response = client.post("/create-checkout-session", json=REQUEST)

    assert response.status_code == HTTP_200_OK
    assert response.json() == {"url": "https://checkout.stripe.com/c/pay/cs_test_abc123"}
    params = mock_stripe_client.checkout.sessions.create.call_args.kwargs["params"]
    assert params["metadata"] == REQUEST
    # Checkout never touches the report provider
    assert provider_stub.calls == []


def test_vehicle_is_optional(client, mock_stripe_client, mock_stripe_session):
    mock_stripe_client.checkout.sessions.create.return_value = mock_stripe_session

    response = client.post("/create-checkout-session", json={"vin": REQUEST["vin"], "email": REQUEST["email"]})

    assert response.status_code == HTTP_200_OK
    params = mock_stripe_client.checkout.sessions.create.call_args.kwargs["params"]
    assert params["metadata"]["vehicle"] == ""


@pytest.mark.parametrize(
    "body",
    [
        {"email": "buyer@example.com"},
        {"vin": "1FTFW1ET1EFC12345", "email": "not-an-email"},
        {"vin": "", "email": "buyer@example.com"},
        {"vin": "../../etc/cron.d/x", "email": "buyer@example.com"},
        {"vin": "1FTFW1ET1EFC1234?", "email": "buyer@example.com"},
        {"vin": "1FTFW1ET1EFC123456789", "email": "buyer@example.com"},
    ],
)
def test_invalid_request_is_rejected(client, mock_stripe_client, body):
    response = client.post("/create-checkout-session", json=body)

    assert response.status_code == 422
    mock_stripe_client.checkout.sessions.create.assert_not_called()


def test_stripe_failure_is_generic_500(client, mock_stripe_client):
    mock_stripe_client.checkout.sessions.create.side_effect = stripe.APIConnectionError(
        "connection reset by sk_live_secret"
    )

    response = client.post("/create-checkout-session", json=REQUEST)

    assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["success"] is False
    assert "sk_live_secret" not in response.text
