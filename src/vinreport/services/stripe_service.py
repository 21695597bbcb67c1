"""Stripe payment service for report checkout sessions and webhooks.

Provides integration with Stripe using the v8+ StripeClient pattern.
Credentials come from Settings (environment) and are injected by the
dependency layer.
"""

import json
import logging
from datetime import datetime, timezone

import stripe
from stripe import StripeClient

from vinreport.models.checkout import CheckoutIntent, CheckoutSessionResult
from vinreport.models.errors import SignatureInvalidError, StripeServiceError

logger = logging.getLogger(__name__)

# Checkout sessions stay open for 30 minutes
SESSION_TTL_SECONDS = 1800

# Reject signed payloads older than 5 minutes (replay protection)
WEBHOOK_TOLERANCE_SECONDS = 300


class StripeService:
    """Service for Stripe payment operations.

    Handles:
    - Checkout session creation for a single report purchase
    - Webhook signature validation

    Usage:
        stripe_svc = StripeService(secret_key="sk_test_...", webhook_secret="whsec_...")
        session = stripe_svc.create_checkout_session(
            CheckoutIntent(vin="1FTFW1ET1EFC12345", email="buyer@example.com",
                           vehicle="2014 Ford F-150"),
        )
    """

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str,
        *,
        price_cents: int = 1499,
        currency: str = "usd",
        product_name: str = "Vehicle History Report",
        success_url: str = "http://localhost:3000/success?session_id={CHECKOUT_SESSION_ID}",
        cancel_url: str = "http://localhost:3000/cancel",
    ) -> None:
        """Initialize Stripe service.

        Args:
            secret_key: Stripe secret API key.
            webhook_secret: Webhook endpoint signing secret (whsec_...).
            price_cents: Fixed report price in the smallest currency unit.
            currency: ISO currency code.
            product_name: Line item name shown on the Stripe payment page.
            success_url: Redirect after payment (supports {CHECKOUT_SESSION_ID}).
            cancel_url: Redirect when the customer abandons checkout.
        """
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._price_cents = price_cents
        self._currency = currency
        self._product_name = product_name
        self._success_url = success_url
        self._cancel_url = cancel_url
        self._client: StripeClient | None = None

    def _get_client(self) -> StripeClient:
        """Get or create the Stripe client (lazy initialization).

        Raises:
            StripeServiceError: If no secret key is configured.
        """
        if self._client is None:
            if not self._secret_key:
                raise StripeServiceError("Stripe secret key is not configured")
            self._client = StripeClient(self._secret_key)
            logger.info("Stripe client initialized")
        return self._client

    def create_checkout_session(self, intent: CheckoutIntent) -> CheckoutSessionResult:
        """Create a Stripe Checkout session for one report.

        The intent's {vin, email, vehicle} travel as session metadata and
        come back unchanged on checkout.session.completed.

        Raises:
            StripeServiceError: If session creation fails.
        """
        client = self._get_client()

        try:
            logger.info(
                "Creating Stripe checkout session for VIN %s, amount %d",
                intent.vin,
                self._price_cents,
            )

            session = client.checkout.sessions.create(
                params={
                    "mode": "payment",
                    "payment_method_types": ["card"],
                    "line_items": [
                        {
                            "price_data": {
                                "currency": self._currency,
                                "unit_amount": self._price_cents,
                                "product_data": {
                                    "name": self._product_name,
                                    "description": f"{intent.vehicle or 'Vehicle'} - VIN {intent.vin}",
                                },
                            },
                            "quantity": 1,
                        }
                    ],
                    "success_url": self._success_url,
                    "cancel_url": self._cancel_url,
                    "metadata": intent.to_metadata(),
                    "customer_email": intent.email,
                    "expires_at": int(datetime.now(timezone.utc).timestamp()) + SESSION_TTL_SECONDS,
                },
            )

            logger.info("Checkout session created: %s for VIN %s", session.id, intent.vin)

            return CheckoutSessionResult(
                session_id=session.id,
                url=session.url,
                expires_at=(
                    datetime.fromtimestamp(session.expires_at, tz=timezone.utc)
                    if session.expires_at
                    else None
                ),
            )

        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            logger.error(
                "Stripe checkout session creation failed: %s (code: %s)",
                str(e),
                error_code,
            )
            raise StripeServiceError(
                f"Failed to create checkout session: {e}",
                stripe_error_code=error_code,
            ) from e

    def verify_webhook_signature(self, payload: bytes, signature: str) -> dict:
        """Verify a webhook signature and parse the event.

        Must be given the raw request body; any re-serialization changes the
        bytes the signature was computed over.

        Args:
            payload: Raw request body bytes.
            signature: Stripe-Signature header value.

        Returns:
            Parsed Stripe event dictionary.

        Raises:
            SignatureInvalidError: If the signature does not verify.
        """
        if not self._webhook_secret:
            raise SignatureInvalidError("Webhook signing secret is not configured")

        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                body, signature, self._webhook_secret, tolerance=WEBHOOK_TOLERANCE_SECONDS
            )
            event = json.loads(body)
        except (stripe.SignatureVerificationError, ValueError) as e:
            logger.warning("Invalid webhook signature: %s", str(e))
            raise SignatureInvalidError("Invalid webhook signature") from e

        if not isinstance(event, dict) or "id" not in event:
            raise SignatureInvalidError("Webhook payload is not a Stripe event")

        logger.info("Webhook signature verified for event: %s", event["id"])
        return event
