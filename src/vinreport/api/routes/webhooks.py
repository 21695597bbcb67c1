"""Stripe webhook endpoint.

The signature is checked against the raw request body before anything else
happens; an unverified request gets a 400 and triggers no provider, storage
or email call. Once verified, the event is always acknowledged with 200 so
Stripe does not redeliver it. Fulfillment failures are kept on the durable
job record and retried by the reconcile sweep.
"""

from fastapi import APIRouter, Depends, Request

from vinreport.api.dependencies import get_stripe_service, get_webhook_handler
from vinreport.models.enums import ProcessingResult
from vinreport.models.errors import (
    ErrorCode,
    ErrorResponse,
    ReportServiceError,
    StripeServiceError,
)
from vinreport.models.stripe_webhook import WebhookResult
from vinreport.services.stripe_service import StripeService
from vinreport.services.webhook_handler import WebhookHandler
from vinreport.utils.logging import get_logger, log_webhook_event

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

SIGNATURE_HEADER = "Stripe-Signature"


@router.post(
    "/webhook",
    summary="Receive Stripe webhook events",
    description="""
Endpoint for Stripe webhook events. Handles:
- checkout.session.completed: fetches the purchased report and emails it

**No authentication required** - signature is verified using Stripe webhook secret.

**Idempotent**: Redelivery for a checkout session that already has a
fulfillment job returns 200 with 'duplicate' result.
""",
    response_model=WebhookResult,
    responses={
        200: {"description": "Event received and processed (or acknowledged)"},
        400: {"description": "Invalid signature or missing header", "model": ErrorResponse},
    },
)
async def handle_stripe_webhook(
    request: Request,
    stripe_service: StripeService = Depends(get_stripe_service),
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> WebhookResult:
    signature = request.headers.get(SIGNATURE_HEADER)
    if not signature:
        logger.warning("Webhook request missing %s header", SIGNATURE_HEADER)
        raise ReportServiceError(
            ErrorCode.INVALID_WEBHOOK_SIGNATURE,
            details={"message": f"Missing {SIGNATURE_HEADER} header"},
        )

    # Raw bytes, the signature covers the exact payload
    payload = await request.body()

    try:
        event = stripe_service.verify_webhook_signature(payload, signature)
    except StripeServiceError as e:
        logger.warning("Webhook signature verification failed: %s", e)
        raise ReportServiceError(ErrorCode.INVALID_WEBHOOK_SIGNATURE) from e

    event_id = event.get("id", "")
    event_type = event.get("type", "")
    log_webhook_event(logger, event_type, event_id, result="received")

    try:
        return await handler.handle_event(event)
    except Exception as e:
        logger.exception("Webhook %s processing failed", event_id)
        return WebhookResult(
            event_id=event_id,
            event_type=event_type,
            processing_result=ProcessingResult.ERROR,
            message=f"{type(e).__name__}: {e}",
        )
