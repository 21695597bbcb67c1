"""Webhook handler for processing verified Stripe events.

Business logic for webhook events, separate from HTTP routing so it can be
tested without a request. Signature verification happens before this
handler is reached; everything here operates on a trusted event.
"""

from vinreport.models.checkout import CheckoutIntent
from vinreport.models.enums import ProcessingResult
from vinreport.models.stripe_webhook import WebhookResult
from vinreport.services.fulfillment import FulfillmentService
from vinreport.utils.logging import get_logger, log_webhook_event

logger = get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


class WebhookHandler:
    """Routes verified Stripe events to report fulfillment."""

    HANDLED_EVENT_TYPES = {CHECKOUT_COMPLETED}

    def __init__(self, fulfillment: FulfillmentService) -> None:
        self._fulfillment = fulfillment

    async def handle_event(self, event: dict) -> WebhookResult:
        """Process one verified event and describe the outcome for Stripe."""
        event_id = event.get("id", "")
        event_type = event.get("type", "")

        if event_type not in self.HANDLED_EVENT_TYPES:
            log_webhook_event(logger, event_type, event_id, result="skipped")
            return WebhookResult(
                event_id=event_id,
                event_type=event_type,
                processing_result=ProcessingResult.SKIPPED,
                message=f"Event type '{event_type}' not handled",
            )

        result, message = await self.process_checkout_completed(event)
        return WebhookResult(
            event_id=event_id,
            event_type=event_type,
            processing_result=result,
            message=message,
        )

    async def process_checkout_completed(self, event: dict) -> tuple[ProcessingResult, str | None]:
        """Process checkout.session.completed: fulfill the purchased report.

        Returns:
            Tuple of (processing_result, error_message)
        """
        event_id = event.get("id", "")
        session = event.get("data", {}).get("object", {})
        session_id = session.get("id")
        metadata = session.get("metadata") or {}
        payment_status = session.get("payment_status")

        try:
            intent = CheckoutIntent.from_metadata(metadata)
        except ValueError as e:
            log_webhook_event(
                logger, CHECKOUT_COMPLETED, event_id, session_id=session_id, result="error", error=str(e)
            )
            return ProcessingResult.ERROR, str(e)

        if not session_id:
            error_msg = "Missing checkout session id"
            log_webhook_event(
                logger, CHECKOUT_COMPLETED, event_id, vin=intent.vin, result="error", error=error_msg
            )
            return ProcessingResult.ERROR, error_msg

        # Only fulfill if payment_status is 'paid'
        if payment_status != "paid":
            skip_msg = f"Payment status is '{payment_status}', not 'paid'"
            log_webhook_event(
                logger,
                CHECKOUT_COMPLETED,
                event_id,
                session_id=session_id,
                vin=intent.vin,
                result="skipped",
                error=skip_msg,
            )
            return ProcessingResult.SKIPPED, skip_msg

        result, message = await self._fulfillment.start(
            session_id=session_id,
            event_id=event_id,
            intent=intent,
        )
        log_webhook_event(
            logger,
            CHECKOUT_COMPLETED,
            event_id,
            session_id=session_id,
            vin=intent.vin,
            result=result.value,
            error=message if result == ProcessingResult.ERROR else None,
        )
        return result, message
