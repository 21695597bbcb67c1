"""Checkout session endpoint.

Creates a Stripe Checkout session for one report. The report itself is only
fetched after the payment webhook arrives.
"""

from fastapi import APIRouter, Depends

from vinreport.api.dependencies import get_stripe_service
from vinreport.api.models.checkout import CheckoutRequest, CheckoutResponse
from vinreport.models.errors import ErrorCode, ErrorResponse, ReportServiceError, StripeServiceError
from vinreport.services.stripe_service import StripeService
from vinreport.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["checkout"])


@router.post(
    "/create-checkout-session",
    summary="Create a Stripe Checkout session for a VIN report",
    response_model=CheckoutResponse,
    responses={500: {"description": "Stripe session creation failed", "model": ErrorResponse}},
)
async def create_checkout_session(
    body: CheckoutRequest,
    stripe_service: StripeService = Depends(get_stripe_service),
) -> CheckoutResponse:
    intent = body.to_intent()
    try:
        session = stripe_service.create_checkout_session(intent)
    except StripeServiceError as e:
        logger.error("Checkout for %s failed: %s", intent.vin, e)
        raise ReportServiceError(ErrorCode.CHECKOUT_FAILED) from e

    logger.info("Checkout session %s created for %s", session.session_id, intent.vin)
    return CheckoutResponse(url=session.url)
