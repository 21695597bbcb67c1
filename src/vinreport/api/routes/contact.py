"""Contact form endpoint: relays the message to the support inbox."""

from fastapi import APIRouter, Depends

from vinreport.api.dependencies import get_email_service
from vinreport.api.models.contact import ContactRequest, ContactResponse
from vinreport.models.errors import EmailDeliveryError, ErrorCode, ErrorResponse, ReportServiceError
from vinreport.services.email_service import EmailService
from vinreport.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["contact"])


@router.post(
    "/contact",
    summary="Send a message to support",
    response_model=ContactResponse,
    responses={500: {"description": "Message could not be delivered", "model": ErrorResponse}},
)
async def send_contact_message(
    body: ContactRequest,
    email_service: EmailService = Depends(get_email_service),
) -> ContactResponse:
    try:
        await email_service.send_contact_message(body.name, str(body.email), body.vin, body.message)
    except EmailDeliveryError as e:
        logger.error("Contact message from %s not delivered: %s", body.email, e)
        raise ReportServiceError(ErrorCode.CONTACT_DELIVERY_FAILED) from e
    return ContactResponse(success=True)
