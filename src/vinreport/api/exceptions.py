"""FastAPI exception handlers for converting ReportServiceError to HTTP responses.

The ErrorCode-to-HTTP status mapping follows REST conventions:
- 400 Bad Request: Webhook signature failures
- 404 Not Found: No vehicle data for a VIN
- 500 Internal Server Error: Upstream provider, payment or email failures

Usage:
    from vinreport.api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from vinreport.models.errors import ErrorCode, ReportServiceError
from vinreport.utils.logging import get_logger

logger = get_logger(__name__)

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VEHICLE_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: HTTP_400_BAD_REQUEST,
    # Upstream failures -> 500 (server-side issue)
    ErrorCode.VEHICLE_LOOKUP_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.CHECKOUT_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.CONTACT_DELIVERY_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.STRIPE_API_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode, defaulting to 400."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def report_service_error_handler(request: Request, exc: ReportServiceError) -> JSONResponse:
    """Render a ReportServiceError as an ErrorResponse body with its mapped status."""
    status_code = get_http_status_for_error(exc.code)
    return JSONResponse(
        status_code=status_code,
        content=exc.to_error_response().model_dump(mode="json"),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for uncaught exceptions. Internal detail stays in the logs."""
    logger.exception("Unhandled exception on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error_code": "ERR_INTERNAL",
            "message": "An unexpected error occurred",
            "recovery": "Please try again later or contact support",
            "details": None,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(ReportServiceError, report_service_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
