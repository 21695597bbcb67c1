"""Standard error codes and exception taxonomy for the report service.

Two layers:
- ErrorCode / ReportServiceError: what the HTTP façade returns to callers.
- Service exceptions (UpstreamError and friends): raised by the provider,
  payment, email and storage adapters. Routes translate them into a
  ReportServiceError so upstream detail only reaches the logs.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Error codes returned by the public endpoints."""

    VEHICLE_NOT_FOUND = "ERR_001"
    VEHICLE_LOOKUP_FAILED = "ERR_002"
    CHECKOUT_FAILED = "ERR_003"
    CONTACT_DELIVERY_FAILED = "ERR_004"

    # Stripe webhook error codes
    INVALID_WEBHOOK_SIGNATURE = "ERR_STRIPE_001"
    STRIPE_API_ERROR = "ERR_STRIPE_002"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VEHICLE_NOT_FOUND: "No vehicle data found for this VIN",
    ErrorCode.VEHICLE_LOOKUP_FAILED: "Error fetching vehicle info.",
    ErrorCode.CHECKOUT_FAILED: "Could not create checkout session",
    ErrorCode.CONTACT_DELIVERY_FAILED: "Could not send your message",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Invalid webhook signature",
    ErrorCode.STRIPE_API_ERROR: "Stripe API error occurred",
}

ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.VEHICLE_NOT_FOUND: "Check the VIN and try again",
    ErrorCode.VEHICLE_LOOKUP_FAILED: "Please try again later",
    ErrorCode.CHECKOUT_FAILED: "Please try again later or contact support",
    ErrorCode.CONTACT_DELIVERY_FAILED: "Please try again later or email support directly",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Verify webhook secret configuration",
    ErrorCode.STRIPE_API_ERROR: "Try again or contact support",
}


class ErrorResponse(BaseModel):
    """JSON body returned for failed requests."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code."""
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class ReportServiceError(Exception):
    """Exception raised by route handlers, rendered as an ErrorResponse."""

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse body."""
        return ErrorResponse.from_code(self.code, self.details)


# === Service exceptions ===


class UpstreamError(Exception):
    """A third-party call failed (non-2xx response or network error)."""

    def __init__(
        self,
        message: str,
        *,
        service: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize with message, the failing service and HTTP status.

        Args:
            message: Human-readable error message (logged, never returned).
            service: Upstream service name (carsimulcast, stripe, resend, ...).
            status_code: Upstream HTTP status code if a response was received.
        """
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class StripeServiceError(UpstreamError):
    """Raised when a Stripe operation fails."""

    def __init__(self, message: str, stripe_error_code: str | None = None) -> None:
        super().__init__(message, service="stripe")
        self.stripe_error_code = stripe_error_code


class SignatureInvalidError(StripeServiceError):
    """Webhook payload signature did not verify. No action may follow."""


class EmailDeliveryError(UpstreamError):
    """Raised when the email API rejects or fails a send."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, service="resend", status_code=status_code)


class ReportNotReadyError(Exception):
    """Provider returned an empty or placeholder report payload."""

    def __init__(self, vin: str, reason: str) -> None:
        super().__init__(f"Report for {vin} not ready: {reason}")
        self.vin = vin
        self.reason = reason


class ReportUnavailableError(Exception):
    """No report reference appeared after exhausting all poll attempts."""

    def __init__(self, vin: str, attempts: int) -> None:
        super().__init__(f"Report for {vin} unavailable after {attempts} attempts")
        self.vin = vin
        self.attempts = attempts


class UploadFailedError(Exception):
    """Persisting a report artifact to its store failed."""

    def __init__(self, vin: str, store: str, message: str) -> None:
        super().__init__(f"Upload of report for {vin} to {store} failed: {message}")
        self.vin = vin
        self.store = store
