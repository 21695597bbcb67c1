"""Pydantic models for the VIN report service."""

from .artifact import ReportArtifact
from .checkout import CheckoutIntent, CheckoutSessionResult
from .enums import (
    ArtifactStoreKind,
    ArtifactStrategy,
    FulfillmentStatus,
    JobStoreKind,
    ProcessingResult,
)
from .errors import (
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    EmailDeliveryError,
    ErrorCode,
    ErrorResponse,
    ReportNotReadyError,
    ReportServiceError,
    ReportUnavailableError,
    SignatureInvalidError,
    StripeServiceError,
    UploadFailedError,
    UpstreamError,
)
from .fulfillment import FulfillmentJob
from .stripe_webhook import WebhookResult
from .vehicle import VIN_PATTERN, ReportReference, VinRecord, is_valid_vin

__all__ = [
    # Enums
    "ArtifactStoreKind",
    "ArtifactStrategy",
    "FulfillmentStatus",
    "JobStoreKind",
    "ProcessingResult",
    # Vehicle
    "VIN_PATTERN",
    "is_valid_vin",
    "ReportReference",
    "VinRecord",
    # Checkout
    "CheckoutIntent",
    "CheckoutSessionResult",
    # Artifact
    "ReportArtifact",
    # Fulfillment
    "FulfillmentJob",
    "WebhookResult",
    # Errors
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
    "ErrorCode",
    "ErrorResponse",
    "ReportServiceError",
    "UpstreamError",
    "StripeServiceError",
    "SignatureInvalidError",
    "EmailDeliveryError",
    "ReportNotReadyError",
    "ReportUnavailableError",
    "UploadFailedError",
]
