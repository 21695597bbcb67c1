"""Enumeration types for report service data models."""

from enum import Enum


class FulfillmentStatus(str, Enum):
    """Status of a post-payment fulfillment job."""

    PENDING = "pending"
    ARTIFACT_READY = "artifact_ready"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ProcessingResult(str, Enum):
    """Outcome reported back to Stripe for a webhook delivery."""

    SUCCESS = "success"
    DUPLICATE = "duplicate"
    SKIPPED = "skipped"
    ERROR = "error"


class ArtifactStrategy(str, Enum):
    """How a paid report is obtained from the provider."""

    BASE64_PDF = "base64_pdf"
    DIRECT_LINK = "direct_link"


class ArtifactStoreKind(str, Enum):
    """Where materialized reports are persisted for reuse."""

    NONE = "none"
    FILESYSTEM = "filesystem"
    S3 = "s3"
    SUPABASE = "supabase"


class JobStoreKind(str, Enum):
    """Backend for durable fulfillment job records."""

    MEMORY = "memory"
    DYNAMODB = "dynamodb"
