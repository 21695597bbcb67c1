"""Backend services for the VIN report service."""

from .artifact_provider import (
    ArtifactProvider,
    Base64PdfArtifactProvider,
    CachingArtifactProvider,
    DirectLinkArtifactProvider,
)
from .artifact_store import (
    ArtifactStore,
    FilesystemArtifactStore,
    S3ArtifactStore,
    SupabaseArtifactStore,
)
from .dynamodb import DynamoDBService
from .email_service import EmailService
from .fulfillment import (
    DynamoDBFulfillmentJobStore,
    FulfillmentJobStore,
    FulfillmentService,
    InMemoryFulfillmentJobStore,
    ReconcileSummary,
)
from .provider_client import CarsimulcastClient
from .report_poller import ReportPoller
from .retry import RetryPolicy, exponential_backoff, fixed_delay
from .stripe_service import StripeService
from .webhook_handler import WebhookHandler

__all__ = [
    "ArtifactProvider",
    "Base64PdfArtifactProvider",
    "CachingArtifactProvider",
    "DirectLinkArtifactProvider",
    "ArtifactStore",
    "FilesystemArtifactStore",
    "S3ArtifactStore",
    "SupabaseArtifactStore",
    "CarsimulcastClient",
    "DynamoDBService",
    "EmailService",
    "DynamoDBFulfillmentJobStore",
    "FulfillmentJobStore",
    "FulfillmentService",
    "InMemoryFulfillmentJobStore",
    "ReconcileSummary",
    "ReportPoller",
    "RetryPolicy",
    "exponential_backoff",
    "fixed_delay",
    "StripeService",
    "WebhookHandler",
]
