"""FastAPI dependency injection providers for shared services.

Factory functions build every service from Settings and cache it with
@lru_cache, so one instance is shared per process. Services receive their
collaborators through their constructors; nothing reads the environment
except get_settings().

Usage in routes:
    from vinreport.api.dependencies import get_stripe_service

    @router.post("/create-checkout-session")
    async def create_checkout_session(
        stripe_service: StripeService = Depends(get_stripe_service),
    ):
        ...

Service Dependency Graph:
    Settings
        ├── CarsimulcastClient
        │       ├── ReportPoller
        │       └── ArtifactProvider (base64_pdf | direct_link)
        │               └── CachingArtifactProvider (+ ArtifactStore)
        ├── EmailService
        ├── StripeService
        └── FulfillmentJobStore (memory | dynamodb)
    FulfillmentService(ArtifactProvider, EmailService, FulfillmentJobStore)
        └── WebhookHandler

Testing:
    Use app.dependency_overrides or reset_services() between tests.
"""

from functools import lru_cache

import boto3
from supabase import create_client

from vinreport.config import get_settings
from vinreport.models.enums import ArtifactStoreKind, ArtifactStrategy, JobStoreKind
from vinreport.services.artifact_provider import (
    ArtifactProvider,
    Base64PdfArtifactProvider,
    CachingArtifactProvider,
    DirectLinkArtifactProvider,
)
from vinreport.services.artifact_store import (
    ArtifactStore,
    FilesystemArtifactStore,
    S3ArtifactStore,
    SupabaseArtifactStore,
)
from vinreport.services.dynamodb import DynamoDBService
from vinreport.services.email_service import EmailService
from vinreport.services.fulfillment import (
    DynamoDBFulfillmentJobStore,
    FulfillmentJobStore,
    FulfillmentService,
    InMemoryFulfillmentJobStore,
)
from vinreport.services.provider_client import CarsimulcastClient
from vinreport.services.report_poller import ReportPoller
from vinreport.services.retry import RetryPolicy, fixed_delay
from vinreport.services.stripe_service import StripeService
from vinreport.services.webhook_handler import WebhookHandler


@lru_cache
def get_provider_client() -> CarsimulcastClient:
    settings = get_settings()
    return CarsimulcastClient(
        settings.carsimulcast_base_url,
        settings.carsimulcast_api_key,
        settings.carsimulcast_api_secret,
        report_type=settings.report_type,
        timeout_seconds=settings.http_timeout_seconds,
        pdf_timeout_seconds=settings.pdf_timeout_seconds,
    )


@lru_cache
def get_stripe_service() -> StripeService:
    settings = get_settings()
    return StripeService(
        settings.stripe_secret_key,
        settings.stripe_webhook_secret,
        price_cents=settings.report_price_cents,
        currency=settings.report_currency,
        product_name=settings.report_product_name,
        success_url=settings.checkout_success_url,
        cancel_url=settings.checkout_cancel_url,
    )


@lru_cache
def get_email_service() -> EmailService:
    settings = get_settings()
    return EmailService(
        settings.resend_api_key,
        settings.email_from,
        settings.support_email,
        base_url=settings.resend_base_url,
        timeout_seconds=settings.http_timeout_seconds,
    )


@lru_cache
def get_report_poller() -> ReportPoller:
    settings = get_settings()
    policy = RetryPolicy(
        max_attempts=settings.poll_max_attempts,
        delay_fn=fixed_delay(settings.poll_delay_seconds),
    )
    return ReportPoller(get_provider_client(), policy)


@lru_cache
def get_artifact_store() -> ArtifactStore | None:
    """Build the configured report store, or None when caching is off."""
    settings = get_settings()
    kind = settings.artifact_store

    if kind == ArtifactStoreKind.FILESYSTEM:
        return FilesystemArtifactStore(settings.artifact_dir, settings.artifact_public_base_url)
    if kind == ArtifactStoreKind.S3:
        return S3ArtifactStore(
            boto3.client("s3"),
            settings.s3_bucket,
            prefix=settings.s3_prefix,
            url_expiry_seconds=settings.s3_url_expiry_seconds,
        )
    if kind == ArtifactStoreKind.SUPABASE:
        if not settings.supabase_url or not settings.supabase_key:
            raise RuntimeError(
                "ARTIFACT_STORE=supabase requires SUPABASE_URL and SUPABASE_KEY"
            )
        client = create_client(settings.supabase_url, settings.supabase_key)
        return SupabaseArtifactStore(client, settings.supabase_bucket)
    return None


@lru_cache
def get_artifact_provider() -> ArtifactProvider:
    settings = get_settings()
    converter = Base64PdfArtifactProvider(
        get_provider_client(),
        min_payload_length=settings.min_report_payload_length,
    )

    provider: ArtifactProvider = converter
    if settings.artifact_strategy == ArtifactStrategy.DIRECT_LINK:
        provider = DirectLinkArtifactProvider(get_report_poller(), converter)

    store = get_artifact_store()
    if store is not None:
        provider = CachingArtifactProvider(provider, store)
    return provider


@lru_cache
def get_job_store() -> FulfillmentJobStore:
    settings = get_settings()
    if settings.job_store == JobStoreKind.DYNAMODB:
        return DynamoDBFulfillmentJobStore(DynamoDBService(settings.table_prefix))
    return InMemoryFulfillmentJobStore()


@lru_cache
def get_fulfillment_service() -> FulfillmentService:
    return FulfillmentService(
        get_artifact_provider(),
        get_email_service(),
        get_job_store(),
    )


@lru_cache
def get_webhook_handler() -> WebhookHandler:
    return WebhookHandler(get_fulfillment_service())


def reset_services() -> None:
    """Clear all cached service instances (and Settings).

    Call this in test fixtures to ensure clean state between tests.
    """
    get_settings.cache_clear()
    get_provider_client.cache_clear()
    get_stripe_service.cache_clear()
    get_email_service.cache_clear()
    get_report_poller.cache_clear()
    get_artifact_store.cache_clear()
    get_artifact_provider.cache_clear()
    get_job_store.cache_clear()
    get_fulfillment_service.cache_clear()
    get_webhook_handler.cache_clear()
