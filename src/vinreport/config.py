"""Service configuration read from the environment (or a local .env file)."""

import json
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from vinreport.models.enums import ArtifactStoreKind, ArtifactStrategy, JobStoreKind


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field(default="dev", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Carsimulcast vehicle-record provider
    carsimulcast_base_url: str = Field(
        default="https://connect.carsimulcast.com", alias="CARSIMULCAST_BASE_URL"
    )
    carsimulcast_api_key: str = Field(default="", alias="CARSIMULCAST_API_KEY")
    carsimulcast_api_secret: str = Field(default="", alias="CARSIMULCAST_API_SECRET")
    report_type: str = Field(default="carfax", alias="REPORT_TYPE")
    http_timeout_seconds: float = Field(default=10.0, alias="HTTP_TIMEOUT_SECONDS")
    pdf_timeout_seconds: float = Field(default=60.0, alias="PDF_TIMEOUT_SECONDS")
    min_report_payload_length: int = Field(default=100, alias="MIN_REPORT_PAYLOAD_LENGTH")

    # Report availability polling
    poll_max_attempts: int = Field(default=5, ge=1, alias="POLL_MAX_ATTEMPTS")
    poll_delay_seconds: float = Field(default=3.0, ge=0, alias="POLL_DELAY_SECONDS")

    # Stripe
    stripe_secret_key: str = Field(default="", alias="STRIPE_SECRET_KEY")
    stripe_webhook_secret: str = Field(default="", alias="STRIPE_WEBHOOK_SECRET")
    report_price_cents: int = Field(default=1499, ge=1, alias="REPORT_PRICE_CENTS")
    report_currency: str = Field(default="usd", alias="REPORT_CURRENCY")
    report_product_name: str = Field(default="Vehicle History Report", alias="REPORT_PRODUCT_NAME")
    checkout_success_url: str = Field(
        default="http://localhost:3000/success?session_id={CHECKOUT_SESSION_ID}",
        alias="CHECKOUT_SUCCESS_URL",
    )
    checkout_cancel_url: str = Field(default="http://localhost:3000/cancel", alias="CHECKOUT_CANCEL_URL")

    # Resend email API
    resend_api_key: str = Field(default="", alias="RESEND_API_KEY")
    resend_base_url: str = Field(default="https://api.resend.com", alias="RESEND_BASE_URL")
    email_from: str = Field(default="Reports <reports@example.com>", alias="EMAIL_FROM")
    support_email: str = Field(default="support@example.com", alias="SUPPORT_EMAIL")

    # Artifact acquisition and storage
    artifact_strategy: ArtifactStrategy = Field(
        default=ArtifactStrategy.BASE64_PDF, alias="ARTIFACT_STRATEGY"
    )
    artifact_store: ArtifactStoreKind = Field(default=ArtifactStoreKind.NONE, alias="ARTIFACT_STORE")
    artifact_dir: str = Field(default="./reports", alias="ARTIFACT_DIR")
    artifact_public_base_url: str = Field(default="", alias="ARTIFACT_PUBLIC_BASE_URL")
    s3_bucket: str = Field(default="", alias="S3_BUCKET")
    s3_prefix: str = Field(default="reports/", alias="S3_PREFIX")
    s3_url_expiry_seconds: int = Field(default=7 * 24 * 3600, alias="S3_URL_EXPIRY_SECONDS")
    supabase_url: str = Field(default="", alias="SUPABASE_URL")
    supabase_key: str = Field(default="", alias="SUPABASE_KEY")
    supabase_bucket: str = Field(default="reports", alias="SUPABASE_BUCKET")

    # Fulfillment job records
    job_store: JobStoreKind = Field(default=JobStoreKind.MEMORY, alias="JOB_STORE")
    dynamodb_table_prefix: str = Field(default="", alias="DYNAMODB_TABLE_PREFIX")
    reconcile_max_attempts: int = Field(default=3, ge=1, alias="RECONCILE_MAX_ATTEMPTS")

    # HTTP surface
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        alias="CORS_ALLOW_ORIGINS",
    )

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Accept a JSON array or a comma-separated list of origins."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def table_prefix(self) -> str:
        return self.dynamodb_table_prefix or f"vinreport-{self.environment}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide Settings instance."""
    return Settings()
