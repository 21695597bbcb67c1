"""Post-payment fulfillment: materialize the report, email it, record the outcome.

Every paid checkout session gets a durable FulfillmentJob before any
provider call is made. The job moves pending -> artifact_ready -> succeeded,
or to failed with the error kept on the record. Failed (and stale unfinished)
jobs are picked up again by reconcile(), so a failed delivery is never lost
even though the webhook itself always answers 200.
"""

import datetime as dt
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from boto3.dynamodb.conditions import Attr

from vinreport.models.checkout import CheckoutIntent
from vinreport.models.enums import FulfillmentStatus, ProcessingResult
from vinreport.models.fulfillment import FulfillmentJob
from vinreport.services.artifact_provider import ArtifactProvider
from vinreport.services.dynamodb import DynamoDBService
from vinreport.services.email_service import EmailService
from vinreport.utils.logging import get_logger, log_fulfillment_event

logger = get_logger(__name__)


# === Job stores ===


class FulfillmentJobStore(ABC):
    @abstractmethod
    def get(self, session_id: str) -> FulfillmentJob | None:
        """Return the job for a checkout session, if any."""

    @abstractmethod
    def create(self, job: FulfillmentJob) -> bool:
        """Insert a new job. Returns False if one already exists for the session."""

    @abstractmethod
    def save(self, job: FulfillmentJob) -> None:
        """Overwrite an existing job with its current state."""

    @abstractmethod
    def list_retryable(self) -> list[FulfillmentJob]:
        """Jobs that have not succeeded yet."""


class InMemoryFulfillmentJobStore(FulfillmentJobStore):
    """Process-local job store for development and tests."""

    def __init__(self) -> None:
        self._jobs: dict[str, FulfillmentJob] = {}

    def get(self, session_id: str) -> FulfillmentJob | None:
        job = self._jobs.get(session_id)
        return job.model_copy() if job else None

    def create(self, job: FulfillmentJob) -> bool:
        if job.session_id in self._jobs:
            return False
        self._jobs[job.session_id] = job.model_copy()
        return True

    def save(self, job: FulfillmentJob) -> None:
        self._jobs[job.session_id] = job.model_copy()

    def list_retryable(self) -> list[FulfillmentJob]:
        return [job.model_copy() for job in self._jobs.values() if job.is_retryable]


class DynamoDBFulfillmentJobStore(FulfillmentJobStore):
    """Jobs in the "{prefix}-fulfillment-jobs" table, hash key session_id."""

    TABLE = "fulfillment-jobs"

    def __init__(self, db: DynamoDBService) -> None:
        self._db = db

    def get(self, session_id: str) -> FulfillmentJob | None:
        item = self._db.get_item(self.TABLE, {"session_id": session_id})
        return FulfillmentJob.from_item(item) if item else None

    def create(self, job: FulfillmentJob) -> bool:
        return self._db.put_item(
            self.TABLE,
            job.to_item(),
            condition_expression="attribute_not_exists(session_id)",
        )

    def save(self, job: FulfillmentJob) -> None:
        self._db.put_item(self.TABLE, job.to_item())

    def list_retryable(self) -> list[FulfillmentJob]:
        items = self._db.scan(
            self.TABLE,
            Attr("status").ne(FulfillmentStatus.SUCCEEDED.value),
        )
        return [FulfillmentJob.from_item(item) for item in items]


# === Service ===


@dataclass
class ReconcileSummary:
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed) + len(self.skipped)


class FulfillmentService:
    """Runs and records report fulfillment for paid checkout sessions."""

    def __init__(
        self,
        artifacts: ArtifactProvider,
        email: EmailService,
        jobs: FulfillmentJobStore,
    ) -> None:
        self._artifacts = artifacts
        self._email = email
        self._jobs = jobs

    async def start(
        self,
        *,
        session_id: str,
        event_id: str,
        intent: CheckoutIntent,
    ) -> tuple[ProcessingResult, str | None]:
        """Record a job for a newly paid session and run it once.

        A session that already has a job is a redelivery: nothing is re-run
        here, reconciliation owns retries.

        Returns:
            Tuple of (processing_result, error_message)
        """
        existing = self._jobs.get(session_id)
        if existing is not None:
            logger.info(
                "Job for session %s already exists (status=%s)", session_id, existing.status.value
            )
            return ProcessingResult.DUPLICATE, f"Fulfillment already {existing.status.value}"

        job = FulfillmentJob(
            session_id=session_id,
            event_id=event_id,
            vin=intent.vin,
            email=intent.email,
            vehicle=intent.vehicle,
        )
        if not self._jobs.create(job):
            return ProcessingResult.DUPLICATE, "Fulfillment already recorded"
        log_fulfillment_event(logger, "pending", session_id=session_id, vin=intent.vin)

        job = await self.run(job)
        if job.status == FulfillmentStatus.SUCCEEDED:
            return ProcessingResult.SUCCESS, None
        return ProcessingResult.ERROR, job.last_error

    async def run(self, job: FulfillmentJob) -> FulfillmentJob:
        """One fulfillment attempt. Never raises; the outcome is on the job."""
        job.attempts += 1
        job.last_error = None
        intent = job.intent

        try:
            artifact = await self._artifacts.materialize(intent.vin, intent.vehicle)
            job.status = FulfillmentStatus.ARTIFACT_READY
            job.artifact_url = artifact.url
            self._touch(job)
            log_fulfillment_event(
                logger,
                "artifact_ready",
                session_id=job.session_id,
                vin=job.vin,
                attempts=job.attempts,
                hosted=artifact.is_hosted,
            )

            await self._email.send_report_email(intent.email, intent.vehicle, intent.vin, artifact)
            job.status = FulfillmentStatus.SUCCEEDED
            self._touch(job)
            log_fulfillment_event(
                logger, "succeeded", session_id=job.session_id, vin=job.vin, attempts=job.attempts
            )
        except Exception as e:
            logger.exception("Fulfillment for session %s failed", job.session_id)
            job.status = FulfillmentStatus.FAILED
            job.last_error = f"{type(e).__name__}: {e}"
            self._touch(job)
            log_fulfillment_event(
                logger,
                "failed",
                session_id=job.session_id,
                vin=job.vin,
                attempts=job.attempts,
                error=job.last_error,
            )
        return job

    def _touch(self, job: FulfillmentJob) -> None:
        job.updated_at = dt.datetime.now(dt.UTC)
        self._jobs.save(job)

    async def reconcile(
        self,
        *,
        max_attempts: int = 3,
        stale_after_seconds: float = 600.0,
    ) -> ReconcileSummary:
        """Retry failed jobs and in-flight jobs that look abandoned.

        Args:
            max_attempts: Jobs with this many attempts are left alone.
            stale_after_seconds: Unfinished jobs younger than this may still be
                running in a webhook request and are skipped.
        """
        summary = ReconcileSummary()
        now = dt.datetime.now(dt.UTC)

        for job in self._jobs.list_retryable():
            age = (now - job.updated_at).total_seconds()
            if job.attempts >= max_attempts:
                summary.skipped.append(job.session_id)
                continue
            if job.status != FulfillmentStatus.FAILED and age < stale_after_seconds:
                summary.skipped.append(job.session_id)
                continue

            job = await self.run(job)
            if job.status == FulfillmentStatus.SUCCEEDED:
                summary.succeeded.append(job.session_id)
            else:
                summary.failed.append(job.session_id)

        logger.info(
            "Reconciliation finished: %d succeeded, %d failed, %d skipped",
            len(summary.succeeded),
            len(summary.failed),
            len(summary.skipped),
        )
        return summary
