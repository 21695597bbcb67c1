"""Turning a paid VIN into a deliverable report artifact.

Implementations:
- Base64PdfArtifactProvider: fetch the encoded report, convert it to PDF.
- DirectLinkArtifactProvider: wait for the provider's hosted link (or
  payload) via the poller.
- CachingArtifactProvider: wraps either one with an ArtifactStore so a VIN
  already materialized is reused instead of re-fetched and re-converted.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import Counter

from vinreport.models.artifact import ReportArtifact
from vinreport.models.errors import ReportNotReadyError, ReportUnavailableError
from vinreport.services.artifact_store import ArtifactStore
from vinreport.services.provider_client import NO_RECORD_SENTINEL, CarsimulcastClient
from vinreport.services.report_poller import ReportPoller

logger = logging.getLogger(__name__)


class ArtifactProvider(ABC):
    @abstractmethod
    async def materialize(self, vin: str, vehicle: str) -> ReportArtifact:
        """Produce the deliverable report for a VIN.

        Raises:
            ReportNotReadyError: The provider payload is empty or a placeholder.
            ReportUnavailableError: No report appeared within the poll budget.
            UploadFailedError: Persisting the report failed.
            UpstreamError: A provider call failed.
        """


class Base64PdfArtifactProvider(ArtifactProvider):
    def __init__(self, provider: CarsimulcastClient, *, min_payload_length: int = 100) -> None:
        self._provider = provider
        self._min_payload_length = min_payload_length

    def validate_payload(self, vin: str, payload: str) -> None:
        """Reject sentinel and truncated payloads before conversion."""
        if not payload or NO_RECORD_SENTINEL.lower() in payload[:200].lower():
            raise ReportNotReadyError(vin, "provider returned no record")
        if len(payload) < self._min_payload_length:
            raise ReportNotReadyError(
                vin, f"payload too short ({len(payload)} < {self._min_payload_length})"
            )

    async def convert(self, vin: str, payload: str) -> ReportArtifact:
        self.validate_payload(vin, payload)
        pdf_bytes = await self._provider.convert_to_pdf(payload)
        logger.info("Converted report for %s (%d bytes)", vin, len(pdf_bytes))
        return ReportArtifact(vin=vin, pdf_bytes=pdf_bytes)

    async def materialize(self, vin: str, vehicle: str) -> ReportArtifact:
        payload = await self._provider.fetch_report_payload(vin)
        return await self.convert(vin, payload)


class DirectLinkArtifactProvider(ArtifactProvider):
    """Uses whatever reference the provider publishes for the VIN.

    A link is passed through untouched; an encoded payload goes through the
    PDF conversion of the base64 provider.
    """

    def __init__(self, poller: ReportPoller, converter: Base64PdfArtifactProvider) -> None:
        self._poller = poller
        self._converter = converter

    async def materialize(self, vin: str, vehicle: str) -> ReportArtifact:
        reference = await self._poller.await_report_reference(vin)
        if reference is None:
            raise ReportUnavailableError(vin, self._poller.max_attempts)
        if reference.url:
            return ReportArtifact(vin=vin, url=reference.url)
        return await self._converter.convert(vin, reference.payload or "")


class CachingArtifactProvider(ArtifactProvider):
    """Reuses the newest stored report for a VIN; stores fresh ones.

    Materialization for a single VIN is serialized, and the cache is
    re-checked once the lock is held, so concurrent deliveries for the same
    VIN convert at most once.
    """

    def __init__(self, inner: ArtifactProvider, store: ArtifactStore) -> None:
        self._inner = inner
        self._store = store
        self._locks: dict[str, asyncio.Lock] = {}
        # Holders plus waiters per VIN; the lock is dropped when this reaches zero
        self._lock_users: Counter[str] = Counter()

    async def materialize(self, vin: str, vehicle: str) -> ReportArtifact:
        cached = self._store.find_latest(vin)
        if cached is not None:
            logger.info("Reusing cached report for %s from %s", vin, self._store.name)
            return cached

        lock = self._locks.setdefault(vin, asyncio.Lock())
        self._lock_users[vin] += 1
        try:
            async with lock:
                return await self._materialize_once(vin, vehicle)
        finally:
            self._lock_users[vin] -= 1
            if not self._lock_users[vin]:
                del self._lock_users[vin]
                del self._locks[vin]

    async def _materialize_once(self, vin: str, vehicle: str) -> ReportArtifact:
        cached = self._store.find_latest(vin)
        if cached is not None:
            logger.info("Reusing report for %s stored by a concurrent delivery", vin)
            return cached

        artifact = await self._inner.materialize(vin, vehicle)
        if artifact.pdf_bytes is None:
            # Hosted by the provider already; nothing to persist
            return artifact

        # UploadFailedError propagates so no email goes out with a broken link
        return self._store.save(vin, artifact.pdf_bytes)
