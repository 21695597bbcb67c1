"""Persistent stores for materialized report PDFs, keyed by VIN.

Objects are named "{vin}-{timestamp}.pdf" so repeated purchases of the same
VIN never overwrite each other; the newest object is the cached report.
"""

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from storage3.utils import StorageException

from vinreport.models.artifact import ReportArtifact
from vinreport.models.errors import UploadFailedError
from vinreport.models.vehicle import is_valid_vin

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"

# search is a substring match, so a few extra rows cover names that merely contain the VIN
SUPABASE_LIST_LIMIT = 10


def check_vin(vin: str) -> None:
    """Refuse VINs that could escape the store directory or prefix."""
    if not is_valid_vin(vin):
        raise ValueError(f"Malformed VIN {vin!r}")


def object_name(vin: str, timestamp_ms: int | None = None) -> str:
    """Collision-free object name for a VIN's report.

    Raises:
        ValueError: If the VIN is malformed.
    """
    check_vin(vin)
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{vin}-{timestamp_ms}.pdf"


def _newest(names: list[str], vin: str) -> str | None:
    candidates = [n for n in names if n.startswith(f"{vin}-") and n.endswith(".pdf")]
    return max(candidates, default=None)


class ArtifactStore(ABC):
    """Where report PDFs are kept for reuse."""

    name: str = "store"

    @abstractmethod
    def find_latest(self, vin: str) -> ReportArtifact | None:
        """Return the newest stored report for a VIN, or None."""

    @abstractmethod
    def save(self, vin: str, pdf_bytes: bytes) -> ReportArtifact:
        """Persist a report and return the deliverable artifact.

        Raises:
            UploadFailedError: If the write fails.
        """


class FilesystemArtifactStore(ArtifactStore):
    """Reports on local disk.

    With a public base URL the artifact is a link (the directory is served
    elsewhere); without one the PDF bytes are read back for attachment.
    """

    name = "filesystem"

    def __init__(self, directory: str | Path, public_base_url: str = "") -> None:
        self._dir = Path(directory)
        self._public_base_url = public_base_url.rstrip("/")

    def _artifact(self, vin: str, path: Path) -> ReportArtifact:
        if self._public_base_url:
            return ReportArtifact(vin=vin, url=f"{self._public_base_url}/{path.name}", filename=path.name)
        return ReportArtifact(vin=vin, pdf_bytes=path.read_bytes(), filename=path.name)

    def find_latest(self, vin: str) -> ReportArtifact | None:
        check_vin(vin)
        if not self._dir.is_dir():
            return None
        newest = _newest([p.name for p in self._dir.glob(f"{vin}-*.pdf")], vin)
        if newest is None:
            return None
        return self._artifact(vin, self._dir / newest)

    def save(self, vin: str, pdf_bytes: bytes) -> ReportArtifact:
        path = self._dir / object_name(vin)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(pdf_bytes)
        except OSError as e:
            raise UploadFailedError(vin, self.name, str(e)) from e
        logger.info("Stored report for %s at %s", vin, path)
        return self._artifact(vin, path)


class S3ArtifactStore(ArtifactStore):
    """Reports in an S3 bucket, delivered as presigned GET links."""

    name = "s3"

    def __init__(
        self,
        s3_client: Any,
        bucket: str,
        *,
        prefix: str = "reports/",
        url_expiry_seconds: int = 7 * 24 * 3600,
    ) -> None:
        self._s3 = s3_client
        self._bucket = bucket
        self._prefix = prefix
        self._expiry = url_expiry_seconds

    def _presigned(self, vin: str, key: str) -> ReportArtifact:
        url = self._s3.generate_presigned_url(
            "get_object",
            Params={"Bucket": self._bucket, "Key": key},
            ExpiresIn=self._expiry,
        )
        return ReportArtifact(vin=vin, url=url, filename=key.rsplit("/", 1)[-1])

    def find_latest(self, vin: str) -> ReportArtifact | None:
        check_vin(vin)
        paginator = self._s3.get_paginator("list_objects_v2")
        names: list[str] = []
        try:
            for page in paginator.paginate(Bucket=self._bucket, Prefix=f"{self._prefix}{vin}-"):
                names.extend(obj["Key"][len(self._prefix):] for obj in page.get("Contents", []))
        except (BotoCoreError, ClientError) as e:
            logger.warning("S3 cache lookup for %s failed, treating as miss: %s", vin, e)
            return None

        newest = _newest(names, vin)
        if newest is None:
            return None
        return self._presigned(vin, f"{self._prefix}{newest}")

    def save(self, vin: str, pdf_bytes: bytes) -> ReportArtifact:
        key = f"{self._prefix}{object_name(vin)}"
        try:
            self._s3.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=pdf_bytes,
                ContentType=PDF_CONTENT_TYPE,
            )
        except (BotoCoreError, ClientError) as e:
            raise UploadFailedError(vin, self.name, str(e)) from e
        logger.info("Uploaded report for %s to s3://%s/%s", vin, self._bucket, key)
        return self._presigned(vin, key)


class SupabaseArtifactStore(ArtifactStore):
    """Reports in a Supabase Storage bucket, delivered as public links."""

    name = "supabase"

    def __init__(self, client: Any, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    def _storage(self) -> Any:
        return self._client.storage.from_(self._bucket)

    def find_latest(self, vin: str) -> ReportArtifact | None:
        check_vin(vin)
        try:
            entries = self._storage().list(
                "",
                {
                    "search": f"{vin}-",
                    "limit": SUPABASE_LIST_LIMIT,
                    "sortBy": {"column": "name", "order": "desc"},
                },
            )
        except StorageException as e:
            logger.warning("Supabase cache lookup for %s failed, treating as miss: %s", vin, e)
            return None

        newest = _newest([entry["name"] for entry in entries], vin)
        if newest is None:
            return None
        return ReportArtifact(vin=vin, url=self._storage().get_public_url(newest), filename=newest)

    def save(self, vin: str, pdf_bytes: bytes) -> ReportArtifact:
        name = object_name(vin)
        try:
            self._storage().upload(
                name,
                pdf_bytes,
                {"content-type": PDF_CONTENT_TYPE, "upsert": "false"},
            )
        except StorageException as e:
            raise UploadFailedError(vin, self.name, str(e)) from e
        logger.info("Uploaded report for %s to supabase bucket %s as %s", vin, self._bucket, name)
        return ReportArtifact(vin=vin, url=self._storage().get_public_url(name), filename=name)
