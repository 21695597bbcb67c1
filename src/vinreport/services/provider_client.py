"""HTTP client for the Carsimulcast vehicle-record API.

Endpoints used:
- GET  {base}/checkrecords/{vin}               summary record (make/model/year, report link)
- GET  {base}/getrecord/{report_type}/{vin}    encoded (base64) report payload
- POST {base}/pdf/                             base64 payload -> PDF bytes
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from vinreport.models.errors import UpstreamError
from vinreport.models.vehicle import VinRecord

logger = logging.getLogger(__name__)

SERVICE_NAME = "carsimulcast"
NO_RECORD_SENTINEL = "No record found"


class CarsimulcastClient:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        api_secret: str,
        *,
        report_type: str = "carfax",
        timeout_seconds: float = 10.0,
        pdf_timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.report_type = report_type
        self.timeout_seconds = timeout_seconds
        self.pdf_timeout_seconds = pdf_timeout_seconds
        self._headers = {"API-KEY": api_key, "API-SECRET": api_secret}
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers,
            timeout=timeout,
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        timeout: float,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            async with self._client(timeout) as client:
                return await client.request(method, path, data=data)
        except httpx.HTTPError as e:
            logger.error("Carsimulcast %s %s failed: %s", method, path, e)
            raise UpstreamError(
                f"Carsimulcast request failed: {e}", service=SERVICE_NAME
            ) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, what: str) -> None:
        if response.is_success:
            return
        logger.error(
            "Carsimulcast %s returned %d: %s",
            what,
            response.status_code,
            response.text[:200],
        )
        raise UpstreamError(
            f"Carsimulcast {what} returned {response.status_code}",
            service=SERVICE_NAME,
            status_code=response.status_code,
        )

    async def fetch_summary(self, vin: str) -> dict[str, Any] | None:
        """Fetch the summary record for a VIN.

        Returns:
            The provider's JSON object, or None if the provider has no record.

        Raises:
            UpstreamError: On network failure or an unexpected non-2xx status.
        """
        response = await self._request(
            "GET", f"/checkrecords/{quote(vin, safe='')}", timeout=self.timeout_seconds
        )
        if response.status_code == 404:
            return None
        self._raise_for_status(response, "summary lookup")

        try:
            data = response.json()
        except ValueError:
            # Plain-text answers (e.g. the no-record sentinel) carry no data
            logger.info("Non-JSON summary for %s: %s", vin, response.text[:100])
            return None

        if not isinstance(data, dict) or not data:
            return None
        return data

    async def lookup(self, vin: str) -> VinRecord | None:
        """Fetch and parse the summary record into a VinRecord."""
        summary = await self.fetch_summary(vin)
        if summary is None:
            return None
        return VinRecord.from_summary(vin, summary)

    async def fetch_report_payload(self, vin: str) -> str:
        """Fetch the encoded report payload for a VIN.

        Returns:
            The payload text as sent by the provider (possibly the no-record
            sentinel; callers validate it).
        """
        response = await self._request(
            "GET",
            f"/getrecord/{self.report_type}/{quote(vin, safe='')}",
            timeout=self.timeout_seconds,
        )
        self._raise_for_status(response, "report fetch")
        return response.text.strip()

    async def convert_to_pdf(self, payload: str) -> bytes:
        """Submit an encoded report to the provider's PDF conversion endpoint."""
        response = await self._request(
            "POST",
            "/pdf/",
            timeout=self.pdf_timeout_seconds,
            data={"base64_content": payload},
        )
        self._raise_for_status(response, "PDF conversion")
        if not response.content:
            raise UpstreamError(
                "Carsimulcast PDF conversion returned an empty body",
                service=SERVICE_NAME,
                status_code=response.status_code,
            )
        return response.content
