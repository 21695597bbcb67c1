"""Transactional email via the Resend REST API.

Sends purchased reports to customers (link or PDF attachment) and relays
contact-form messages to the support inbox.
"""

import base64
import logging
from html import escape
from typing import Any

import httpx

from vinreport.models.artifact import ReportArtifact
from vinreport.models.errors import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    """Resend client.

    Usage:
        email = EmailService(api_key="re_xxx", sender="Reports <reports@example.com>",
                             support_address="support@example.com")
        await email.send_report_email("buyer@example.com", "2014 Ford F-150", vin, artifact)
    """

    def __init__(
        self,
        api_key: str,
        sender: str,
        support_address: str,
        *,
        base_url: str = "https://api.resend.com",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._sender = sender
        self._support_address = support_address
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._transport = transport

    async def _send(self, message: dict[str, Any]) -> str:
        """POST /emails and return the Resend message id.

        Raises:
            EmailDeliveryError: On network failure or a non-2xx response.
        """
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/emails",
                    json=message,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except httpx.HTTPError as e:
            logger.error("Resend request failed: %s", e)
            raise EmailDeliveryError(f"Resend request failed: {e}") from e

        if not response.is_success:
            logger.error(
                "Resend rejected email to %s: %d %s",
                message.get("to"),
                response.status_code,
                response.text[:200],
            )
            raise EmailDeliveryError(
                f"Resend returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            message_id = response.json().get("id", "")
        except ValueError:
            message_id = ""
        logger.info("Email sent to %s (id=%s)", message.get("to"), message_id)
        return message_id

    async def send_report_email(
        self,
        to_address: str,
        vehicle: str,
        vin: str,
        artifact: ReportArtifact,
    ) -> str:
        """Deliver a report: as a link when hosted, otherwise as an attachment.

        Returns:
            The Resend message id.
        """
        label = vehicle or vin
        message: dict[str, Any] = {
            "from": self._sender,
            "to": [to_address],
            "subject": f"Your vehicle history report for {label}",
        }

        intro = (
            f"<p>Thank you for your purchase. Your report for "
            f"<strong>{escape(label)}</strong> (VIN {escape(vin)}) is ready.</p>"
        )
        if artifact.is_hosted:
            url = escape(artifact.url or "", quote=True)
            message["html"] = f'{intro}<p><a href="{url}">Download your report</a></p>'
        else:
            message["html"] = f"{intro}<p>Your report is attached to this email.</p>"
            message["attachments"] = [
                {
                    "filename": artifact.filename,
                    "content": base64.b64encode(artifact.pdf_bytes or b"").decode("ascii"),
                }
            ]

        return await self._send(message)

    async def send_contact_message(
        self,
        name: str,
        email: str,
        vin: str,
        message: str,
    ) -> str:
        """Relay a contact-form submission to the support inbox."""
        body = (
            f"<p><strong>Name:</strong> {escape(name)}</p>"
            f"<p><strong>Email:</strong> {escape(email)}</p>"
            f"<p><strong>VIN:</strong> {escape(vin or '-')}</p>"
            f"<p><strong>Message:</strong></p><p>{escape(message)}</p>"
        )
        return await self._send(
            {
                "from": self._sender,
                "to": [self._support_address],
                "reply_to": email,
                "subject": f"Contact form: {name}",
                "html": body,
            }
        )
