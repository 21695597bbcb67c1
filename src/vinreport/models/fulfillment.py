"""Durable fulfillment job record for paid report orders."""

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .checkout import CheckoutIntent
from .enums import FulfillmentStatus


def _now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class FulfillmentJob(BaseModel):
    """One paid order: payment received, report delivery tracked.

    Keyed by the Stripe checkout session id, so redelivered webhook events
    map onto the same job.
    """

    model_config = ConfigDict(strict=True)

    session_id: str = Field(..., description="Stripe checkout session ID (cs_xxx)")
    event_id: str = Field(..., description="Stripe event ID that created the job")
    vin: str
    email: str
    vehicle: str = ""
    status: FulfillmentStatus = FulfillmentStatus.PENDING
    attempts: int = Field(default=0, ge=0)
    artifact_url: str | None = None
    last_error: str | None = None
    created_at: dt.datetime = Field(default_factory=_now)
    updated_at: dt.datetime = Field(default_factory=_now)

    @property
    def intent(self) -> CheckoutIntent:
        return CheckoutIntent(vin=self.vin, email=self.email, vehicle=self.vehicle)

    @property
    def is_retryable(self) -> bool:
        """Anything not yet succeeded can be picked up by reconciliation."""
        return self.status != FulfillmentStatus.SUCCEEDED

    def to_item(self) -> dict[str, Any]:
        """Serialize for DynamoDB (ISO timestamps, no None values)."""
        item: dict[str, Any] = {
            "session_id": self.session_id,
            "event_id": self.event_id,
            "vin": self.vin,
            "email": self.email,
            "vehicle": self.vehicle,
            "status": self.status.value,
            "attempts": self.attempts,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if self.artifact_url:
            item["artifact_url"] = self.artifact_url
        if self.last_error:
            item["last_error"] = self.last_error
        return item

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "FulfillmentJob":
        """Deserialize a DynamoDB item (numbers arrive as Decimal)."""
        return cls(
            session_id=item["session_id"],
            event_id=item["event_id"],
            vin=item["vin"],
            email=item["email"],
            vehicle=item.get("vehicle", ""),
            status=FulfillmentStatus(item["status"]),
            attempts=int(item.get("attempts", 0)),
            artifact_url=item.get("artifact_url"),
            last_error=item.get("last_error"),
            created_at=dt.datetime.fromisoformat(item["created_at"]),
            updated_at=dt.datetime.fromisoformat(item["updated_at"]),
        )
