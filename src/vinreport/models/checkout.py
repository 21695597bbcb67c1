"""Checkout models: the purchase intent and the created Stripe session."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from vinreport.models.vehicle import VIN_PATTERN

METADATA_KEYS = ("vin", "email", "vehicle")


class CheckoutIntent(BaseModel):
    """What the customer is buying and where the report goes.

    Travels to Stripe as session metadata and comes back verbatim on the
    checkout.session.completed webhook.
    """

    model_config = ConfigDict(strict=True)

    vin: str = Field(..., pattern=VIN_PATTERN, examples=["1FTFW1ET1EFC12345"])
    email: str = Field(..., min_length=3, examples=["buyer@example.com"])
    vehicle: str = Field(default="", examples=["2014 Ford F-150"])

    def to_metadata(self) -> dict[str, str]:
        """Metadata attached to the Stripe session."""
        return {"vin": self.vin, "email": self.email, "vehicle": self.vehicle}

    @classmethod
    def from_metadata(cls, metadata: dict[str, str]) -> "CheckoutIntent":
        """Rebuild the intent from session metadata.

        Raises:
            ValueError: If vin or email is missing, or the vin is malformed.
        """
        missing = [key for key in ("vin", "email") if not metadata.get(key)]
        if missing:
            raise ValueError(f"Missing {', '.join(missing)} in metadata")
        return cls(
            vin=metadata["vin"],
            email=metadata["email"],
            vehicle=metadata.get("vehicle") or "",
        )


class CheckoutSessionResult(BaseModel):
    """A created Stripe Checkout session."""

    model_config = ConfigDict(strict=True)

    session_id: str = Field(..., examples=["cs_test_abc123def456"])
    url: str = Field(
        ...,
        description="Stripe Checkout URL for payment redirect",
        examples=["https://checkout.stripe.com/c/pay/cs_test_abc123"],
    )
    expires_at: datetime | None = None
