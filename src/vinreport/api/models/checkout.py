"""API models for checkout session creation."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from vinreport.models.checkout import CheckoutIntent
from vinreport.models.vehicle import VIN_PATTERN


class CheckoutRequest(BaseModel):
    """Request to start a report purchase.

    The fields are copied verbatim into the Stripe session metadata and come
    back on the payment webhook.
    """

    model_config = ConfigDict(
        strict=True,
        json_schema_extra={
            "examples": [
                {
                    "vin": "1FTFW1ET1EFC12345",
                    "email": "buyer@example.com",
                    "vehicle": "2014 Ford F-150",
                }
            ]
        },
    )

    vin: str = Field(..., pattern=VIN_PATTERN, examples=["1FTFW1ET1EFC12345"])
    email: EmailStr = Field(..., description="Where the report is delivered")
    vehicle: str = Field(default="", max_length=200, examples=["2014 Ford F-150"])

    def to_intent(self) -> CheckoutIntent:
        return CheckoutIntent(vin=self.vin, email=str(self.email), vehicle=self.vehicle)


class CheckoutResponse(BaseModel):
    url: str = Field(
        ...,
        description="Stripe Checkout URL for payment redirect",
        examples=["https://checkout.stripe.com/c/pay/cs_test_abc123"],
    )
