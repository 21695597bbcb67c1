"""Stripe webhook acknowledgement model."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import ProcessingResult


class WebhookResult(BaseModel):
    """Body returned to Stripe for every verified delivery."""

    model_config = ConfigDict(strict=True)

    received: bool = True
    event_id: str | None = Field(default=None, examples=["evt_1ABC123DEF456"])
    event_type: str | None = Field(default=None, examples=["checkout.session.completed"])
    processing_result: ProcessingResult
    message: str | None = None
