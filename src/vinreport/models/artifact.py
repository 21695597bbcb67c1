"""Deliverable report artifact."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ReportArtifact(BaseModel):
    """A materialized vehicle-history report.

    Either raw PDF bytes (sent as an email attachment) or a hosted URL
    (sent as a link).
    """

    model_config = ConfigDict(strict=True)

    vin: str
    pdf_bytes: bytes | None = Field(default=None, repr=False)
    url: str | None = None
    filename: str = ""
    content_type: str = "application/pdf"

    @model_validator(mode="after")
    def has_content(self) -> "ReportArtifact":
        """Require bytes or a URL."""
        if not self.pdf_bytes and not self.url:
            raise ValueError("ReportArtifact needs pdf_bytes or url")
        if not self.filename:
            self.filename = f"{self.vin}.pdf"
        return self

    @property
    def is_hosted(self) -> bool:
        """True when the artifact should be delivered as a link."""
        return self.url is not None
