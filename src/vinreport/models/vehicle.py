"""Vehicle lookup models built from provider summary records."""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Summary fields that point at a generated report rather than describe the vehicle
REPORT_URL_KEYS = ("report_url", "pdf_url", "link")
REPORT_PAYLOAD_KEYS = ("report", "base64")

# 11 to 17 characters; I, O and Q never appear in a VIN
VIN_PATTERN = r"^[A-HJ-NPR-Za-hj-npr-z0-9]{11,17}$"


def is_valid_vin(vin: str) -> bool:
    return re.fullmatch(VIN_PATTERN, vin) is not None


class ReportReference(BaseModel):
    """Pointer to a generated report: a hosted link or an encoded payload."""

    model_config = ConfigDict(strict=True)

    url: str | None = Field(default=None, description="Hosted report URL")
    payload: str | None = Field(
        default=None, description="Opaque encoded report payload (base64)"
    )

    @model_validator(mode="after")
    def exactly_one_source(self) -> "ReportReference":
        """Require exactly one of url / payload."""
        if bool(self.url) == bool(self.payload):
            raise ValueError("ReportReference needs exactly one of url or payload")
        return self

    @property
    def is_link(self) -> bool:
        return self.url is not None


class VinRecord(BaseModel):
    """Provider summary for a VIN, split into vehicle fields and report reference."""

    model_config = ConfigDict(strict=True)

    vin: str = Field(..., description="Vehicle Identification Number", examples=["1HGCM82633A004352"])
    vehicle: dict[str, Any] = Field(
        default_factory=dict,
        description="Provider vehicle fields, passed through unchanged",
        examples=[{"make": "Honda", "model": "Accord", "year": "2003"}],
    )
    report_reference: ReportReference | None = None

    @property
    def has_vehicle_data(self) -> bool:
        """True if the provider returned at least one non-empty vehicle field."""
        return any(value not in (None, "", [], {}) for value in self.vehicle.values())

    @classmethod
    def from_summary(cls, vin: str, summary: dict[str, Any]) -> "VinRecord":
        """Build a record from a provider summary payload.

        Report reference keys are lifted out; everything else is kept as-is.
        """
        vehicle: dict[str, Any] = {}
        url: str | None = None
        payload: str | None = None

        for key, value in summary.items():
            if key in REPORT_URL_KEYS:
                url = url or (value if isinstance(value, str) and value else None)
            elif key in REPORT_PAYLOAD_KEYS:
                payload = payload or (value if isinstance(value, str) and value else None)
            else:
                vehicle[key] = value

        reference = None
        if url:
            reference = ReportReference(url=url)
        elif payload:
            reference = ReportReference(payload=payload)

        return cls(vin=vin, vehicle=vehicle, report_reference=reference)
