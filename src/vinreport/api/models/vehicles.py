"""API models for the VIN preview lookup."""

from typing import Any

from pydantic import BaseModel, Field


class VehicleInfoResponse(BaseModel):
    """Vehicle summary for a VIN, passed through from the provider."""

    success: bool = True
    vin: str = Field(..., examples=["1HGCM82633A004352"])
    vehicle: dict[str, Any] = Field(
        ...,
        description="Provider vehicle fields, unchanged",
        examples=[{"year": "2003", "make": "HONDA", "model": "Accord"}],
    )
