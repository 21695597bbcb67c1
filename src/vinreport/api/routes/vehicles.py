"""VIN preview endpoint.

Proxies the provider's summary lookup. Provider fields are returned unchanged
so the frontend can show what the buyer is about to pay for.
"""

from fastapi import APIRouter, Depends, Path

from vinreport.api.dependencies import get_provider_client
from vinreport.api.models.vehicles import VehicleInfoResponse
from vinreport.models.errors import ErrorCode, ErrorResponse, ReportServiceError, UpstreamError
from vinreport.models.vehicle import VIN_PATTERN
from vinreport.services.provider_client import CarsimulcastClient
from vinreport.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["vehicles"])


@router.get(
    "/vehicle-info/{vin}",
    summary="Look up vehicle details for a VIN",
    response_model=VehicleInfoResponse,
    responses={
        404: {"description": "No vehicle data for this VIN", "model": ErrorResponse},
        422: {"description": "Malformed VIN"},
        500: {"description": "Vehicle data provider failed", "model": ErrorResponse},
    },
)
async def get_vehicle_info(
    vin: str = Path(..., pattern=VIN_PATTERN, examples=["1HGCM82633A004352"]),
    provider: CarsimulcastClient = Depends(get_provider_client),
) -> VehicleInfoResponse:
    try:
        record = await provider.lookup(vin)
    except UpstreamError as e:
        logger.error("Vehicle lookup for %s failed (status=%s): %s", vin, e.status_code, e)
        raise ReportServiceError(ErrorCode.VEHICLE_LOOKUP_FAILED) from e

    if record is None or not record.has_vehicle_data:
        logger.info("No vehicle data for %s", vin)
        raise ReportServiceError(ErrorCode.VEHICLE_NOT_FOUND, details={"vin": vin})

    return VehicleInfoResponse(vin=vin, vehicle=record.vehicle)
