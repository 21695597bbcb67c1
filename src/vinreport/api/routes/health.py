"""Liveness endpoint."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])

LIVENESS_MESSAGE = "VIN report service is running"


@router.get("/", response_class=PlainTextResponse, summary="Liveness check")
async def liveness() -> str:
    return LIVENESS_MESSAGE
