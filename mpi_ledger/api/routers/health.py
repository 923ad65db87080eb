"""
Liveness endpoint for container health checks.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from core.datetime_utils import format_iso, utc_now
from core.dependencies import get_ledger
from repositories import InMemoryLedger

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Response model for /health endpoint."""
    status: str
    version: str
    timestamp: str  # ISO 8601 UTC
    committed_transactions: int


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Check if the application is running. Performs no ledger I/O."
)
async def health_check(ledger: InMemoryLedger = Depends(get_ledger)) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=VERSION,
        timestamp=format_iso(utc_now()),
        committed_transactions=ledger.committed_tx_count,
    )
