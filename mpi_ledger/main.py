"""
FastAPI application entry point for the MPI Ledger Service.

The app is a thin invocation gateway: each POST becomes one transaction on
the in-memory ledger, executed by the chaincode dispatcher.

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware                                                  │
    │    └── LoggingMiddleware  - Request logging & request id    │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py     - /health                              │
    │    └── invoke.py     - /api/v1/init, /api/v1/invoke         │
    ├─────────────────────────────────────────────────────────────┤
    │  ChaincodeDispatcher (services/)  ← Injected via Depends()  │
    │    ├── PatientService     - init_patient, get_patient       │
    │    ├── RangeScanner       - get_AllPatients                 │
    │    └── HistoryReader      - get_TxHisBypatId                │
    ├─────────────────────────────────────────────────────────────┤
    │  InMemoryLedger (repositories/)   ← One context per request │
    └─────────────────────────────────────────────────────────────┘
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
import uvicorn

from core.config import settings, API_HOST, API_PORT, API_RELOAD
from core.dependencies import get_ledger
from core.exceptions import setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
from api.routers import health_router, invoke_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: configure logging and create the ledger.
    Shutdown: log only; the in-memory ledger is discarded with the process.
    """
    setup_logging(level=settings.log_level, json_format=settings.log_format == "json")

    logger = logging.getLogger(__name__)
    logger.info("Starting MPI Ledger Service...")

    get_ledger()
    logger.info(
        "Ledger ready",
        extra={
            "range_start": settings.range_start_key,
            "range_end": settings.range_end_key,
            "decode_failure_policy": settings.decode_failure_policy,
        }
    )

    yield

    logger.info("MPI Ledger Service shutting down...")


app = FastAPI(
    title="MPI Ledger Service",
    description="Record lifecycle and query gateway for patient identity records on a versioned key-value ledger.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

setup_exception_handlers(app)

app.add_middleware(LoggingMiddleware)

app.include_router(health_router)
app.include_router(invoke_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )
