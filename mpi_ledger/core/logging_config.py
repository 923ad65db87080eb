"""
Structured JSON logging configuration for the MPI Ledger Service.

This module provides:
- Single-line JSON log output for log shippers
- Request ID and transaction ID propagation via contextvars
- Consistent log structure across the gateway and the chaincode handlers

Log Structure (JSON):
{
    "timestamp": "2024-01-15T10:30:00.000Z",
    "level": "INFO",
    "logger": "services.dispatcher",
    "message": "Invocation completed",
    "request_id": "abc-123",
    "tx_id": "tx-000042",
    "extra": { ... }
}

Usage:
    from core.logging_config import setup_logging, transaction_scope

    # At app startup
    setup_logging()

    # Around a single invocation
    with transaction_scope(ctx.get_tx_id()):
        logger.info("Writing patient", extra={"mpi": mpi})
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

# =============================================================================
# CONTEXT VARIABLES
# =============================================================================
# request_id is set by the HTTP middleware, tx_id by the dispatcher.

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
tx_id_var: ContextVar[Optional[str]] = ContextVar("tx_id", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context (coroutine-safe)."""
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    """Set the request ID in context for the current request/coroutine."""
    request_id_var.set(request_id)


def clear_request_id() -> None:
    """Clear the request ID (call at end of request)."""
    request_id_var.set(None)


def get_tx_id() -> Optional[str]:
    """Get the ledger transaction ID of the invocation being executed."""
    return tx_id_var.get()


@contextmanager
def transaction_scope(tx_id: str) -> Iterator[None]:
    """Bind a transaction ID to every log record emitted inside the block."""
    token = tx_id_var.set(tx_id)
    try:
        yield
    finally:
        tx_id_var.reset(token)


# =============================================================================
# JSON FORMATTER
# =============================================================================

_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message"
}


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter.

    Produces single-line JSON logs with consistent structure.
    All timestamps are UTC.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as single-line JSON."""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_entry["request_id"] = request_id

        tx_id = get_tx_id()
        if tx_id:
            log_entry["tx_id"] = tx_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Fields passed via logger.info("msg", extra={...})
        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }

        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry, default=str, ensure_ascii=False)


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    include_uvicorn: bool = True
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, use JSON format; if False, use human-readable format
        include_uvicorn: If True, also route uvicorn loggers through the root handler

    Environment Variables:
        LOG_LEVEL: Override the log level
        LOG_FORMAT: Override format ("json" or "text")
    """
    level = os.environ.get("LOG_LEVEL", level).upper()
    json_format = os.environ.get("LOG_FORMAT", "json" if json_format else "text").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for logger_name in ["core", "api", "services", "repositories", "models"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.handlers = []
        logger.propagate = True

    if include_uvicorn:
        for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
            logger = logging.getLogger(logger_name)
            logger.handlers = []
            logger.propagate = True

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"level": level, "format": "json" if json_format else "text"}
    )
