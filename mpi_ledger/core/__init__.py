"""
Core module for application configuration, logging, errors and shared helpers.

This module provides:
- Settings: Application configuration via pydantic-settings
- Dependency injection: FastAPI Depends() functions for the ledger and dispatcher
- Exceptions: Domain-specific exception classes with HTTP status codes
- Datetime utilities: UTC-first datetime handling
"""
from core.config import settings, Settings

from core.dependencies import (
    get_ledger,
    get_dispatcher,
    reset_ledger,
)

from core.exceptions import (
    LedgerServiceError,
    ArgumentCountError,
    UnknownCommandError,
    InvalidArgumentError,
    NotFoundError,
    DecodeError,
    LedgerIOError,
    setup_exception_handlers,
)

from core.datetime_utils import (
    utc_now,
    to_utc,
    format_iso,
)

__all__ = [
    # Settings
    "settings",
    "Settings",
    # Dependency injection
    "get_ledger",
    "get_dispatcher",
    "reset_ledger",
    # Exceptions
    "LedgerServiceError",
    "ArgumentCountError",
    "UnknownCommandError",
    "InvalidArgumentError",
    "NotFoundError",
    "DecodeError",
    "LedgerIOError",
    "setup_exception_handlers",
    # Datetime utilities
    "utc_now",
    "to_utc",
    "format_iso",
]
