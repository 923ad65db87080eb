"""
Shared exception classes and error handling utilities for the MPI Ledger Service.

This module provides:
- Custom exception hierarchy for ledger and patient record errors
- Consistent error response formatting
- Exception handlers for FastAPI integration

Usage:
    from core.exceptions import NotFoundError, ArgumentCountError

    # In service layer - raise domain exceptions
    raise NotFoundError(key="MPI001")

    # In FastAPI - register handlers via setup_exception_handlers(app)
    # In the chaincode entry points - ChaincodeDispatcher.invoke() turns them
    # into error responses carrying `detail` as the message
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASS
# =============================================================================

class LedgerServiceError(Exception):
    """
    Base exception for all MPI Ledger Service domain errors.

    All custom exceptions should inherit from this class.
    Provides consistent error structure with status code and detail message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            status_code: HTTP status code. Uses class default if not provided.
            **kwargs: Additional context to include in error response.
        """
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = kwargs
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {"detail": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# INVOCATION EXCEPTIONS
# =============================================================================

class ArgumentCountError(LedgerServiceError):
    """Raised when a command receives the wrong number of positional arguments."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Incorrect number of arguments"

    def __init__(
        self,
        command: Optional[str] = None,
        expected: Optional[int] = None,
        received: Optional[int] = None,
        **kwargs: Any
    ):
        if command is not None and expected is not None:
            detail = (
                f"Incorrect number of arguments for '{command}': "
                f"expected {expected}, got {received}"
            )
        else:
            detail = self.detail
        super().__init__(
            detail=detail,
            command=command,
            expected=expected,
            received=received,
            **kwargs
        )


class UnknownCommandError(LedgerServiceError):
    """Raised when the invoked function name is not part of the command set."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Unknown command"

    def __init__(self, command: Optional[str] = None, **kwargs: Any):
        detail = f"Unknown command '{command}'" if command is not None else self.detail
        super().__init__(detail=detail, command=command, **kwargs)


class InvalidArgumentError(LedgerServiceError):
    """Raised when an argument has the right position but an unusable value."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid argument"


# =============================================================================
# RECORD EXCEPTIONS
# =============================================================================

class NotFoundError(LedgerServiceError):
    """Raised when a read targets a key with no stored value."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Record not found"

    def __init__(self, key: Optional[str] = None, **kwargs: Any):
        detail = f"Asset not found: {key}" if key is not None else self.detail
        super().__init__(detail=detail, key=key, **kwargs)


class DecodeError(LedgerServiceError):
    """Raised when stored bytes cannot be decoded into a patient record."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Stored record could not be decoded"


# =============================================================================
# LEDGER EXCEPTIONS
# =============================================================================

class LedgerIOError(LedgerServiceError):
    """Raised when an underlying ledger put/get/iterator operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Ledger operation failed"

    def __init__(
        self,
        operation: Optional[str] = None,
        key: Optional[str] = None,
        **kwargs: Any
    ):
        if operation and key is not None:
            detail = f"Ledger error during {operation} for key '{key}'"
        elif operation:
            detail = f"Ledger error during {operation}"
        else:
            detail = self.detail
        super().__init__(detail=detail, operation=operation, key=key, **kwargs)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def ledger_service_exception_handler(
    request: Request,
    exc: LedgerServiceError
) -> JSONResponse:
    """
    Handle LedgerServiceError exceptions and return consistent JSON responses.

    This handler logs the error and returns a standardized JSON error response.
    """
    logger.warning(
        f"LedgerServiceError: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Call this function during app initialization to enable consistent
    error handling across all endpoints.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(LedgerServiceError, ledger_service_exception_handler)
