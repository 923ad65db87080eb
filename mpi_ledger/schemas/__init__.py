"""
Pydantic schemas for API request/response validation.
"""
from schemas.invocation import InitRequest, InvokeRequest, ErrorResponse

__all__ = [
    "InitRequest",
    "InvokeRequest",
    "ErrorResponse",
]
