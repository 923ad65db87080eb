"""
Pydantic schemas for the invocation gateway.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class InitRequest(BaseModel):
    """Schema for the bootstrap-only init call.

    The ledger stores `args[1]` verbatim under `args[0]`; any other
    argument count is rejected by the dispatcher.
    """
    args: List[str] = Field(
        default_factory=list,
        description="Bootstrap key and value",
        examples=[["bootstrap", "1"]],
    )
    timestamp: Optional[datetime] = Field(
        default=None,
        description="Proposal timestamp (ISO 8601). Defaults to the gateway's receive time.",
    )


class InvokeRequest(BaseModel):
    """Schema for a chaincode invocation."""
    function: str = Field(
        ...,
        description="Command name, e.g. init_patient or get_AllPatients",
        examples=["init_patient"],
    )
    args: List[str] = Field(
        default_factory=list,
        description="Positional string arguments for the command",
        examples=[["MPI001", "Ada", "Lovelace", "[]"]],
    )
    timestamp: Optional[datetime] = Field(
        default=None,
        description="Proposal timestamp (ISO 8601). Becomes CreatedDate for init_patient.",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "function": "init_patient",
                "args": ["MPI001", "Ada", "Lovelace", "[]"],
                "timestamp": "2025-01-01T10:00:00Z",
            }
        }
    )


class ErrorResponse(BaseModel):
    """Schema for a failed invocation."""
    detail: str = Field(..., description="Human-readable failure message")
