"""
Invocation router - the gateway in front of the chaincode dispatcher.

Each request becomes one ledger transaction:
    HTTP Request → Router (this file) → ledger.begin() → ChaincodeDispatcher → ledger.commit()

The transaction is committed only when the dispatcher returns a payload.
Domain errors propagate to the handlers registered by
setup_exception_handlers(), so a failed invocation applies no writes.
"""
import logging

from fastapi import APIRouter, Depends, Response

from core.dependencies import get_dispatcher, get_ledger
from core.logging_config import transaction_scope
from repositories import InMemoryLedger
from schemas import ErrorResponse, InitRequest, InvokeRequest
from services import ChaincodeDispatcher, Command

logger = logging.getLogger(__name__)

TX_ID_HEADER = "X-Transaction-ID"

router = APIRouter(
    prefix="/api/v1",
    tags=["Chaincode"],
)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Unknown command or bad arguments"},
    404: {"model": ErrorResponse, "description": "No record stored under the key"},
    500: {"model": ErrorResponse, "description": "Ledger I/O or decode failure"},
}


@router.post(
    "/init",
    summary="Bootstrap the ledger",
    description="Store a bootstrap value verbatim under a bootstrap key. Expects exactly two arguments.",
    responses=_ERROR_RESPONSES,
)
async def init_ledger(
    request: InitRequest,
    ledger: InMemoryLedger = Depends(get_ledger),
    dispatcher: ChaincodeDispatcher = Depends(get_dispatcher),
) -> Response:
    ctx = ledger.begin(request.args, timestamp=request.timestamp)
    with transaction_scope(ctx.get_tx_id()):
        payload = dispatcher.bootstrap(ctx)
        ledger.commit(ctx)
    return Response(
        content=payload,
        media_type="text/plain",
        headers={TX_ID_HEADER: ctx.get_tx_id()},
    )


@router.post(
    "/invoke",
    summary="Invoke a chaincode command",
    description=(
        "Run one of init_patient, get_patient, get_TxHisBypatId or get_AllPatients. "
        "Returns the raw command payload."
    ),
    responses=_ERROR_RESPONSES,
)
async def invoke(
    request: InvokeRequest,
    ledger: InMemoryLedger = Depends(get_ledger),
    dispatcher: ChaincodeDispatcher = Depends(get_dispatcher),
) -> Response:
    """
    Execute one invocation as a ledger transaction.

    - **function**: command name
    - **args**: positional string arguments
    - **timestamp**: optional proposal timestamp; init_patient records it as CreatedDate
    """
    ctx = ledger.begin([request.function, *request.args], timestamp=request.timestamp)
    with transaction_scope(ctx.get_tx_id()):
        payload = dispatcher.dispatch(ctx)
        ledger.commit(ctx)
        logger.info(
            "Transaction committed",
            extra={"command": request.function, "writes": len(ctx.writes)}
        )
    return Response(
        content=payload,
        media_type=Command.parse(request.function).media_type,
        headers={TX_ID_HEADER: ctx.get_tx_id()},
    )
