"""
Command dispatcher: the chaincode entry points.

Maps an inbound (function name, argument list) pair to one handler, checks
its arity first, and encodes the outcome.

Architecture:
    Ledger runtime / HTTP gateway
         ↓ TransactionContext
    ChaincodeDispatcher.invoke() / .init()
         ↓
    PatientService | RangeScanner | HistoryReader
         ↓
    LedgerStub

Two calling styles:
    dispatch(ctx) / bootstrap(ctx)  raise LedgerServiceError subclasses
    invoke(ctx) / init(ctx)         return a ChaincodeResponse (status, payload, message)
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from core.exceptions import (
    ArgumentCountError,
    InvalidArgumentError,
    LedgerIOError,
    LedgerServiceError,
    UnknownCommandError,
)
from core.logging_config import transaction_scope
from models import is_utf8_text
from repositories.ledger import LedgerStub
from services.history_reader import HistoryReader
from services.patient_service import PatientService
from services.range_scanner import RangeScanner

logger = logging.getLogger(__name__)

STATUS_OK = 200
STATUS_ERROR = 500


class Command(str, Enum):
    """Closed set of invocable functions."""

    INIT_PATIENT = "init_patient"
    GET_PATIENT = "get_patient"
    GET_HISTORY = "get_TxHisBypatId"
    GET_ALL_PATIENTS = "get_AllPatients"

    @classmethod
    def parse(cls, name: str) -> "Command":
        try:
            return cls(name)
        except ValueError:
            raise UnknownCommandError(command=name) from None

    @property
    def arity(self) -> int:
        return _ARITY[self]

    @property
    def media_type(self) -> str:
        return "text/plain" if self is Command.INIT_PATIENT else "application/json"


_ARITY: Dict[Command, int] = {
    Command.INIT_PATIENT: 4,  # MPI, FName, LName, Files
    Command.GET_PATIENT: 1,
    Command.GET_HISTORY: 1,
    Command.GET_ALL_PATIENTS: 0,
}

# init takes (bootstrapKey, bootstrapValue)
BOOTSTRAP_ARITY = 2


@dataclass(frozen=True)
class ChaincodeResponse:
    """Outcome of one invocation: a payload on success, a message on failure."""

    status: int
    payload: bytes = b""
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @classmethod
    def success(cls, payload: Optional[bytes] = None) -> "ChaincodeResponse":
        return cls(status=STATUS_OK, payload=payload or b"")

    @classmethod
    def error(cls, message: str) -> "ChaincodeResponse":
        return cls(status=STATUS_ERROR, message=message)


Handler = Callable[[LedgerStub, List[str]], bytes]


def _require_utf8_args(args: List[str]) -> None:
    """Reject arguments that cannot be stored or echoed back as UTF-8."""
    for position, arg in enumerate(args):
        if not is_utf8_text(arg):
            raise InvalidArgumentError(
                f"Argument {position} holds text that cannot be encoded as UTF-8",
                position=position,
            )


class ChaincodeDispatcher:
    """
    Routes invocations to the patient record handlers.

    Stateless across invocations; every call works only through the
    transaction context it is given.
    """

    def __init__(
        self,
        patient_service: Optional[PatientService] = None,
        range_scanner: Optional[RangeScanner] = None,
        history_reader: Optional[HistoryReader] = None,
    ):
        self._patients = patient_service or PatientService()
        self._scanner = range_scanner or RangeScanner()
        self._history = history_reader or HistoryReader()
        self._handlers: Dict[Command, Handler] = {
            Command.INIT_PATIENT: self._init_patient,
            Command.GET_PATIENT: self._get_patient,
            Command.GET_HISTORY: self._get_history,
            Command.GET_ALL_PATIENTS: self._get_all_patients,
        }
        missing = set(Command) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler registered for: {sorted(c.value for c in missing)}")

    # -------------------------------------------------------------------------
    # Raising entry points
    # -------------------------------------------------------------------------

    def dispatch(self, ctx: LedgerStub) -> bytes:
        """
        Execute the invocation carried by `ctx`.

        Returns:
            bytes: The success payload.

        Raises:
            UnknownCommandError: If the function name is not a Command.
            ArgumentCountError: If the argument count does not match the command.
            InvalidArgumentError: If the function name or an argument is not UTF-8 encodable.
            LedgerServiceError: Any error raised by the handler.
        """
        name, args = ctx.get_function_and_parameters()
        if not is_utf8_text(name):
            raise InvalidArgumentError("Function name holds text that cannot be encoded as UTF-8")
        command = Command.parse(name)
        if len(args) != command.arity:
            raise ArgumentCountError(
                command=command.value, expected=command.arity, received=len(args)
            )
        _require_utf8_args(args)
        logger.info("Dispatching command", extra={"command": command.value, "arg_count": len(args)})
        return self._handlers[command](ctx, args)

    def bootstrap(self, ctx: LedgerStub) -> bytes:
        """
        Store the instantiation key/value pair verbatim.

        Raises:
            ArgumentCountError: Unless exactly a key and a value are supplied.
            InvalidArgumentError: If the key or value is not UTF-8 encodable.
            LedgerIOError: If the write fails.
        """
        args = ctx.get_string_args()
        if len(args) != BOOTSTRAP_ARITY:
            raise ArgumentCountError(
                command="init", expected=BOOTSTRAP_ARITY, received=len(args)
            )
        _require_utf8_args(args)
        key, value = args
        logger.info("Bootstrapping ledger", extra={"key": key})
        try:
            ctx.put_state(key, value.encode("utf-8"))
        except LedgerIOError:
            raise
        except Exception as e:
            raise LedgerIOError(operation="put_state", key=key, error=str(e)) from e
        return b""

    # -------------------------------------------------------------------------
    # Response-returning entry points
    # -------------------------------------------------------------------------

    def invoke(self, ctx: LedgerStub) -> ChaincodeResponse:
        """Run dispatch() and wrap the outcome."""
        return self._respond(ctx, self.dispatch)

    def init(self, ctx: LedgerStub) -> ChaincodeResponse:
        """Run bootstrap() and wrap the outcome."""
        return self._respond(ctx, self.bootstrap)

    def _respond(self, ctx: LedgerStub, call: Callable[[LedgerStub], bytes]) -> ChaincodeResponse:
        with transaction_scope(ctx.get_tx_id()):
            try:
                payload = call(ctx)
            except LedgerServiceError as e:
                logger.warning(
                    "Invocation failed",
                    extra={"error": e.detail, "error_type": type(e).__name__}
                )
                return ChaincodeResponse.error(e.detail)
            logger.info("Invocation completed", extra={"payload_bytes": len(payload)})
            return ChaincodeResponse.success(payload)

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _init_patient(self, ctx: LedgerStub, args: List[str]) -> bytes:
        mpi, first_name, last_name, files = args
        return self._patients.register_patient(ctx, mpi, first_name, last_name, files).encode("utf-8")

    def _get_patient(self, ctx: LedgerStub, args: List[str]) -> bytes:
        return self._patients.get_patient(ctx, args[0])

    def _get_history(self, ctx: LedgerStub, args: List[str]) -> bytes:
        return self._history.get_history(ctx, args[0])

    def _get_all_patients(self, ctx: LedgerStub, args: List[str]) -> bytes:
        return self._scanner.get_all_patients(ctx)
