"""
Ledger capability surface and the in-memory reference ledger.

The chaincode handlers only ever see a LedgerStub: one transaction context
handed to them by the ledger runtime for the duration of one invocation.
Everything behind it (ordering, consensus, persistence) is the runtime's job.

InMemoryLedger is a versioned key-value store that plays the runtime's part
for the HTTP gateway and for tests:
- writes are buffered in the TransactionContext and applied by commit()
- reads see committed state only, never the context's own pending writes
- every committed write appends a KeyModification to the key's history
- range and history queries return closable iterators over a snapshot

IMPORTANT: Ledger instantiation should be done through the DI layer.
Use core.dependencies.get_ledger() instead of instantiating directly.
"""
import bisect
import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Generic, List, Optional, Protocol, Sequence, Set, Tuple, TypeVar

from core.datetime_utils import utc_now, to_utc
from core.exceptions import LedgerIOError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# QUERY RESULTS
# =============================================================================

@dataclass(frozen=True)
class KeyValue:
    """One entry yielded by a range query."""
    key: str
    value: bytes


@dataclass(frozen=True)
class KeyModification:
    """One version of a key, as recorded by a committed transaction."""
    tx_id: str
    value: Optional[bytes]
    timestamp: datetime
    is_delete: bool = False


# =============================================================================
# ITERATORS
# =============================================================================

class QueryIterator(Generic[T]):
    """
    Closable cursor over a query result.

    Use as a context manager so the cursor is released on every exit path:

        with ctx.get_state_by_range(start, end) as results:
            for kv in results:
                ...
    """

    def __init__(
        self,
        items: Sequence[T],
        on_close=None,
        fail_after: Optional[int] = None,
    ):
        self._items = list(items)
        self._position = 0
        self._closed = False
        self._on_close = on_close
        self._fail_after = fail_after

    @property
    def closed(self) -> bool:
        return self._closed

    def has_next(self) -> bool:
        return not self._closed and self._position < len(self._items)

    def next(self) -> T:
        if self._closed:
            raise LedgerIOError(operation="iterate", reason="iterator is closed")
        if self._fail_after is not None and self._position >= self._fail_after:
            raise LedgerIOError(operation="iterate", position=self._position)
        if self._position >= len(self._items):
            raise StopIteration
        item = self._items[self._position]
        self._position += 1
        return item

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close(self)

    def __iter__(self):
        return self

    def __next__(self) -> T:
        return self.next()

    def __enter__(self) -> "QueryIterator[T]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class StateQueryIterator(QueryIterator[KeyValue]):
    """Cursor over a key range, in ascending key order."""


class HistoryQueryIterator(QueryIterator[KeyModification]):
    """Cursor over one key's versions, oldest first."""


# =============================================================================
# CAPABILITY INTERFACE
# =============================================================================

class LedgerStub(Protocol):
    """Capabilities a chaincode handler may use during one invocation."""

    def get_string_args(self) -> List[str]: ...

    def get_function_and_parameters(self) -> Tuple[str, List[str]]: ...

    def get_tx_id(self) -> str: ...

    def get_tx_timestamp(self) -> datetime: ...

    def put_state(self, key: str, value: bytes) -> None: ...

    def get_state(self, key: str) -> Optional[bytes]: ...

    def del_state(self, key: str) -> None: ...

    def get_state_by_range(self, start_key: str, end_key: str) -> StateQueryIterator: ...

    def get_history_for_key(self, key: str) -> HistoryQueryIterator: ...


# =============================================================================
# TRANSACTION CONTEXT
# =============================================================================

class TransactionContext:
    """
    LedgerStub implementation bound to one InMemoryLedger transaction.

    Created by InMemoryLedger.begin(); applied by InMemoryLedger.commit().
    """

    def __init__(
        self,
        ledger: "InMemoryLedger",
        args: Sequence[str],
        tx_id: str,
        timestamp: datetime,
    ):
        self._ledger = ledger
        self._args = list(args)
        self._tx_id = tx_id
        self._timestamp = timestamp
        # Insertion-ordered write set; None marks a delete
        self.writes: Dict[str, Optional[bytes]] = {}
        self.finished = False

    def get_string_args(self) -> List[str]:
        return list(self._args)

    def get_function_and_parameters(self) -> Tuple[str, List[str]]:
        if not self._args:
            return "", []
        return self._args[0], list(self._args[1:])

    def get_tx_id(self) -> str:
        return self._tx_id

    def get_tx_timestamp(self) -> datetime:
        return self._timestamp

    def put_state(self, key: str, value: bytes) -> None:
        self._ledger._check_fault("put_state", key)
        if not key:
            raise LedgerIOError(operation="put_state", reason="key must not be an empty string")
        self.writes[key] = bytes(value)

    def get_state(self, key: str) -> Optional[bytes]:
        self._ledger._check_fault("get_state", key)
        return self._ledger._read(key)

    def del_state(self, key: str) -> None:
        self._ledger._check_fault("del_state", key)
        self.writes[key] = None

    def get_state_by_range(self, start_key: str, end_key: str) -> StateQueryIterator:
        self._ledger._check_fault("get_state_by_range", start_key)
        return self._ledger._range(start_key, end_key)

    def get_history_for_key(self, key: str) -> HistoryQueryIterator:
        self._ledger._check_fault("get_history_for_key", key)
        return self._ledger._history_for(key)


# =============================================================================
# IN-MEMORY LEDGER
# =============================================================================

@dataclass
class _Fault:
    operation: str
    after: int = 0


class InMemoryLedger:
    """
    Versioned in-process key-value ledger.

    Features:
    - Per-key version history with a unique transaction id per commit
    - Commit applies a transaction's whole write set or nothing
    - Tracks open iterators so tests can assert every cursor was released
    - Fault injection for ledger I/O error paths

    Usage:
        ledger = InMemoryLedger()
        ctx = ledger.begin(["init_patient", "MPI001", "Ada", "Lovelace", "[]"])
        ...
        ledger.commit(ctx)
    """

    def __init__(self):
        self._state: Dict[str, bytes] = {}
        self._sorted_keys: List[str] = []
        self._history: Dict[str, List[KeyModification]] = {}
        self._lock = threading.RLock()
        self._open_iterators: Set[int] = set()
        self._faults: Dict[str, _Fault] = {}
        self.committed_tx_count = 0

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def begin(
        self,
        args: Sequence[str],
        timestamp: Optional[datetime] = None,
    ) -> TransactionContext:
        """
        Open a transaction context for one invocation.

        Args:
            args: Raw proposal arguments; for invocations the first one is the function name.
            timestamp: Proposal timestamp. Defaults to the current UTC time.
        """
        tx_id = uuid.uuid4().hex
        ts = to_utc(timestamp) if timestamp is not None else utc_now()
        return TransactionContext(self, args, tx_id=tx_id, timestamp=ts)

    def commit(self, ctx: TransactionContext) -> None:
        """Apply the context's write set and record one history version per written key."""
        if ctx.finished:
            raise LedgerIOError(operation="commit", reason="transaction already finished")
        with self._lock:
            for key, value in ctx.writes.items():
                self._history.setdefault(key, []).append(
                    KeyModification(
                        tx_id=ctx.get_tx_id(),
                        value=value,
                        timestamp=ctx.get_tx_timestamp(),
                        is_delete=value is None,
                    )
                )
                if value is None:
                    if key in self._state:
                        del self._state[key]
                        self._sorted_keys.remove(key)
                else:
                    if key not in self._state:
                        bisect.insort(self._sorted_keys, key)
                    self._state[key] = value
            ctx.finished = True
            self.committed_tx_count += 1
        logger.debug(
            "Transaction committed",
            extra={"tx_id": ctx.get_tx_id(), "writes": len(ctx.writes)}
        )

    def seed(self, key: str, value: bytes, timestamp: Optional[datetime] = None) -> str:
        """Commit a single raw write outside any chaincode invocation. Returns the tx id."""
        ctx = self.begin([], timestamp=timestamp)
        ctx.writes[key] = value
        self.commit(ctx)
        return ctx.get_tx_id()

    # -------------------------------------------------------------------------
    # Inspection and fault injection
    # -------------------------------------------------------------------------

    @property
    def open_iterator_count(self) -> int:
        return len(self._open_iterators)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._sorted_keys)

    def inject_fault(self, operation: str, after: int = 0) -> None:
        """
        Make an operation fail with LedgerIOError.

        Args:
            operation: One of put_state, get_state, del_state,
                get_state_by_range, get_history_for_key, or "iterate".
            after: For "iterate", the number of items yielded before the cursor fails.
        """
        self._faults[operation] = _Fault(operation=operation, after=after)

    def clear_faults(self) -> None:
        self._faults.clear()

    def _check_fault(self, operation: str, key: str) -> None:
        if operation in self._faults:
            raise LedgerIOError(operation=operation, key=key)

    # -------------------------------------------------------------------------
    # Committed-state access used by TransactionContext
    # -------------------------------------------------------------------------

    def _read(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._state.get(key)

    def _range(self, start_key: str, end_key: str) -> StateQueryIterator:
        with self._lock:
            lo = bisect.bisect_left(self._sorted_keys, start_key)
            hi = (
                bisect.bisect_left(self._sorted_keys, end_key)
                if end_key else len(self._sorted_keys)
            )
            items = [KeyValue(k, self._state[k]) for k in self._sorted_keys[lo:hi]]
        return self._track(StateQueryIterator(
            items, on_close=self._release, fail_after=self._iterate_fault()
        ))

    def _history_for(self, key: str) -> HistoryQueryIterator:
        with self._lock:
            items = list(self._history.get(key, []))
        return self._track(HistoryQueryIterator(
            items, on_close=self._release, fail_after=self._iterate_fault()
        ))

    def _iterate_fault(self) -> Optional[int]:
        fault = self._faults.get("iterate")
        return fault.after if fault is not None else None

    def _track(self, iterator):
        with self._lock:
            self._open_iterators.add(id(iterator))
        return iterator

    def _release(self, iterator) -> None:
        with self._lock:
            self._open_iterators.discard(id(iterator))
