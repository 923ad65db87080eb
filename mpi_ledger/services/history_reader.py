"""
Per-key change history for a patient record.

Entries come back in the order the ledger records them (oldest first); this
module never re-sorts. Deletion markers are projected as empty records.
"""
import json
import logging
from dataclasses import dataclass
from typing import List, Optional

from core.config import settings
from core.datetime_utils import format_iso
from core.exceptions import LedgerIOError
from models import Patient
from repositories.ledger import LedgerStub
from services.decode_policy import DecodeFailurePolicy, decode_for_aggregate

logger = logging.getLogger(__name__)


@dataclass
class HistoryEntry:
    """One committed version of a patient record."""

    tx_id: str
    value: Patient

    def to_dict(self):
        return {"txId": self.tx_id, "value": self.value.to_dict()}


class HistoryReader:
    """Reads the version history of a single patient key."""

    def __init__(self, decode_failure_policy: Optional[DecodeFailurePolicy] = None):
        self._policy = decode_failure_policy or settings.decode_failure_policy

    def read(self, ctx: LedgerStub, mpi: str) -> List[HistoryEntry]:
        """
        Project every version of `mpi` into (tx id, snapshot) pairs.

        Each snapshot is decoded on its own; a version never inherits fields
        from the one before it.

        Raises:
            LedgerIOError: If the history query or the cursor fails.
            DecodeError: If a snapshot is undecodable and the policy is "fail".
        """
        logger.info("Reading patient history", extra={"mpi": mpi})

        try:
            results = ctx.get_history_for_key(mpi)
        except LedgerIOError:
            raise
        except Exception as e:
            raise LedgerIOError(operation="get_history_for_key", key=mpi, error=str(e)) from e

        history: List[HistoryEntry] = []
        with results:
            while results.has_next():
                try:
                    modification = results.next()
                except LedgerIOError:
                    raise
                except Exception as e:
                    raise LedgerIOError(operation="iterate", key=mpi, error=str(e)) from e

                if modification.is_delete or not modification.value:
                    snapshot = Patient()
                else:
                    snapshot = decode_for_aggregate(
                        modification.value, mpi, self._policy, tx_id=modification.tx_id
                    )
                history.append(HistoryEntry(tx_id=modification.tx_id, value=snapshot))
                logger.debug(
                    "History entry",
                    extra={
                        "mpi": mpi,
                        "entry_tx_id": modification.tx_id,
                        "entry_timestamp": format_iso(modification.timestamp),
                        "is_delete": modification.is_delete,
                    }
                )

        logger.info("Patient history read", extra={"mpi": mpi, "count": len(history)})
        return history

    def get_history(self, ctx: LedgerStub, mpi: str) -> bytes:
        """Read the history and encode it as a JSON array of {txId, value}."""
        history = self.read(ctx, mpi)
        return json.dumps(
            [entry.to_dict() for entry in history],
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")
