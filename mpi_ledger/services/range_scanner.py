"""
All-patients aggregation over a fixed lexicographic key window.

The window bounds come from settings (range_start_key, range_end_key) and are
compared as strings, not numbers. Keys whose digit run sorts outside the
window are skipped silently; see core.keys for examples.
"""
import json
import logging
from typing import List, Optional

from core.config import settings
from core.exceptions import LedgerIOError
from core.keys import KeyWindow, default_window
from models import Patient
from repositories.ledger import LedgerStub
from services.decode_policy import DecodeFailurePolicy, decode_for_aggregate

logger = logging.getLogger(__name__)


class RangeScanner:
    """Collects every patient whose key falls in the scan window."""

    def __init__(
        self,
        window: Optional[KeyWindow] = None,
        decode_failure_policy: Optional[DecodeFailurePolicy] = None,
    ):
        self._window = window or default_window()
        self._policy = decode_failure_policy or settings.decode_failure_policy

    @property
    def window(self) -> KeyWindow:
        return self._window

    def scan(self, ctx: LedgerStub) -> List[Patient]:
        """
        Decode every record in the window, in the order the ledger yields them.

        Raises:
            LedgerIOError: If the range query or the cursor fails.
            DecodeError: If a value is undecodable and the policy is "fail".
        """
        start, end = self._window.start, self._window.end
        logger.info("Scanning patients", extra={"range_start": start, "range_end": end})

        try:
            results = ctx.get_state_by_range(start, end)
        except LedgerIOError:
            raise
        except Exception as e:
            raise LedgerIOError(operation="get_state_by_range", error=str(e)) from e

        patients: List[Patient] = []
        with results:
            while results.has_next():
                try:
                    kv = results.next()
                except LedgerIOError:
                    raise
                except Exception as e:
                    raise LedgerIOError(operation="iterate", error=str(e)) from e
                logger.debug("Read patient key", extra={"key": kv.key})
                patients.append(decode_for_aggregate(kv.value, kv.key, self._policy))

        logger.info("Patient scan completed", extra={"count": len(patients)})
        return patients

    def get_all_patients(self, ctx: LedgerStub) -> bytes:
        """Scan the window and encode the result as {"patients": [...]}."""
        patients = self.scan(ctx)
        return json.dumps(
            {"patients": [p.to_dict() for p in patients]},
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")
