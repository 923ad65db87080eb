"""
Patient key window used by the all-patients range scan.

The scan bounds are compared lexicographically over the raw key, not
numerically. A key such as "MPI99999999999" (the exclusive end itself) or
"MPI999999999999" sorts at or past the end bound and is never returned by
get_AllPatients even though it is a valid patient key. Writes log a warning
when that happens (see services.patient_service).
"""
from dataclasses import dataclass

from core.config import settings


@dataclass(frozen=True)
class KeyWindow:
    """Half-open lexicographic key interval [start, end)."""

    start: str
    end: str

    def contains(self, key: str) -> bool:
        return self.start <= key < self.end


def default_window() -> KeyWindow:
    """Build the scan window from settings."""
    return KeyWindow(start=settings.range_start_key, end=settings.range_end_key)
