"""
UTC-first datetime utilities for the MPI Ledger Service.

All transaction timestamps are handled as timezone-aware UTC datetimes and
serialized as ISO 8601 strings with a 'Z' suffix.

Usage:
    from core.datetime_utils import utc_now, to_utc, format_iso

    # Normalize a caller-supplied proposal timestamp
    dt = to_utc(datetime(2024, 1, 15, 10, 30, tzinfo=timezone(timedelta(hours=5, minutes=30))))

    # Format for the CreatedDate field
    format_iso(dt)  # "2024-01-15T05:00:00.000000Z"
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Get current datetime in UTC with timezone info.

    Only the ledger stand-in calls this, when a proposal arrives without a
    timestamp. Chaincode handlers read the transaction timestamp instead.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If datetime is naive (no timezone), assumes it's already UTC
    - If datetime has timezone, converts to UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string in UTC with microsecond precision.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00.000000Z'
    """
    return to_utc(dt).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
