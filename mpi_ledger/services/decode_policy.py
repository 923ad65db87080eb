"""
Decode-failure policy for queries that aggregate many stored records.

"mask" keeps the aggregation going: the bad value is replaced by an empty
Patient and a warning is logged. "fail" lets the DecodeError abort the query.
"""
import logging
from typing import Literal

from core.exceptions import DecodeError
from models import Patient, decode_patient

logger = logging.getLogger(__name__)

DecodeFailurePolicy = Literal["mask", "fail"]


def decode_for_aggregate(raw: bytes, key: str, policy: DecodeFailurePolicy, **context) -> Patient:
    """
    Decode one aggregated value under the given policy.

    Raises:
        DecodeError: Only when policy is "fail".
    """
    try:
        return decode_patient(raw)
    except DecodeError as e:
        if policy == "fail":
            e.context.update(key=key, **context)
            raise
        logger.warning(
            "Masking undecodable patient record with an empty record",
            extra={"key": key, "error": e.detail, **context}
        )
        return Patient()
