"""
Domain model and byte codec for patient identity records.

Wire format: a UTF-8 JSON object with string fields in the order
MPI, FName, LName, Files, CreatedDate, compact separators.
"""
import json
from dataclasses import dataclass, fields
from typing import Any, Dict

from core.exceptions import DecodeError

# Field order of the wire object
PATIENT_FIELDS = ("MPI", "FName", "LName", "Files", "CreatedDate")


@dataclass
class Patient:
    """Model representing a patient identity record on the ledger."""

    MPI: str = ""
    FName: str = ""
    LName: str = ""
    Files: str = ""
    CreatedDate: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert patient to an ordered dictionary for JSON responses."""
        return {name: getattr(self, name) for name in PATIENT_FIELDS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Patient":
        """
        Create a Patient from a decoded JSON object.

        Absent or null fields keep their empty-string default and unknown
        fields are ignored. A present field whose value is not a string, or
        holds a lone surrogate such as an escaped "\\ud800", is rejected.

        Raises:
            DecodeError: If a known field holds a non-string or unencodable value.
        """
        values = {}
        for f in fields(cls):
            value = data.get(f.name)
            if value is None:
                continue
            if not isinstance(value, str):
                raise DecodeError(
                    f"Field '{f.name}' must be a string, got {type(value).__name__}",
                    field=f.name,
                )
            if not is_utf8_text(value):
                raise DecodeError(
                    f"Field '{f.name}' holds text that cannot be encoded as UTF-8",
                    field=f.name,
                )
            values[f.name] = value
        return cls(**values)


def is_utf8_text(value: str) -> bool:
    """Return True if `value` encodes as UTF-8, i.e. holds no lone surrogates."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def encode_patient(patient: Patient) -> bytes:
    """Serialize a patient to its canonical byte form."""
    return json.dumps(
        patient.to_dict(),
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def decode_patient(raw: bytes) -> Patient:
    """
    Deserialize stored bytes into a Patient.

    Args:
        raw: Bytes previously produced by encode_patient (or any compatible writer).

    Returns:
        Patient: The decoded record.

    Raises:
        DecodeError: If the bytes are not UTF-8, not JSON, not a JSON object,
            or carry non-string field values.
    """
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"Malformed patient record: {e}") from e

    if not isinstance(data, dict):
        raise DecodeError(
            f"Malformed patient record: expected a JSON object, got {type(data).__name__}"
        )
    return Patient.from_dict(data)
