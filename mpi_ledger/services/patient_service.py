"""
Service layer for patient record writes and single-key reads.

Architecture:
    ChaincodeDispatcher → PatientService → LedgerStub (one transaction context)

The service holds no ledger state of its own; every call receives the
transaction context it runs in.
"""
import logging
from typing import Optional

from core.datetime_utils import format_iso
from core.exceptions import InvalidArgumentError, LedgerIOError, NotFoundError
from core.keys import KeyWindow, default_window
from models import Patient, encode_patient, is_utf8_text
from repositories.ledger import LedgerStub

logger = logging.getLogger(__name__)


class PatientService:
    """
    Upsert and lookup of patient records keyed by MPI.
    """

    def __init__(self, scan_window: Optional[KeyWindow] = None):
        """
        Initialize the patient service.

        Args:
            scan_window: Key window of the all-patients scan. Writes outside
                it are accepted but logged, since they will not be listed.
                Defaults to the configured window.
        """
        self._scan_window = scan_window or default_window()

    def register_patient(
        self,
        ctx: LedgerStub,
        mpi: str,
        first_name: str,
        last_name: str,
        files: str,
    ) -> str:
        """
        Create or fully overwrite the patient stored under `mpi`.

        CreatedDate is taken from the transaction timestamp so every peer
        executing the proposal produces the same bytes.

        Returns:
            str: The MPI the record was written under.

        Raises:
            InvalidArgumentError: If mpi is empty or any argument is not UTF-8 encodable.
            LedgerIOError: If the ledger rejects the write.
        """
        if not mpi:
            raise InvalidArgumentError("MPI must be a non-empty string")
        for field, value in (("MPI", mpi), ("FName", first_name), ("LName", last_name), ("Files", files)):
            if not is_utf8_text(value):
                raise InvalidArgumentError(
                    f"{field} holds text that cannot be encoded as UTF-8", field=field
                )

        patient = Patient(
            MPI=mpi,
            FName=first_name,
            LName=last_name,
            Files=files,
            CreatedDate=format_iso(ctx.get_tx_timestamp()),
        )
        payload = encode_patient(patient)

        logger.info("Registering patient", extra={"mpi": mpi})
        try:
            ctx.put_state(mpi, payload)
        except LedgerIOError:
            raise
        except Exception as e:
            raise LedgerIOError(operation="put_state", key=mpi, error=str(e)) from e

        if not self._scan_window.contains(mpi):
            logger.warning(
                "Patient key falls outside the all-patients scan window and will not be listed",
                extra={
                    "mpi": mpi,
                    "range_start": self._scan_window.start,
                    "range_end": self._scan_window.end,
                }
            )
        return mpi

    def get_patient(self, ctx: LedgerStub, mpi: str) -> bytes:
        """
        Get the stored encoding of a patient.

        Returns:
            bytes: The raw record as written, without re-encoding.

        Raises:
            NotFoundError: If nothing is stored under `mpi`.
            LedgerIOError: If the ledger read fails.
        """
        try:
            value = ctx.get_state(mpi)
        except LedgerIOError:
            raise
        except Exception as e:
            raise LedgerIOError(operation="get_state", key=mpi, error=str(e)) from e

        if value is None:
            logger.info("Patient not found", extra={"mpi": mpi})
            raise NotFoundError(key=mpi)
        return value
