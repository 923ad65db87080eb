"""
FastAPI Dependency Injection configuration for the MPI Ledger Service.

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    ChaincodeDispatcher (services)
         ↓ TransactionContext per request
    InMemoryLedger (repositories)

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_ledger] = lambda: test_ledger
"""
import logging
from typing import Optional

from core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# LEDGER DEPENDENCY
# =============================================================================

_ledger_instance: Optional["InMemoryLedger"] = None


def get_ledger() -> "InMemoryLedger":
    """
    Get the process-wide ledger instance, creating it on first use.

    Returns:
        InMemoryLedger: The ledger the gateway commits transactions to.
    """
    global _ledger_instance

    if _ledger_instance is None:
        from repositories.ledger import InMemoryLedger

        logger.info("Initializing in-memory ledger")
        _ledger_instance = InMemoryLedger()

    return _ledger_instance


def reset_ledger() -> None:
    """
    Reset the ledger instance (for testing only).
    """
    global _ledger_instance
    _ledger_instance = None


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_dispatcher() -> "ChaincodeDispatcher":
    """
    Get a ChaincodeDispatcher wired with the configured scan window and
    decode-failure policy.
    """
    from core.keys import default_window
    from services import ChaincodeDispatcher, HistoryReader, PatientService, RangeScanner

    window = default_window()
    return ChaincodeDispatcher(
        patient_service=PatientService(scan_window=window),
        range_scanner=RangeScanner(
            window=window,
            decode_failure_policy=settings.decode_failure_policy,
        ),
        history_reader=HistoryReader(decode_failure_policy=settings.decode_failure_policy),
    )
