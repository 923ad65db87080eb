"""
Service layer: the chaincode handlers and their dispatcher.

Each service works only through the LedgerStub passed to it, so a single
instance can serve any number of invocations.
"""
from services.patient_service import PatientService
from services.range_scanner import RangeScanner
from services.history_reader import HistoryReader, HistoryEntry
from services.dispatcher import ChaincodeDispatcher, ChaincodeResponse, Command

__all__ = [
    "PatientService",
    "RangeScanner",
    "HistoryReader",
    "HistoryEntry",
    "ChaincodeDispatcher",
    "ChaincodeResponse",
    "Command",
]
