"""
Ledger access layer.

This module contains the capability interface the chaincode handlers depend
on and the in-memory ledger that implements it.
"""
from repositories.ledger import (
    InMemoryLedger,
    LedgerStub,
    TransactionContext,
    KeyValue,
    KeyModification,
    StateQueryIterator,
    HistoryQueryIterator,
)

__all__ = [
    "InMemoryLedger",
    "LedgerStub",
    "TransactionContext",
    "KeyValue",
    "KeyModification",
    "StateQueryIterator",
    "HistoryQueryIterator",
]
