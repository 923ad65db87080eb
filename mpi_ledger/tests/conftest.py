"""
Shared pytest fixtures.

Fixture Hierarchy:
    ledger → services → dispatcher → invoke / test_app → client

Every test gets its own InMemoryLedger, so nothing leaks between tests.
"""
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core import dependencies as deps
from core.exceptions import setup_exception_handlers
from core.keys import KeyWindow
from repositories import InMemoryLedger
from services import ChaincodeDispatcher, HistoryReader, PatientService, RangeScanner

TEST_WINDOW = KeyWindow(start="MPI0", end="MPI99999999999")
TX_TIME = datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def ledger():
    """Create an empty in-memory ledger."""
    return InMemoryLedger()


@pytest.fixture
def patient_service():
    return PatientService(scan_window=TEST_WINDOW)


@pytest.fixture
def range_scanner():
    return RangeScanner(window=TEST_WINDOW, decode_failure_policy="mask")


@pytest.fixture
def history_reader():
    return HistoryReader(decode_failure_policy="mask")


@pytest.fixture
def dispatcher(patient_service, range_scanner, history_reader):
    return ChaincodeDispatcher(
        patient_service=patient_service,
        range_scanner=range_scanner,
        history_reader=history_reader,
    )


@pytest.fixture
def invoke(ledger, dispatcher):
    """
    Run one invocation as a full transaction.

    Commits the write set only when the dispatcher reports success, which is
    what the ledger runtime does with an endorsed proposal.
    """
    def _invoke(function, *args, timestamp=TX_TIME):
        ctx = ledger.begin([function, *args], timestamp=timestamp)
        response = dispatcher.invoke(ctx)
        if response.ok:
            ledger.commit(ctx)
        return response

    return _invoke


@pytest.fixture
def register(invoke):
    """Write a patient through init_patient and assert it succeeded."""
    def _register(mpi, first_name="Ada", last_name="Lovelace", files="[]", timestamp=TX_TIME):
        response = invoke("init_patient", mpi, first_name, last_name, files, timestamp=timestamp)
        assert response.ok, response.message
        return response

    return _register


@pytest.fixture
def test_app(ledger, dispatcher):
    """
    Create a FastAPI test app with dependency overrides.

    Uses the real routers with the test ledger and dispatcher injected.
    """
    from api.routers import health_router, invoke_router

    app = FastAPI(title="MPI Ledger Service Test")
    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_ledger] = lambda: ledger
    app.dependency_overrides[deps.get_dispatcher] = lambda: dispatcher

    app.include_router(health_router)
    app.include_router(invoke_router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)
