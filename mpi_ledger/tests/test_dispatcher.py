"""
Tests for command dispatch, arity checks and the bootstrap entry point.
"""
import pytest

from core.exceptions import ArgumentCountError, UnknownCommandError
from services import ChaincodeDispatcher, Command


@pytest.mark.parametrize("function", ["delete_patient", "", "GET_PATIENT", "init"])
def test_unknown_command_rejected(ledger, dispatcher, function):
    """Test names outside the command set raise UnknownCommandError."""
    with pytest.raises(UnknownCommandError):
        dispatcher.dispatch(ledger.begin([function, "MPI001"]))


def test_unknown_command_response(ledger, invoke):
    """Test an unknown command is a failed response, never an empty success."""
    response = invoke("delete_patient", "MPI001")
    assert not response.ok
    assert response.payload == b""
    assert response.message == "Unknown command 'delete_patient'"
    assert ledger.committed_tx_count == 0


@pytest.mark.parametrize("function,args", [
    ("init_patient", ["MPI001", "Ada", "Lovelace"]),
    ("init_patient", ["MPI001", "Ada", "Lovelace", "[]", "2025-01-01"]),
    ("init_patient", []),
    ("get_patient", []),
    ("get_patient", ["MPI001", "MPI002"]),
    ("get_TxHisBypatId", []),
    ("get_AllPatients", ["MPI001"]),
])
def test_wrong_arity_rejected(ledger, dispatcher, function, args):
    """Test every command enforces its declared argument count."""
    with pytest.raises(ArgumentCountError) as exc_info:
        dispatcher.dispatch(ledger.begin([function, *args]))
    assert exc_info.value.context["received"] == len(args)


def test_wrong_arity_produces_no_mutation(ledger, invoke):
    """Test a rejected init_patient leaves the ledger untouched."""
    response = invoke("init_patient", "MPI001", "Ada", "Lovelace")
    assert not response.ok
    assert "expected 4, got 3" in response.message
    assert ledger.keys() == []
    assert ledger.committed_tx_count == 0


@pytest.mark.parametrize("function,args", [
    ("init_patient", ["MPI001", "\ud800", "L", "[]"]),
    ("get_patient", ["\ud800"]),
    ("get_TxHisBypatId", ["MPI\udfff"]),
    ("get_patient\ud800", ["MPI001"]),
])
def test_unencodable_text_is_error_response(ledger, invoke, function, args):
    """Test lone surrogates in the invocation become a failed response, not a crash."""
    response = invoke(function, *args)
    assert not response.ok
    assert "UTF-8" in response.message
    assert ledger.keys() == []


def test_init_rejects_unencodable_value(ledger, dispatcher):
    """Test the bootstrap entry point refuses a value it cannot store as UTF-8."""
    response = dispatcher.init(ledger.begin(["bootstrap", "\ud800"]))
    assert not response.ok
    assert "UTF-8" in response.message


def test_successful_invoke_response(invoke):
    """Test a successful invocation carries status 200 and the payload."""
    response = invoke("init_patient", "MPI001", "Ada", "Lovelace", "[]")
    assert response.status == 200
    assert response.payload == b"MPI001"
    assert response.message == ""


def test_init_stores_value_verbatim(ledger, dispatcher):
    """Test the bootstrap entry point writes its value unchanged."""
    ctx = ledger.begin(["bootstrap", "hello world"])
    response = dispatcher.init(ctx)
    assert response.ok
    assert response.payload == b""
    ledger.commit(ctx)
    assert ledger.begin([]).get_state("bootstrap") == b"hello world"


@pytest.mark.parametrize("args", [[], ["only-key"], ["k", "v", "extra"]])
def test_init_requires_key_and_value(ledger, dispatcher, args):
    """Test the bootstrap entry point requires exactly two arguments."""
    response = dispatcher.init(ledger.begin(args))
    assert not response.ok
    assert "expected 2" in response.message


def test_init_write_failure(ledger, dispatcher):
    """Test a failing bootstrap write is an error response."""
    ledger.inject_fault("put_state")
    response = dispatcher.init(ledger.begin(["k", "v"]))
    assert not response.ok


def test_every_command_has_arity_and_handler():
    """Test the command set is fully covered."""
    ChaincodeDispatcher()
    assert {c: c.arity for c in Command} == {
        Command.INIT_PATIENT: 4,
        Command.GET_PATIENT: 1,
        Command.GET_HISTORY: 1,
        Command.GET_ALL_PATIENTS: 0,
    }


def test_command_media_types():
    """Test only init_patient answers with plain text."""
    assert Command.INIT_PATIENT.media_type == "text/plain"
    assert Command.GET_PATIENT.media_type == "application/json"
    assert Command.GET_ALL_PATIENTS.media_type == "application/json"
