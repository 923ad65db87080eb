"""
Tests for the patient record codec.
"""
import pytest

from core.exceptions import DecodeError
from models import Patient, encode_patient, decode_patient, is_utf8_text


def test_encode_canonical_form():
    """Test encoding emits compact JSON with fields in wire order."""
    patient = Patient(MPI="M1", FName="A", LName="B", Files="[]", CreatedDate="2025-01-01T10:00:00.000000Z")
    assert encode_patient(patient) == (
        b'{"MPI":"M1","FName":"A","LName":"B","Files":"[]",'
        b'"CreatedDate":"2025-01-01T10:00:00.000000Z"}'
    )


@pytest.mark.parametrize("patient", [
    Patient(),
    Patient(MPI="MPI001", FName="Zoë", LName="Ångström", Files='[{"FileName":"x.pdf"}]', CreatedDate="t"),
    Patient(MPI="MPI002", FName="李", LName="\"quoted\"\n", Files="", CreatedDate="😀"),
])
def test_round_trip(patient):
    """Test decode(encode(r)) == r, including non-ASCII and escaped characters."""
    assert decode_patient(encode_patient(patient)) == patient


def test_non_ascii_emitted_verbatim():
    """Test non-ASCII characters are UTF-8 encoded rather than escaped."""
    raw = encode_patient(Patient(FName="Zoë"))
    assert "Zoë".encode("utf-8") in raw


def test_decode_missing_fields_default_to_empty():
    """Test absent fields decode to the empty string."""
    patient = decode_patient(b'{"MPI":"MPI001"}')
    assert patient == Patient(MPI="MPI001")


def test_decode_null_field_treated_as_absent():
    """Test a null field keeps its zero value."""
    assert decode_patient(b'{"MPI":"MPI001","FName":null}').FName == ""


def test_decode_ignores_unknown_fields():
    """Test extra keys in the stored object are ignored."""
    patient = decode_patient(b'{"MPI":"MPI001","Extra":"x","FName":"A"}')
    assert patient == Patient(MPI="MPI001", FName="A")


@pytest.mark.parametrize("raw", [
    b"",
    b"not json",
    b"\xff\xfe",
    b"[1, 2]",
    b'"MPI001"',
    b'{"MPI": 5}',
    b'{"FName": ["A"]}',
])
def test_decode_malformed_raises(raw):
    """Test malformed stored bytes raise DecodeError."""
    with pytest.raises(DecodeError):
        decode_patient(raw)


@pytest.mark.parametrize("raw", [
    b'{"FName":"\\ud800"}',
    b'{"MPI":"MPI001","Files":"x\\udfff"}',
])
def test_decode_lone_surrogate_raises(raw):
    """Test escaped lone surrogates are rejected since they cannot be re-encoded."""
    with pytest.raises(DecodeError) as exc_info:
        decode_patient(raw)
    assert "UTF-8" in exc_info.value.detail


def test_decode_escaped_surrogate_pair_accepted():
    """Test a properly paired escape decodes to the astral character."""
    assert decode_patient(b'{"FName":"\\ud83d\\ude00"}') == Patient(FName="😀")


def test_is_utf8_text():
    """Test lone surrogates are the only strings refused."""
    assert is_utf8_text("Zoë")
    assert is_utf8_text("")
    assert not is_utf8_text("\ud800")
    assert not is_utf8_text("a\udfffb")


def test_to_dict_preserves_field_order():
    """Test to_dict keys follow the wire order."""
    assert list(Patient().to_dict()) == ["MPI", "FName", "LName", "Files", "CreatedDate"]
