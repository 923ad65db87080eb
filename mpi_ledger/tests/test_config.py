"""
Tests for settings validation and the scan key window.
"""
import logging

import pytest
from pydantic import ValidationError

from core.config import Settings
from core.keys import KeyWindow


def test_defaults():
    """Test default window and decode policy."""
    s = Settings(_env_file=None)
    assert s.range_start_key == "MPI0"
    assert s.range_end_key == "MPI99999999999"
    assert s.decode_failure_policy == "mask"


def test_env_override(monkeypatch):
    """Test MPI_LEDGER_ environment variables override defaults."""
    monkeypatch.setenv("MPI_LEDGER_DECODE_FAILURE_POLICY", "fail")
    monkeypatch.setenv("MPI_LEDGER_RANGE_END_KEY", "MPI:")
    s = Settings(_env_file=None)
    assert s.decode_failure_policy == "fail"
    assert s.range_end_key == "MPI:"


def test_validation_is_silent(caplog):
    """Test building settings logs nothing."""
    with caplog.at_level(logging.DEBUG):
        Settings(_env_file=None, decode_failure_policy="mask")
    assert not [r for r in caplog.records if r.name == "core.config"]


def test_inverted_window_rejected():
    """Test a start bound at or after the end bound fails fast."""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, range_start_key="MPI9", range_end_key="MPI0")


def test_unknown_policy_rejected():
    """Test only mask and fail are accepted policies."""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, decode_failure_policy="ignore")


@pytest.mark.parametrize("key,expected", [
    ("MPI0", True),
    ("MPI001", True),
    ("MPI01", True),
    ("MPI1", True),
    ("MPI9999999999", True),
    ("MPI99999999999", False),
    ("MPI", False),
    ("M1", False),
])
def test_window_contains(key, expected):
    """Test lexicographic [start, end) membership."""
    assert KeyWindow("MPI0", "MPI99999999999").contains(key) is expected
