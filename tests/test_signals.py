"""
Tests for the Linux signal table and signal validation
"""
import pytest

from container_chaos.scheduler import InvalidSignalError
from container_chaos.signals import LINUX_SIGNALS, signal_number, validate_signal


def test_signal_table_has_thirty_entries_numbered_one_to_thirty():
    """Test the table covers exactly the codes 1..30"""
    assert len(LINUX_SIGNALS) == 30
    assert sorted(LINUX_SIGNALS.values()) == list(range(1, 31))


def test_signal_table_values():
    """Test well-known signals keep their numbers"""
    assert LINUX_SIGNALS["SIGHUP"] == 1
    assert LINUX_SIGNALS["SIGIOT"] == 6
    assert LINUX_SIGNALS["SIGKILL"] == 9
    assert LINUX_SIGNALS["SIGTERM"] == 15
    assert LINUX_SIGNALS["SIGSTKFLT"] == 16
    assert LINUX_SIGNALS["SIGSTOP"] == 19
    assert LINUX_SIGNALS["SIGPWR"] == 30


def test_signal_table_is_read_only():
    """Test the table cannot be modified"""
    with pytest.raises(TypeError):
        LINUX_SIGNALS["SIGBOGUS"] = 31


@pytest.mark.parametrize("name", sorted(LINUX_SIGNALS))
def test_validate_accepts_every_table_entry(name):
    """Test every canonical name validates"""
    assert validate_signal(name) == name


@pytest.mark.parametrize("name", ["BOGUS", "sigkill", "SIGKILL ", "", "KILL", "SIGRTMIN", "9"])
def test_validate_rejects_unknown_names(name):
    """Test names outside the table are rejected with the name in the error"""
    with pytest.raises(InvalidSignalError) as exc_info:
        validate_signal(name)

    assert exc_info.value.signal == name
    assert str(exc_info.value) == f"Unexpected signal: {name}"


def test_invalid_signal_error_is_a_value_error():
    """Test callers can catch validation failures as ValueError"""
    with pytest.raises(ValueError):
        validate_signal("BOGUS")


def test_signal_number():
    """Test numeric lookup for dispatchers"""
    assert signal_number("SIGUSR1") == 10
    with pytest.raises(InvalidSignalError):
        signal_number("SIGNOPE")
