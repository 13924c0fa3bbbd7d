# tests/conftest.py
import pytest

from bitparsec.Parsec import State


def assert_state_eq(s1: State, s2: State):
    """
    Field-by-field comparison of two States, results included.
    """
    assert s1.status == s2.status, f"Status mismatch: {s1.status} != {s2.status}"
    assert s1.offset == s2.offset, f"Offset mismatch: {s1.offset} != {s2.offset}"
    assert (s1.line, s1.column) == (s2.line, s2.column)
    assert s1.results.to_list() == s2.results.to_list()
    assert s1.error == s2.error


@pytest.fixture
def initial_state():
    def _make(input_data):
        return State(input_data, name="test")

    return _make


@pytest.fixture
def state_eq():
    return assert_state_eq
