import pytest

from bitparsec.Parsec import (
    EMPTY_RESULTS, ParseError, Parsec, ResultStack, SourcePos, State, Status,
    collapse, produced,
)


# --- ResultStack ---

def test_result_stack_is_lifo():
    stack = EMPTY_RESULTS.push(1).push(2).push(3)
    assert list(stack) == [3, 2, 1]
    assert stack.to_list() == [1, 2, 3]
    assert len(stack) == 3
    assert stack.peek() == 3


def test_result_stack_push_shares_tail():
    base = EMPTY_RESULTS.push("a")
    left = base.push("b")
    right = base.push("c")
    assert left.to_list() == ["a", "b"]
    assert right.to_list() == ["a", "c"]
    assert base.to_list() == ["a"]


def test_result_stack_take_returns_production_order():
    stack = EMPTY_RESULTS.push(1).push(2).push(3)
    values, rest = stack.take(2)
    assert values == [2, 3]
    assert rest.to_list() == [1]


def test_result_stack_empty_errors():
    with pytest.raises(IndexError):
        EMPTY_RESULTS.pop()
    with pytest.raises(IndexError):
        EMPTY_RESULTS.peek()


def test_result_stack_equality():
    assert EMPTY_RESULTS.push(1) == ResultStack().push(1)
    assert EMPTY_RESULTS.push(1) != EMPTY_RESULTS.push(2)


def test_result_stack_hashes_like_equal_stacks():
    assert hash(EMPTY_RESULTS.push(1).push(2)) == hash(ResultStack().push(1).push(2))
    assert len({EMPTY_RESULTS, ResultStack()}) == 1


def test_state_default_results_are_shared_empty_stack():
    assert State(b"").results is EMPTY_RESULTS
    assert State("abc").results is State(b"xyz").results
    assert hash(State("abc")) == hash(State("abc"))


# --- State ---

def test_initial_state_defaults(initial_state):
    state = initial_state(b"\x01\x02")
    assert state.status is Status.OK
    assert (state.line, state.column, state.offset) == (1, 0, 0)
    assert len(state.results) == 0
    assert state.error is None


def test_binary_state_counts_bits(initial_state):
    state = initial_state(b"\x01\x02\x03")
    assert state.is_binary
    assert state.remaining == 24
    moved = state.advance(12, 12, "x")
    assert moved.remaining == 12
    assert moved.input == b"\x02\x03"
    assert moved.bit_phase == 4
    assert state.remaining == 24


def test_text_state_counts_characters(initial_state):
    state = initial_state("hello")
    assert not state.is_binary
    assert state.remaining == 5
    assert state.advance(2, 2, "he").input == "llo"


def test_fail_keeps_position(initial_state):
    state = initial_state(b"abc").advance(8, 8, b"a")
    failed = state.fail("boom")
    assert failed.status is Status.ERROR
    assert failed.error == "boom"
    assert failed.offset == 8
    assert failed.results.to_list() == [b"a"]


def test_to_error_uses_one_based_column(initial_state):
    failed = initial_state("abc").advance(2, 2, "ab").fail("boom")
    err = failed.to_error()
    assert isinstance(err, ParseError)
    assert (err.line, err.column) == (1, 2)
    assert str(err) == "Parse error at test line 1, column 3: boom"


def test_source_pos_without_name():
    assert str(SourcePos(2, 4)) == "line 2, column 5"


# --- Short-circuit and helpers ---

def test_error_state_bypasses_parse_function(initial_state):
    calls = []

    def parse(state):
        calls.append(state)
        return state.push("ran")

    p = Parsec(parse)
    failed = initial_state("abc").fail("earlier failure")
    assert p(failed) is failed
    assert calls == []


def test_produced_and_collapse(initial_state):
    before = initial_state("x").push("kept")
    after = before.push(1).push(2)
    values, rest = produced(before, after)
    assert values == [1, 2]
    assert rest.to_list() == ["kept"]
    assert collapse([1]) == 1
    assert collapse([1, 2]) == [1, 2]
    assert collapse([]) == []


def test_unaligned_input_carries_bit_phase(initial_state):
    state = initial_state(b"\xff\x00").advance(3, 3, "x")
    assert state.input == b"\xff\x00"
    assert state.bit_phase == 3
    assert state.remaining == 13
    assert initial_state("abc").advance(1, 1, "a").bit_phase == 0
