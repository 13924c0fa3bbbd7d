import functools
import logging
from dataclasses import replace
from typing import Any, Callable, List, Optional, Tuple, Union

from .Parsec import Parsec, State, Status, ParseError, ParseFailure, Source, T, produced, collapse

log = logging.getLogger(__name__)

InputData = Union[str, bytes, bytearray, memoryview]


def pure(value: T) -> Parsec[T]:
    """Return a parser that pushes a value without consuming input."""
    def parse(state: State) -> State:
        return state.push(value)
    return Parsec(parse, "pure")


def fail(msg: str) -> Parsec[Any]:
    """A parser that always fails with a message."""
    def parse(state: State) -> State:
        return state.fail(msg)
    return Parsec(parse, "fail")


def lazy(parser_thunk: Callable[[], Parsec[T]]) -> Parsec[T]:
    """
    Defer building a parser until it first runs, for recursive grammars.
    The thunk is evaluated once.
    """
    cache: List[Parsec[T]] = []

    def parse(state: State) -> State:
        if not cache:
            cache.append(parser_thunk())
        return cache[0](state)
    return Parsec(parse, "lazy")


def combinator(factory: Callable[..., Parsec[T]]) -> Callable[..., Parsec[T]]:
    """
    Give a parser factory its combinator form.

    `factory(*args)` builds the standalone parser. Called with a parser as the
    first positional argument, the wrapped factory sequences the new parser
    after it instead: `uint(bits(4), 12)` is `bits(4) >> uint(12)`.
    """
    @functools.wraps(factory)
    def wrapper(*args: Any, **kwargs: Any) -> Parsec[T]:
        if args and isinstance(args[0], Parsec):
            return args[0] >> factory(*args[1:], **kwargs)
        return factory(*args, **kwargs)
    return wrapper


def _many_accum(p: Parsec[Any], keep: bool, name: str) -> Parsec[Any]:
    def parse_accum(state_outer: State) -> State:
        values: List[Any] = []
        accum_state = state_outer

        while True:
            attempt = p(accum_state)

            if attempt.status is Status.ERROR:
                # Stop at the last good state; the failed attempt is dropped.
                break

            if attempt.offset == accum_state.offset:
                # Repeating a parser that consumes nothing would never end.
                return accum_state.fail(
                    f"{name}: applied parser succeeded without consuming input "
                    f"at line {accum_state.line}, column {accum_state.column + 1}."
                )

            if keep:
                pushed, _ = produced(accum_state, attempt)
                if pushed:
                    values.append(collapse(pushed))
            accum_state = replace(attempt, results=accum_state.results)

        if keep:
            return accum_state.push(values)
        return accum_state
    return Parsec(parse_accum, name)


def many(p: Parsec[T]) -> Parsec[List[T]]:
    """Parse zero or more occurrences of `p`, pushing one list of their values."""
    return _many_accum(p, True, "many")


def skip_many(p: Parsec[Any]) -> Parsec[None]:
    """Skips zero or more occurrences of `p`."""
    return _many_accum(p, False, "skip_many")


def initial_state(input_data: InputData,
                  user_state: Any = None,
                  source_name: str = "") -> State:
    """Build the starting state: nothing consumed, no results, line 1, column 0."""
    source: Source
    if isinstance(input_data, (str, bytes)):
        source = input_data
    elif isinstance(input_data, (bytearray, memoryview)):
        source = bytes(input_data)
    else:
        raise TypeError(
            f"input must be str or bytes-like, not {type(input_data).__name__}"
        )
    return State(source, name=source_name, user=user_state)


def run_parser(parser: Parsec[Any],
               input_data: InputData,
               user_state: Any = None,
               source_name: str = "") -> Tuple[Optional[List[Any]], Optional[ParseError]]:
    """
    Run `parser` over the whole input.

    Returns `(results, None)` with results in the order they were produced,
    or `(None, error)` when the parse failed.
    """
    state = initial_state(input_data, user_state, source_name)
    log.debug("running %r over %d units of input", parser, state.remaining)
    final = parser(state)
    if final.status is Status.ERROR:
        error = final.to_error()
        log.debug("parse failed: %s", error)
        return None, error
    results = final.results.to_list()
    log.debug("parse succeeded with %d result(s), %d units left", len(results), final.remaining)
    return results, None


def parse(input_data: InputData, parser: Parsec[Any]) -> List[Any]:
    """Like `run_parser`, but raises ParseFailure instead of returning the error."""
    results, err = run_parser(parser, input_data)
    if err is not None:
        raise ParseFailure(err)
    return results
