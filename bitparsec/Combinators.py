import logging
from dataclasses import replace
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .Parsec import Parsec, State, Status, T, U, produced, collapse
from .Prim import pure, fail, many, skip_many

log = logging.getLogger(__name__)


# 1. choice: Tries parsers in order until one succeeds
def choice(parsers: Sequence[Parsec[T]]) -> Parsec[T]:
    """
    Applies a list of parsers in order until one succeeds.

    Every branch starts from the state choice was given, so input consumed by
    a failed branch is given back. When all branches fail, the result is the
    last branch's failed state carrying every branch's message.
    """
    if not parsers:
        return fail("no alternatives")
    branches = list(parsers)

    def parse(state: State) -> State:
        messages = []
        attempt = state
        for p in branches:
            attempt = p(state)
            if attempt.status is Status.OK:
                return attempt
            messages.append(attempt.error or "")
        return attempt.fail(", or: ".join(messages))
    return Parsec(parse, "choice")


# 2. either: Two-branch choice
def either(p1: Parsec[T], p2: Parsec[T]) -> Parsec[T]:
    """Tries p1, and p2 from the same starting point if p1 fails."""
    return choice([p1, p2])


# 3. option: Tries a parser, pushing a default value on failure
def option(x: T, p: Parsec[T]) -> Parsec[T]:
    """Tries parser p; pushes its result if successful, else x."""
    return either(p, pure(x))


# 4. optionMaybe: Tries a parser, pushing None on failure
def option_maybe(p: Parsec[T]) -> Parsec[Optional[T]]:
    return either(p, pure(None))


# 5. optional: Tries a parser, pushing nothing on failure
def optional(p: Parsec[T]) -> Parsec[T]:
    """Tries parser p; on failure the state is restored and nothing is pushed."""
    return either(p, Parsec(lambda state: state, "nothing"))


# 6. ignore: Runs a parser and drops its results
def ignore(p: Parsec[Any]) -> Parsec[None]:
    """Applies p for its consumption only; whatever p pushed is discarded."""
    def parse(state: State) -> State:
        new_state = p(state)
        if new_state.status is Status.ERROR:
            return new_state
        return replace(new_state, results=state.results)
    return Parsec(parse, "ignore")


# 7. many1: Applies a parser one or more times
def many1(p: Parsec[T]) -> Parsec[List[T]]:
    """
    Applies parser p one or more times, pushing a list of results.
    Fails with p's error when p does not match even once.
    """
    rest = many(p)

    def parse(state: State) -> State:
        first = p(state)
        if first.status is Status.ERROR:
            return first
        values, base = produced(state, first)
        after = rest(replace(first, results=base))
        if after.status is Status.ERROR:
            return after
        tail, below = after.results.pop()
        head = [collapse(values)] if values else []
        return replace(after, results=below.push(head + tail))
    return Parsec(parse, "many1")


# 8. skipMany1: Skips one or more occurrences of a parser
def skip_many1(p: Parsec[Any]) -> Parsec[None]:
    return ignore(p) >> skip_many(p)


# 9. count: Parses exactly n occurrences of a parser
def count(n: int, p: Parsec[T]) -> Parsec[List[T]]:
    """Applies p exactly n times, pushing a list of the n results."""
    if n <= 0:
        return pure([])

    def parse(state_initial: State) -> State:
        values: List[Any] = []
        current_state = state_initial
        for _ in range(n):
            attempt = p(current_state)
            if attempt.status is Status.ERROR:
                return attempt
            pushed, base = produced(current_state, attempt)
            if pushed:
                values.append(collapse(pushed))
            current_state = replace(attempt, results=base)
        return current_state.push(values)
    return Parsec(parse, f"count({n})")


# 10. sequence: Runs parsers in order, pushing their values as one list
def sequence(parsers: Sequence[Parsec[Any]]) -> Parsec[List[Any]]:
    """
    Applies each parser in turn and pushes a single list holding one entry per
    parser that produced something (parsers that push nothing are skipped).
    """
    steps = list(parsers)

    def parse(state: State) -> State:
        values: List[Any] = []
        current_state = state
        for p in steps:
            attempt = p(current_state)
            if attempt.status is Status.ERROR:
                return attempt
            pushed, base = produced(current_state, attempt)
            if pushed:
                values.append(collapse(pushed))
            current_state = replace(attempt, results=base)
        return current_state.push(values)
    return Parsec(parse, "sequence")


# 11. pipe: Runs parsers in order and transforms their values
def pipe(parsers: Sequence[Parsec[Any]], f: Callable[[List[Any]], U]) -> Parsec[U]:
    """Like sequence, but pushes f(values) instead of the list itself."""
    return sequence(parsers).map(f)


# 12. map: Function form of Parsec.map
def map_(p: Parsec[T], f: Callable[[T], U]) -> Parsec[U]:
    return p.map(f)


# 13. pair_left / pair_right / pair_both
def pair_left(p1: Parsec[T], p2: Parsec[Any]) -> Parsec[T]:
    """Applies p1 then p2, keeping only p1's results."""
    return p1 >> ignore(p2)


def pair_right(p1: Parsec[Any], p2: Parsec[U]) -> Parsec[U]:
    """Applies p1 then p2, keeping only p2's results."""
    return ignore(p1) >> p2


def pair_both(p1: Parsec[T], p2: Parsec[U]) -> Parsec[Tuple[T, U]]:
    """Applies p1 then p2, pushing their values as a single (left, right) tuple."""
    return sequence([p1, p2]).map(tuple)


# 14. between: Parses an opening parser, a main parser, and a closing parser
def between(open: Parsec[Any], close: Parsec[Any], p: Parsec[T]) -> Parsec[T]:
    """Parses 'open', then 'p', then 'close', keeping only the results of 'p'."""
    return pair_right(open, pair_left(p, close))


# 15. sepBy1: Parses one or more occurrences separated by a separator
def sep_by1(p: Parsec[T], sep: Parsec[Any]) -> Parsec[List[T]]:
    """
    Parses one or more occurrences of p separated by sep, pushing a list of p's results.
    A trailing separator is left unconsumed.
    """
    return p.bind(lambda x: many(pair_right(sep, p)).map(lambda xs: [x] + xs))


# 16. sepBy: Parses zero or more occurrences separated by a separator
def sep_by(p: Parsec[T], sep: Parsec[Any]) -> Parsec[List[T]]:
    return either(sep_by1(p, sep), pure([]))


# 17. endBy: Parses zero or more occurrences, each ended by a separator
def end_by(p: Parsec[T], sep: Parsec[Any]) -> Parsec[List[T]]:
    return many(pair_left(p, sep))


# 18. endBy1: Parses one or more occurrences, each ended by a separator
def end_by1(p: Parsec[T], sep: Parsec[Any]) -> Parsec[List[T]]:
    return many1(pair_left(p, sep))


# 19. label: Function form of Parsec.label
def label(p: Parsec[T], msg: str) -> Parsec[T]:
    return p.label(msg)


# 20. eof: Succeeds only at the end of input
def eof() -> Parsec[None]:
    """Succeeds, pushing nothing, only if no input remains."""
    def parse(state: State) -> State:
        if state.remaining == 0:
            return state
        unit = "bits" if state.is_binary else "characters"
        return state.fail(
            f"Expected end of input at line {state.line}, column {state.column + 1}, "
            f"but {state.remaining} {unit} remain."
        )
    return Parsec(parse, "eof")


# 21. lookAhead: Parses without consuming input
def look_ahead(p: Parsec[T]) -> Parsec[T]:
    """Applies p and keeps its results, but leaves the position where it was."""
    def parse(state: State) -> State:
        new_state = p(state)
        if new_state.status is Status.ERROR:
            return new_state
        return replace(state, results=new_state.results)
    return Parsec(parse, "look_ahead")


# 22. notFollowedBy: Succeeds only if a parser fails
def not_followed_by(p: Parsec[Any]) -> Parsec[None]:
    """Succeeds without consuming or pushing anything if p fails here."""
    def parse(state: State) -> State:
        attempt = p(state)
        if attempt.status is Status.ERROR:
            return state
        values, _ = produced(state, attempt)
        found = collapse(values) if values else "a successful parse"
        return state.fail(
            f"Unexpected {found!r} at line {state.line}, column {state.column + 1}."
        )
    return Parsec(parse, "not_followed_by")


# 23. manyTill: Parses p zero or more times until end succeeds
def many_till(p: Parsec[T], end: Parsec[Any]) -> Parsec[List[T]]:
    """
    Applies p until end succeeds, pushing a list of p's results.
    The results of end are discarded, its input is consumed.
    """
    def parse(state: State) -> State:
        values: List[Any] = []
        current_state = state
        while True:
            finished = end(current_state)
            if finished.status is Status.OK:
                return replace(finished, results=state.results.push(values))
            attempt = p(current_state)
            if attempt.status is Status.ERROR:
                return attempt.fail(f"{finished.error}, or: {attempt.error}")
            if attempt.offset == current_state.offset:
                return current_state.fail(
                    f"many_till: applied parser succeeded without consuming input "
                    f"at line {current_state.line}, column {current_state.column + 1}."
                )
            pushed, base = produced(current_state, attempt)
            if pushed:
                values.append(collapse(pushed))
            current_state = replace(attempt, results=base)
    return Parsec(parse, "many_till")


def _preview(state: State, width: int = 30) -> str:
    if state.is_binary:
        rest = state.input[:width // 2]
        return f"{rest.hex()}{'...' if state.remaining > len(rest) * 8 else ''} (bit {state.offset})"
    rest = state.input
    return f"\"{rest[:width]}{'...' if len(rest) > width else ''}\""


# 24. parserTrace: Debugging parser that logs the remaining input
def parser_trace(label_str: str) -> Parsec[None]:
    def parse(state: State) -> State:
        log.debug("%s: %s at %s", label_str, _preview(state), state.pos)
        return state
    return Parsec(parse, "parser_trace")


# 25. parserTraced: Debugging parser that traces execution and backtracking
def parser_traced(label_str: str, p: Parsec[T]) -> Parsec[T]:
    trace_enter = parser_trace(label_str)

    def parse(state: State) -> State:
        new_state = p(trace_enter(state))
        if new_state.status is Status.ERROR:
            log.debug("%s backtracked: %s", label_str, new_state.error)
            return new_state.fail(f"{label_str} backtracked and parser failed: {new_state.error}")
        return new_state
    return Parsec(parse, "parser_traced")
