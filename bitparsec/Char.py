from dataclasses import replace
from typing import Callable, Optional, Tuple

from .Parsec import Parsec, State
from .Prim import combinator, skip_many


def _peek(state: State, n: int) -> Tuple[Optional[str], str]:
    """
    Read n characters at the cursor without consuming them.
    Bytes input is read one Latin-1 character per byte and must be byte-aligned.
    Returns (text, "") or (None, reason) when the characters are not available.
    """
    if state.is_binary:
        if state.offset % 8:
            return None, "the input is not byte-aligned"
        start = state.offset >> 3
        chunk = state.source[start:start + n]
        if len(chunk) < n:
            return None, "encountered end of input"
        return chunk.decode("latin-1"), ""
    text = state.source[state.offset:state.offset + n]
    if len(text) < n:
        return None, "encountered end of input"
    return text, ""


def update_pos(line: int, column: int, text: str) -> Tuple[int, int]:
    """Position after reading text: a newline moves to the next line, column 0."""
    newlines = text.count("\n")
    if not newlines:
        return line, column + len(text)
    return line + newlines, len(text) - text.rfind("\n") - 1


def _consume(state: State, text: str) -> State:
    line, column = update_pos(state.line, state.column, text)
    units = len(text) * 8 if state.is_binary else len(text)
    return replace(
        state,
        offset=state.offset + units,
        line=line,
        column=column,
        results=state.results.push(text),
    )


def _expected(state: State, what: str, reason: str) -> State:
    return state.fail(
        f"Expected {what} at line {state.line}, column {state.column + 1}, but {reason}."
    )


# Core function: Succeeds if the character satisfies a predicate
@combinator
def satisfy(f: Callable[[str], bool], description: str = "a matching character") -> Parsec[str]:
    """Succeeds for any character where f returns True. Pushes the parsed character."""
    def parse(state: State) -> State:
        token, reason = _peek(state, 1)
        if token is None:
            return _expected(state, description, reason)
        if not f(token):
            return _expected(state, description, f"found {token!r}")
        return _consume(state, token)
    return Parsec(parse, description)


# Parses a single character c and pushes it
@combinator
def char(c: str) -> Parsec[str]:
    return satisfy(lambda x: x == c, repr(c))


# Parses the exact string s and pushes it
@combinator
def string(s: str) -> Parsec[str]:
    def parse(state: State) -> State:
        found, reason = _peek(state, len(s))
        if found is None:
            return _expected(state, repr(s), reason)
        if found != s:
            return _expected(state, repr(s), f"found {found!r}")
        return _consume(state, found)
    return Parsec(parse, repr(s))


@combinator
def any_char() -> Parsec[str]:
    return satisfy(lambda _: True, "any character")


@combinator
def one_of(cs: str) -> Parsec[str]:
    """Succeeds if the current character is in cs."""
    return satisfy(lambda c: c in cs, f"one of {''.join(cs)!r}")


@combinator
def none_of(cs: str) -> Parsec[str]:
    """Succeeds if the current character is not in cs."""
    return satisfy(lambda c: c not in cs, f"none of {''.join(cs)!r}")


@combinator
def digit() -> Parsec[str]:
    return satisfy(lambda c: c in "0123456789", "digit")


@combinator
def hex_digit() -> Parsec[str]:
    return satisfy(lambda c: c in "0123456789abcdefABCDEF", "hexadecimal digit")


@combinator
def letter() -> Parsec[str]:
    return satisfy(str.isalpha, "letter")


@combinator
def alpha_num() -> Parsec[str]:
    return satisfy(str.isalnum, "letter or digit")


@combinator
def upper() -> Parsec[str]:
    return satisfy(str.isupper, "uppercase letter")


@combinator
def lower() -> Parsec[str]:
    return satisfy(str.islower, "lowercase letter")


@combinator
def space() -> Parsec[str]:
    return satisfy(str.isspace, "space")


# Skips zero or more whitespace characters, pushing nothing
@combinator
def spaces() -> Parsec[None]:
    return skip_many(space())


@combinator
def newline() -> Parsec[str]:
    return char("\n")


@combinator
def tab() -> Parsec[str]:
    return char("\t")
