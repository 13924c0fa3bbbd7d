from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Generic, Iterator, List, Optional, Tuple, TypeVar, Union

Source = Union[str, bytes]

T = TypeVar("T")  # value pushed by a parser
U = TypeVar("U")


class Status(Enum):
    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class SourcePos:
    """Represents a position in the input stream. Columns are stored 0-based."""
    line: int = 1
    column: int = 0
    name: str = ""

    def __str__(self) -> str:
        prefix = f"{self.name} " if self.name else ""
        return f"{prefix}line {self.line}, column {self.column + 1}"


class ResultStack:
    """
    Persistent LIFO of parsed values, most recently produced first.

    Pushing shares the tail with the previous stack, so capturing a State
    before a branch costs nothing.
    """
    __slots__ = ("_head", "_tail", "_size")

    def __init__(self, head: Any = None, tail: Optional['ResultStack'] = None, size: int = 0):
        self._head = head
        self._tail = tail
        self._size = size

    def push(self, value: Any) -> 'ResultStack':
        return ResultStack(value, self, self._size + 1)

    def peek(self) -> Any:
        if not self._size:
            raise IndexError("peek from an empty result stack")
        return self._head

    def pop(self) -> Tuple[Any, 'ResultStack']:
        if not self._size:
            raise IndexError("pop from an empty result stack")
        return self._head, self._tail

    def take(self, n: int) -> Tuple[List[Any], 'ResultStack']:
        """Pop the top n values, returned in the order they were produced."""
        values = []
        stack = self
        for _ in range(n):
            value, stack = stack.pop()
            values.append(value)
        values.reverse()
        return values, stack

    def to_list(self) -> List[Any]:
        values = list(self)
        values.reverse()
        return values

    def __iter__(self) -> Iterator[Any]:
        node = self
        while node._size:
            yield node._head
            node = node._tail

    def __len__(self) -> int:
        return self._size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultStack):
            return NotImplemented
        return self._size == other._size and list(self) == list(other)

    def __hash__(self) -> int:
        return hash(tuple(self))

    def __repr__(self) -> str:
        return f"ResultStack({list(self)!r})"


EMPTY_RESULTS = ResultStack()


@dataclass(frozen=True)
class State:
    """
    Parser state threaded through every combinator.

    `offset` indexes `source` in characters for text and in bits for bytes;
    the remaining input is always `source` from `offset` onwards.
    """
    source: Source
    offset: int = 0
    line: int = 1
    column: int = 0
    results: ResultStack = EMPTY_RESULTS
    status: Status = Status.OK
    error: Optional[str] = None
    name: str = ""
    user: Any = None

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    @property
    def is_binary(self) -> bool:
        return isinstance(self.source, bytes)

    @property
    def pos(self) -> SourcePos:
        return SourcePos(self.line, self.column, self.name)

    @property
    def remaining(self) -> int:
        """Units left to consume: bits for binary sources, characters for text."""
        if self.is_binary:
            return len(self.source) * 8 - self.offset
        return len(self.source) - self.offset

    @property
    def input(self) -> Source:
        """
        The unconsumed suffix. Binary sources are rounded down to the byte
        holding the cursor; its first `bit_phase` bits are already consumed.
        """
        if self.is_binary:
            return self.source[self.offset >> 3:]
        return self.source[self.offset:]

    @property
    def bit_phase(self) -> int:
        """Bits of `input` before the cursor: offset % 8 for binary, always 0 for text."""
        return self.offset & 7 if self.is_binary else 0

    def push(self, value: Any) -> 'State':
        return replace(self, results=self.results.push(value))

    def advance(self, units: int, columns: int, value: Any) -> 'State':
        """Consume `units` of input, move the column and push one value."""
        return replace(
            self,
            offset=self.offset + units,
            column=self.column + columns,
            results=self.results.push(value),
        )

    def fail(self, message: str) -> 'State':
        return replace(self, status=Status.ERROR, error=message)

    def to_error(self) -> 'ParseError':
        return ParseError(self.pos, self.error or "unknown parse error")


@dataclass(frozen=True)
class ParseError:
    """Represents a parsing error with a message and position."""
    pos: SourcePos
    message: str

    @property
    def line(self) -> int:
        return self.pos.line

    @property
    def column(self) -> int:
        return self.pos.column

    def __str__(self) -> str:
        return f"Parse error at {self.pos}: {self.message}"


class ParseFailure(Exception):
    """Raised by `parse` when the top-level parser ends in an error state."""

    def __init__(self, error: ParseError):
        super().__init__(str(error))
        self.error = error


def produced(before: State, after: State) -> Tuple[List[Any], ResultStack]:
    """
    Split off the values pushed while going from `before` to `after`.

    Returns the values in production order and the stack beneath them.
    """
    n = len(after.results) - len(before.results)
    if n <= 0:
        return [], after.results
    return after.results.take(n)


def collapse(values: List[Any]) -> Any:
    """A single produced value stands for itself; anything else stays a list."""
    if len(values) == 1:
        return values[0]
    return values


class Parsec(Generic[T]):
    """
    A parser: a function from State to State.

    Calling a Parsec with a failed state returns that state untouched, so
    every parser, built-in or user-made, obeys the short-circuit rule.
    """
    def __init__(self, parse_fn: Callable[[State], State], name: str = ""):
        self.parse_fn = parse_fn
        self.name = name or getattr(parse_fn, "__name__", "parser")

    def __call__(self, state: State) -> State:
        if state.status is Status.ERROR:
            return state
        return self.parse_fn(state)

    def __repr__(self) -> str:
        return f"<Parsec {self.name}>"

    # Sequencing: results of both parsers are kept
    def then(self, other: 'Parsec[U]') -> 'Parsec[U]':
        def parse(state: State) -> State:
            return other(self(state))
        return Parsec(parse, "then")

    # Monadic bind: the values pushed by self are popped and handed to f
    def bind(self, f: Callable[[T], 'Parsec[U]']) -> 'Parsec[U]':
        def parse(state: State) -> State:
            new_state = self(state)
            if new_state.status is Status.ERROR:
                return new_state
            values, rest = produced(state, new_state)
            next_parser = f(collapse(values) if values else None)
            return next_parser(replace(new_state, results=rest))
        return Parsec(parse, "bind")

    # Sequence (>>): a parser on the right is sequenced, a function is bound
    def __rshift__(self, other: Union['Parsec[U]', Callable[[T], 'Parsec[U]']]) -> 'Parsec[U]':
        if isinstance(other, Parsec):
            return self.then(other)
        return self.bind(other)

    # Alternative (<|>), always restarting from the captured state
    def __or__(self, other: 'Parsec[T]') -> 'Parsec[T]':
        from .Combinators import either
        return either(self, other)

    # Pair (&): pushes a (left, right) tuple
    def __and__(self, other: 'Parsec[U]') -> 'Parsec[Tuple[T, U]]':
        from .Combinators import pair_both
        return pair_both(self, other)

    # Sequence (*>): keeps only the results of the right parser
    def __gt__(self, other: 'Parsec[U]') -> 'Parsec[U]':
        from .Combinators import pair_right
        return pair_right(self, other)

    # Sequence (<*): keeps only the results of the left parser
    def __lt__(self, other: 'Parsec[Any]') -> 'Parsec[T]':
        from .Combinators import pair_left
        return pair_left(self, other)

    # Functor map: replaces the values this parser pushed with f(values);
    # a parser that pushed nothing is left as it is
    def map(self, f: Callable[[T], U]) -> 'Parsec[U]':
        def parse(state: State) -> State:
            new_state = self(state)
            if new_state.status is Status.ERROR:
                return new_state
            values, rest = produced(state, new_state)
            if not values:
                return new_state
            return replace(new_state, results=rest.push(f(collapse(values))))
        return Parsec(parse, f"map({self.name})")

    # Label (<?>)
    def label(self, msg: str) -> 'Parsec[T]':
        def parse(state: State) -> State:
            new_state = self(state)
            if new_state.status is Status.ERROR:
                return new_state.fail(
                    f"Expected {msg} at line {state.line}, column {state.column + 1}."
                )
            return new_state
        return Parsec(parse, msg)
