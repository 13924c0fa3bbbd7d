"""
Raw binary parsers: bit runs, byte runs, integers and floats.

All of them read `bytes` input at bit granularity, so they can follow each
other at any bit offset. Each successful parse pushes exactly one value and
moves the column by the number of bits consumed.
"""
import struct
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from .Parsec import Parsec, State, T
from .Prim import combinator


class Endianness(Enum):
    BIG = "be"
    LITTLE = "le"

    @property
    def label(self) -> str:
        return "big-endian" if self is Endianness.BIG else "little-endian"


EndiannessLike = Union[Endianness, str]

_ENDIANNESS_ALIASES = {
    "be": Endianness.BIG,
    "big": Endianness.BIG,
    "le": Endianness.LITTLE,
    "little": Endianness.LITTLE,
}


def endianness_of(tag: EndiannessLike) -> Endianness:
    """Resolve an endianness tag; "native" follows the host byte order."""
    if isinstance(tag, Endianness):
        return tag
    if tag == "native":
        return _ENDIANNESS_ALIASES[sys.byteorder]
    try:
        return _ENDIANNESS_ALIASES[tag]
    except (KeyError, TypeError):
        raise ValueError(
            f"unknown endianness {tag!r}, expected one of 'be', 'le', 'big', 'little', 'native'"
        ) from None


@dataclass(frozen=True)
class Bits:
    """A run of `length` bits; `value` holds them with the first bit most significant."""
    value: int
    length: int

    def __len__(self) -> int:
        return self.length

    def __str__(self) -> str:
        return format(self.value, f"0{self.length}b") if self.length else ""

    def tobytes(self) -> bytes:
        """Pack the bits from the left, padding the last byte with zero bits."""
        pad = -self.length % 8
        return (self.value << pad).to_bytes((self.length + pad) // 8, "big")


def _check_width(n: int, what: str) -> None:
    if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
        raise ValueError(f"{what} must be a positive integer, got {n!r}")


def _require_binary(state: State, name: str) -> None:
    if not state.is_binary:
        raise TypeError(f"{name} parses bytes input, not {type(state.source).__name__}")


def _read_bits(source: bytes, offset: int, n: int) -> int:
    """The n bits at bit `offset`, first bit most significant. Caller checks bounds."""
    start = offset >> 3
    end = (offset + n + 7) >> 3
    chunk = int.from_bytes(source[start:end], "big")
    trailing = end * 8 - (offset + n)
    return (chunk >> trailing) & ((1 << n) - 1)


def _little_endian(raw: int, size: int) -> int:
    """
    Reorder a bit run read big-endian into its little-endian value: 8-bit
    chunks from the front, least significant first, with the final chunk
    holding the leftover size % 8 bits.
    """
    value = 0
    shift = 0
    remaining = size
    while remaining > 0:
        width = 8 if remaining >= 8 else remaining
        remaining -= width
        value |= ((raw >> remaining) & ((1 << width) - 1)) << shift
        shift += width
    return value


def _signed(value: int, size: int) -> int:
    if value & (1 << (size - 1)):
        return value - (1 << size)
    return value


def _take(name: str, size: int, describe: str, decode: Callable[[int], T]) -> Parsec[T]:
    """Build a parser consuming exactly `size` bits and pushing decode(raw)."""
    def parse(state: State) -> State:
        _require_binary(state, name)
        if state.remaining < size:
            return state.fail(
                f"Expected {describe} starting at position {state.column + 1}, "
                f"but encountered end of input."
            )
        raw = _read_bits(state.source, state.offset, size)
        return state.advance(size, size, decode(raw))
    return Parsec(parse, name)


@combinator
def bits(n: int) -> Parsec[Bits]:
    """
    Parses n bits, pushing them as a Bits value.

    Example: `run_parser(bits(8), b"Hi")` gives `([Bits(value=72, length=8)], None)`.
    """
    _check_width(n, "bit count")
    return _take(f"bits({n})", n, f"{n} bits", lambda raw: Bits(raw, n))


@combinator
def bytes_(n: int) -> Parsec[bytes]:
    """
    Parses n bytes, pushing them as `bytes`. The run need not be byte-aligned.

    Example: `run_parser(bytes_(1), b"Hi")` gives `([b'H'], None)`.
    """
    _check_width(n, "byte count")
    size = n * 8
    return _take(f"bytes({n})", size, f"{n} bytes", lambda raw: raw.to_bytes(n, "big"))


@combinator
def uint(size: int, endianness: EndiannessLike = Endianness.BIG) -> Parsec[int]:
    """
    Parses an unsigned, size-bit integer with the given endianness.

    Example: `run_parser(uint(16, "be"), (85).to_bytes(2, "big") + b"-90")` gives `([85], None)`.
    """
    _check_width(size, "integer size")
    order = endianness_of(endianness)
    describe = f"{size}-bit, unsigned, {order.label} integer"
    if order is Endianness.BIG:
        return _take(f"uint({size}, be)", size, describe, lambda raw: raw)
    return _take(f"uint({size}, le)", size, describe,
                 lambda raw: _little_endian(raw, size))


@combinator
def int_(size: int, endianness: EndiannessLike = Endianness.BIG) -> Parsec[int]:
    """
    Parses a two's-complement signed, size-bit integer with the given endianness.
    The sign bit is the top bit of the value once byte order is resolved.

    Example: `run_parser(int_(16, "be"), (-85).to_bytes(2, "big", signed=True))` gives `([-85], None)`.
    """
    _check_width(size, "integer size")
    order = endianness_of(endianness)
    describe = f"{size}-bit, signed, {order.label} integer"
    if order is Endianness.BIG:
        return _take(f"int({size}, be)", size, describe,
                     lambda raw: _signed(raw, size))
    return _take(f"int({size}, le)", size, describe,
                 lambda raw: _signed(_little_endian(raw, size), size))


_FLOAT_FORMATS = {32: "f", 64: "d"}


@combinator
def float_(size: int, endianness: EndiannessLike = Endianness.BIG) -> Parsec[float]:
    """
    Parses an IEEE-754 binary32 or binary64 number.

    Example: `run_parser(float_(32), struct.pack(">f", 2.5))` gives `([2.5], None)`.
    """
    _check_width(size, "float size")
    if size not in _FLOAT_FORMATS:
        raise ValueError(f"float size must be 32 or 64, got {size!r}")
    order = endianness_of(endianness)
    fmt = (">" if order is Endianness.BIG else "<") + _FLOAT_FORMATS[size]
    width = size // 8

    def decode(raw: int) -> float:
        return struct.unpack(fmt, raw.to_bytes(width, "big"))[0]

    return _take(f"float({size}, {order.value})", size,
                 f"{size}-bit, {order.label} floating point number", decode)
