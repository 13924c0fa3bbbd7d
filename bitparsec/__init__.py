import logging

# Core
from .Parsec import Parsec, State, Status, ResultStack, SourcePos, ParseError, ParseFailure
from .Prim import run_parser, parse, initial_state, pure, fail, lazy, combinator, many, skip_many

# Combinators
from .Combinators import (
    choice, either, option, option_maybe, optional, ignore,
    many1, skip_many1, count, sequence, pipe, map_,
    pair_left, pair_right, pair_both, between,
    sep_by, sep_by1, end_by, end_by1, label,
    eof, look_ahead, not_followed_by, many_till,
    parser_trace, parser_traced
)

# Binary
from .Binary import Bits, Endianness, bits, bytes_, uint, int_, float_

# Characters
from .Char import (
    satisfy, char, string, any_char, one_of, none_of,
    digit, hex_digit, letter, alpha_num, upper, lower,
    space, spaces, newline, tab
)

logging.getLogger(__name__).addHandler(logging.NullHandler())
