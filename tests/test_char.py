from hypothesis import given
from hypothesis import strategies as st

from bitparsec.Binary import bits, uint
from bitparsec.Char import (
    alpha_num,
    any_char,
    char,
    digit,
    hex_digit,
    letter,
    lower,
    newline,
    none_of,
    one_of,
    satisfy,
    spaces,
    string,
    tab,
    update_pos,
    upper,
)
from bitparsec.Combinators import many
from bitparsec.Parsec import State
from bitparsec.Prim import run_parser


def run(parser, input_str):
    return run_parser(parser, input_str)


# --- Basic Character Parsers ---


@given(st.characters())
def test_char_parser(c):
    # Should match the character
    res, err = run(char(c), c)
    assert res == [c]
    assert err is None

    # Should fail on different character
    diff = chr((ord(c) + 1) % 0x110000)
    res_fail, err_fail = run(char(c), diff)
    assert res_fail is None
    assert err_fail is not None


@given(st.characters(), st.text())
def test_satisfy(c, text):
    # Predicate: matches specific char
    p = satisfy(lambda x: x == c)

    if text.startswith(c):
        res, _ = run(p, text)
        assert res == [c]
    else:
        res, err = run(p, text)
        assert res is None
        assert err is not None


def test_char_messages():
    _, err = run(char('a'), "b")
    assert err.message == "Expected 'a' at line 1, column 1, but found 'b'."
    _, err = run(char('a'), "")
    assert err.message == "Expected 'a' at line 1, column 1, but encountered end of input."


def test_character_classes():
    assert run(digit(), "7")[0] == ["7"]
    assert run(hex_digit(), "F")[0] == ["F"]
    assert run(hex_digit(), "g")[0] is None
    assert run(letter(), "x")[0] == ["x"]
    assert run(letter(), "1")[0] is None
    assert run(alpha_num(), "1")[0] == ["1"]
    assert run(upper(), "A")[0] == ["A"]
    assert run(lower(), "A")[0] is None
    assert run(one_of("xyz"), "y")[0] == ["y"]
    assert run(none_of("xyz"), "y")[0] is None
    assert run(any_char(), "\n")[0] == ["\n"]
    assert run(tab(), "\t")[0] == ["\t"]


def test_spaces_pushes_nothing():
    assert run(spaces() >> char('x'), " \t\n x")[0] == ['x']
    assert run(spaces() >> char('x'), "x")[0] == ['x']


# --- Strings ---


def test_string():
    assert run(string("hello"), "hello world")[0] == ["hello"]
    _, err = run(string("hello"), "help me")
    assert err.message == "Expected 'hello' at line 1, column 1, but found 'help '."
    _, err = run(string("hello"), "hel")
    assert "end of input" in err.message


# --- Positions ---


def test_newline_moves_to_next_line():
    final = (char('a') >> newline() >> char('b'))(State("a\nb"))
    assert (final.line, final.column) == (2, 1)
    assert final.offset == 3


def test_string_across_lines():
    final = string("ab\ncd")(State("ab\ncde"))
    assert (final.line, final.column) == (2, 2)


def test_error_position_on_later_line():
    _, err = run(string("ab\n") >> char('x'), "ab\ny")
    assert (err.line, err.column) == (2, 0)
    assert str(err) == "Parse error at line 2, column 1: Expected 'x' at line 2, column 1, but found 'y'."


def slow_reference_update(line, column, text):
    for c in text:
        if c == "\n":
            line, column = line + 1, 0
        else:
            column += 1
    return line, column


@given(st.text())
def test_fast_pos_update_matches_reference(text):
    assert update_pos(1, 0, text) == slow_reference_update(1, 0, text)


# --- Text parsers over bytes ---


def test_magic_then_integer():
    res, err = run(string("PNG") >> uint(16), b"PNG\x00\x10")
    assert err is None
    assert res == ["PNG", 16]


def test_bytes_input_reads_latin1_characters():
    final = many(letter())(State(b"ab\xe9!"))
    assert final.results.to_list() == [["a", "b", "\xe9"]]
    assert final.offset == 24
    assert final.column == 3


def test_unaligned_text_read_fails():
    _, err = run(bits(1) >> char('a'), b"aa")
    assert "not byte-aligned" in err.message
