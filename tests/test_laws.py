# tests/test_laws.py
from hypothesis import given, strategies as st

from bitparsec.Binary import bits, uint
from bitparsec.Parsec import State
from bitparsec.Prim import pure, fail

# Strategy to generate arbitrary values
vals = st.integers() | st.text()


def run_p(p, input_data=""):
    """Helper to run a parser on a fresh state"""
    return p(State(input_data))


# 1. Left Identity: return a >>= f  === f a
@given(vals)
def test_monad_left_identity(v):
    f = lambda x: pure(x)  # Simple f

    lhs = pure(v).bind(f)
    rhs = f(v)

    # We compare the RESULTS of running the parsers
    res_lhs = run_p(lhs)
    res_rhs = run_p(rhs)

    assert res_lhs.results.to_list() == res_rhs.results.to_list()
    assert res_lhs.offset == res_rhs.offset


# 2. Right Identity: m >>= return === m
@given(st.binary(min_size=1))
def test_monad_right_identity(data):
    m = uint(8)

    res_lhs = run_p(m.bind(pure), data)
    res_rhs = run_p(m, data)

    assert res_lhs.results.to_list() == res_rhs.results.to_list()
    assert res_lhs.offset == res_rhs.offset


# 3. Associativity: (m >>= f) >>= g === m >>= (\x -> f x >>= g)
@given(st.integers())
def test_monad_associativity(v):
    m = pure(v)
    f = lambda x: pure(x + 1)
    g = lambda y: pure(y * 2)

    lhs = m.bind(f).bind(g)
    rhs = m.bind(lambda x: f(x).bind(g))

    assert run_p(lhs).results.to_list() == run_p(rhs).results.to_list()


# 4. Sequencing is associative: (a >> b) >> c === a >> (b >> c)
@given(st.binary(), st.integers(min_value=1, max_value=12))
def test_sequencing_associativity(data, n):
    a, b, c = bits(n), uint(n), bits(1)
    lhs = run_p((a >> b) >> c, data)
    rhs = run_p(a >> (b >> c), data)

    assert lhs.status == rhs.status
    assert lhs.offset == rhs.offset
    assert lhs.results.to_list() == rhs.results.to_list()
    assert lhs.error == rhs.error


# 5. Short-circuit: a failed state passes through any parser untouched
@given(st.binary(), st.text())
def test_failed_state_is_identity(data, msg):
    failed = run_p(fail(msg), data)
    for p in (bits(1), uint(8), pure(0), fail("other")):
        assert p(failed) is failed
