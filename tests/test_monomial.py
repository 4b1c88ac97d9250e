from __future__ import annotations

import io
from fractions import Fraction

import numpy as np
import pytest
import sympy as sp

from kronpoly.errors import InvalidArgument, PowerDivisorZeroError
from kronpoly.keys import MonomialKey
from kronpoly.kronecker_monomial import KroneckerMonomial
from kronpoly.monomial import Monomial
from kronpoly.symbol_utils import SymbolSet
from kronpoly.term import Term

XY = SymbolSet(["x", "y"])
HALF = Fraction(1, 2)


def test_both_key_types_satisfy_protocol() -> None:
    assert isinstance(Monomial([1]), MonomialKey)
    assert isinstance(KroneckerMonomial([1]), MonomialKey)
    assert Monomial.multiply_arity == KroneckerMonomial.multiply_arity == 1


def test_construction() -> None:
    assert Monomial().exponents == ()
    assert Monomial(XY).exponents == (0, 0)
    assert Monomial(None, XY).exponents == (0, 0)
    assert Monomial([1, HALF]).exponents == (1, HALF)
    assert Monomial([Fraction(4, 2)]).exponents == (2,)
    assert Monomial([sp.Rational(3, 2)]).exponents == (Fraction(3, 2),)
    assert Monomial(KroneckerMonomial([2, -1]), XY) == Monomial([2, -1])
    with pytest.raises(InvalidArgument, match="differs from the size of the symbol set"):
        Monomial([1], XY)
    with pytest.raises(TypeError, match="float"):
        Monomial([0.5])


def test_no_width_limit() -> None:
    m = Monomial([10**6, -(10**6)])
    assert m.degree(XY) == 0
    assert m.format(XY) == "x**1000000*y**-1000000"


def test_queries() -> None:
    m = Monomial([1, -3])
    assert m.is_compatible(XY)
    assert not m.is_compatible(["x"])
    assert not m.is_unitary(XY)
    assert Monomial([0, 0]).is_unitary(XY)
    assert m.degree(XY) == -2
    assert m.ldegree(XY, [1]) == -3
    assert Monomial([HALF, HALF]).degree(XY) == 1
    with pytest.raises(InvalidArgument, match="size of only 2"):
        m.degree(XY, [2])
    with pytest.raises(InvalidArgument, match="negative value -1"):
        m.degree(XY, [-1])
    with pytest.raises(InvalidArgument):
        m.is_unitary(["x"])
    assert m.unpack(XY) == (1, -3)


def test_hash_and_equality() -> None:
    assert Monomial([1, 2]) == Monomial([1, 2])
    assert Monomial([1, 2]) != Monomial([2, 1])
    assert hash(Monomial([1, 2])) == Monomial([1, 2]).hash()
    assert len({Monomial([1]), Monomial([1]), Monomial([HALF])}) == 2


def test_printing() -> None:
    buf = io.StringIO()
    Monomial([-1, -2]).print(buf, XY)
    assert buf.getvalue() == "x**-1*y**-2"
    assert Monomial([HALF, 1]).format(XY) == "x**(1/2)*y"
    assert Monomial([Fraction(-1, 2), 0]).format(XY) == "x**(-1/2)"
    buf = io.StringIO()
    Monomial([-1, -2]).print_tex(buf, XY)
    assert buf.getvalue() == "\\frac{1}{{x}{y}^{2}}"
    assert Monomial([HALF, 0]).format_tex(XY) == "{x}^{\\frac{1}{2}}"
    assert Monomial([0, Fraction(-3, 2)]).format_tex(XY) == "\\frac{1}{{y}^{\\frac{3}{2}}}"


def test_merge_and_trim() -> None:
    m = Monomial([-1, HALF])
    assert m.merge_symbols({0: ["a"], 2: ["z"]}, XY) == Monomial([0, -1, HALF, 0])
    with pytest.raises(InvalidArgument, match="cannot be empty"):
        m.merge_symbols({}, XY)
    mask = [True, True]
    Monomial([0, 3]).trim_identify(mask, XY)
    assert mask == [True, False]
    assert Monomial([0, 3]).trim([True, False], XY) == Monomial([3])
    with pytest.raises(InvalidArgument):
        m.trim([True], XY)


def test_multiply() -> None:
    out = [None]
    Monomial.multiply(out, Term(2, Monomial([1, HALF])), Term(3, Monomial([1, HALF])), XY)
    assert out[0].cf == 6
    assert out[0].key == Monomial([2, 1])
    assert out[0].key.exponents == (2, 1)
    assert all(type(e) is int for e in out[0].key.exponents)
    assert Monomial.multiply_monomials(Monomial([1]), Monomial([-1]), ["x"]) == Monomial([0])


def test_partial_and_integrate() -> None:
    assert Monomial([HALF, 2]).partial([0], XY) == (HALF, Monomial([Fraction(-1, 2), 2]))
    assert Monomial([1, 2]).partial([], XY) == (0, Monomial([0, 0]))
    assert Monomial([2, 1]).partial(np.int64(0), XY) == (2, Monomial([1, 1]))
    assert Monomial([2, 1]).partial(1, XY) == (1, Monomial([2, 0]))
    with pytest.raises(InvalidArgument, match="exponent of the variable is zero"):
        Monomial([0, 2]).partial([0], XY)
    assert Monomial([HALF, 0]).integrate("x", XY) == (Fraction(3, 2), Monomial([Fraction(3, 2), 0]))
    assert Monomial([1, 1]).integrate("w", XY) == (1, Monomial([1, 1, 1]))
    with pytest.raises(InvalidArgument, match="negative unitary exponent"):
        Monomial([-1, 0]).integrate("x", XY)


def test_evaluate() -> None:
    assert Monomial([2, -1]).evaluate({0: 3, 1: 2}, XY) == Fraction(9, 2)
    assert Monomial([HALF, 0]).evaluate({0: 4.0, 1: 1}, XY) == pytest.approx(2.0)
    a = sp.Symbol("a")
    assert Monomial([HALF, 0]).evaluate({0: a, 1: 1}, XY) == sp.sqrt(a)
    with pytest.raises(InvalidArgument):
        Monomial([1, 1]).evaluate({0: 1}, XY)


def test_subs_returns_list_of_pairs() -> None:
    res = Monomial([2, 3]).subs({1: -2}, XY)
    assert res == [(-8, Monomial([2, 0]))]
    assert Monomial([2, 3]).subs({}, XY) == [(1, Monomial([2, 3]))]


def test_ipow_subs_returns_list_of_pairs() -> None:
    assert Monomial([7, 1]).ipow_subs({0: 2}, 3, XY) == [(4, Monomial([1, 1]))]
    assert Monomial([HALF * 5, 0]).ipow_subs({0: 3}, 2, XY) == [(3, Monomial([HALF, 0]))]
    with pytest.raises(PowerDivisorZeroError):
        Monomial([1, 1]).ipow_subs({0: 2}, 0, XY)
