from __future__ import annotations

import logging
from fractions import Fraction

import numpy as np
import pytest
import sympy as sp

from kronpoly.errors import InvalidArgument, RangeError
from kronpoly.kronecker_monomial import KroneckerMonomial, kronecker_monomial_type
from kronpoly.monomial import Monomial
from kronpoly.settings import settings_override
from kronpoly.symbol_utils import SymbolSet
from kronpoly.term import Term
from kronpoly.term_multiplication import (
    multiply_term_sets,
    multiply_terms,
    new_term_buffer,
    validate_product_range,
)

KM = KroneckerMonomial
XY = SymbolSet(["x", "y"])


def test_new_term_buffer_has_arity_slots() -> None:
    assert new_term_buffer(KM) == [None]
    assert new_term_buffer(Monomial) == [None]


def test_multiply_terms_delegates_to_key_type() -> None:
    out = new_term_buffer(KM)
    multiply_terms(out, Term(2, KM([1, -1])), Term(-4, KM([2, 0])), XY)
    assert out[0].cf == -8
    assert out[0].key.unpack(XY).tolist() == [3, -1]
    out = new_term_buffer(Monomial)
    multiply_terms(out, Term(2, Monomial([1, 0])), Term(3, Monomial([0, 1])), XY)
    assert out[0] == Term(6, Monomial([1, 1]))


def test_multiply_terms_rational_numerators() -> None:
    out = new_term_buffer(KM)
    multiply_terms(out, Term(Fraction(2, 3), KM([1, -1])), Term(Fraction(-4, 5), KM([2, 0])), XY)
    assert out[0].cf == -8


def test_multiply_terms_rejects_small_buffer() -> None:
    with pytest.raises(InvalidArgument, match="needs 1"):
        multiply_terms([], Term(1, KM()), Term(1, KM()), [])


def test_debug_checks_assert_compatibility() -> None:
    K8 = kronecker_monomial_type(np.int8)
    bad = Term(1, K8.from_int(100))
    good = Term(1, K8([1, 1]))
    out = new_term_buffer(K8)
    with settings_override(debug_checks=True):
        with pytest.raises(AssertionError, match="not compatible"):
            multiply_terms(out, bad, good, XY)
        with pytest.raises(AssertionError, match="cannot multiply"):
            multiply_terms(out, good, Term(1, KM([1, 1])), XY)
    with settings_override(debug_checks=False):
        multiply_terms(out, bad, good, XY)
        assert out[0].key.get_int() == 100 + good.key.get_int()


def test_validate_product_range_accepts_in_bound_sets() -> None:
    K8 = kronecker_monomial_type(np.int8)
    a = [K8([1, -1]), K8([0, 1])]
    b = [K8([1, 0]), K8([-1, 1])]
    validate_product_range(a, b, XY)
    validate_product_range([], b, XY)


def test_validate_product_range_detects_overflow(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="kronpoly.term_multiplication")
    K8 = kronecker_monomial_type(np.int8)
    a = [K8([2, 0]), K8([0, 0])]
    b = [K8([1, 0])]
    with pytest.raises(RangeError, match="exponent of 'x' ranges over \\[1, 3\\]"):
        validate_product_range(a, b, XY)
    assert any("failed" in rec.getMessage() for rec in caplog.records)
    with pytest.raises(RangeError, match="'y'"):
        validate_product_range([K8([0, -2])], [K8([0, -1])], XY)


def test_validate_product_range_checks_compatibility() -> None:
    K8 = kronecker_monomial_type(np.int8)
    with pytest.raises(InvalidArgument, match="not compatible"):
        validate_product_range([K8.from_int(100)], [K8()], XY)


def test_validate_product_range_dense_keys_have_no_bound() -> None:
    validate_product_range([Monomial([10**9, 0])], [Monomial([10**9, 0])], XY)


def test_multiply_term_sets_accumulates() -> None:
    x_plus_y = [Term(1, KM([1, 0])), Term(1, KM([0, 1]))]
    x_minus_y = [Term(1, KM([1, 0])), Term(-1, KM([0, 1]))]
    res = multiply_term_sets(x_plus_y, x_minus_y, XY)
    assert {t.key.format(XY): t.cf for t in res} == {"x**2": 1, "y**2": -1}
    res = multiply_term_sets(x_plus_y, x_plus_y, XY)
    assert [(t.cf, t.key.format(XY)) for t in res] == [(1, "x**2"), (2, "x*y"), (1, "y**2")]
    assert multiply_term_sets([], x_plus_y, XY) == []


def test_multiply_term_sets_raises_before_overflow() -> None:
    K8 = kronecker_monomial_type(np.int8)
    a = [Term(1, K8([2, 0]))]
    with pytest.raises(RangeError):
        multiply_term_sets(a, a, XY)


def test_multiply_term_sets_dense() -> None:
    half = Fraction(1, 2)
    a = [Term(1, Monomial([half, 0])), Term(1, Monomial([0, 1]))]
    res = multiply_term_sets(a, a, XY)
    assert {t.key: t.cf for t in res} == {
        Monomial([1, 0]): 1,
        Monomial([half, 1]): 2,
        Monomial([0, 2]): 1,
    }


def test_multiply_term_sets_rational_coefficients_are_exact() -> None:
    a = [Term(Fraction(1, 2), KM([1, 0]))]
    b = [Term(Fraction(1, 3), KM([1, 0]))]
    res = multiply_term_sets(a, b, XY)
    assert res == [Term(Fraction(1, 6), KM([2, 0]))]

    # (x/2 + y) * (x - y/3) = x**2/2 + 5*x*y/6 - y**2/3
    a = [Term(Fraction(1, 2), KM([1, 0])), Term(1, KM([0, 1]))]
    b = [Term(1, KM([1, 0])), Term(Fraction(-1, 3), KM([0, 1]))]
    res = multiply_term_sets(a, b, XY)
    assert {t.key.format(XY): t.cf for t in res} == {
        "x**2": Fraction(1, 2),
        "x*y": Fraction(5, 6),
        "y**2": Fraction(-1, 3),
    }


def test_multiply_term_sets_integral_results_are_ints() -> None:
    a = [Term(Fraction(3, 2), KM([1, 0]))]
    b = [Term(4, KM([0, 1]))]
    res = multiply_term_sets(a, b, XY)
    assert res == [Term(6, KM([1, 1]))]
    assert type(res[0].cf) is int


def test_multiply_term_sets_sympy_rationals() -> None:
    a = [Term(sp.Rational(2, 3), KM([1, 0])), Term(sp.Integer(-1), KM([0, 0]))]
    b = [Term(sp.Rational(1, 5), KM([1, 0])), Term(sp.Rational(1, 4), KM([0, 0]))]
    res = {t.key.format(XY): t.cf for t in multiply_term_sets(a, b, XY)}
    assert res == {
        "x**2": sp.Rational(2, 15),
        "x": sp.Rational(2, 3) / 4 - sp.Rational(1, 5),
        "": sp.Rational(-1, 4),
    }


def test_multiply_term_sets_dense_rational_coefficients(caplog) -> None:
    half = Fraction(1, 2)
    a = [Term(half, Monomial([half, 0])), Term(Fraction(1, 3), Monomial([0, 1]))]
    with caplog.at_level(logging.DEBUG, logger="kronpoly.term_multiplication"):
        res = multiply_term_sets(a, a, XY)
    assert {t.key: t.cf for t in res} == {
        Monomial([1, 0]): Fraction(1, 4),
        Monomial([half, 1]): Fraction(1, 3),
        Monomial([0, 2]): Fraction(1, 9),
    }
    assert "rescaling rational operands by 6 and 6" in caplog.text
