from __future__ import annotations

from fractions import Fraction

import numpy as np
import pytest
import sympy as sp

from kronpoly.errors import InvalidArgument, RangeError
from kronpoly.kronecker_monomial import KroneckerMonomial, kronecker_monomial_type
from kronpoly.monomial import Monomial
from kronpoly.sympy_bridge import key_to_expr, terms_from_expr, terms_to_expr
from kronpoly.term_multiplication import multiply_term_sets

x, y, z = sp.symbols("x y z")


def test_key_to_expr() -> None:
    assert key_to_expr(KroneckerMonomial([2, -1]), ["x", "y"]) == x**2 / y
    assert key_to_expr(KroneckerMonomial([0, 0]), ["x", "y"]) == 1
    assert key_to_expr(Monomial([Fraction(1, 2)]), ["x"]) == sp.sqrt(x)


def test_terms_from_expr_collects_symbols_and_terms() -> None:
    ss, terms = terms_from_expr(3 * x**2 * y - 1 / y + 5)
    assert list(ss) == ["x", "y"]
    got = {t.key.format(ss): t.cf for t in terms}
    assert got == {"x**2*y": 3, "y**-1": -1, "": 5}


def test_terms_from_expr_accepts_strings_and_extra_symbols() -> None:
    ss, terms = terms_from_expr("x*y", symbols=["z"])
    assert list(ss) == ["x", "y", "z"]
    assert [t.key.unpack(ss).tolist() for t in terms] == [[1, 1, 0]]


def test_terms_from_expr_expands() -> None:
    ss, terms = terms_from_expr((x + y) ** 2)
    assert sorted((t.key.format(ss), int(t.cf)) for t in terms) == [("x*y", 2), ("x**2", 1), ("y**2", 1)]


def test_terms_from_expr_zero() -> None:
    ss, terms = terms_from_expr(sp.Integer(0))
    assert list(ss) == []
    assert terms == []


def test_terms_from_expr_rejects_non_monomials() -> None:
    with pytest.raises(InvalidArgument, match="not a power of a symbol"):
        terms_from_expr(sp.sin(x) + y)
    with pytest.raises(InvalidArgument, match="cannot be Kronecker-encoded"):
        terms_from_expr(sp.sqrt(x))


def test_terms_from_expr_dense_rational_exponents() -> None:
    ss, terms = terms_from_expr(sp.sqrt(x) * y + 2, key_type=Monomial)
    keys = {t.key: t.cf for t in terms}
    assert keys == {Monomial([Fraction(1, 2), 1]): 1, Monomial([0, 0]): 2}


def test_terms_from_expr_narrow_width_overflow() -> None:
    K8 = kronecker_monomial_type(np.int8)
    with pytest.raises(RangeError):
        terms_from_expr(x**3 * y, key_type=K8)


def test_round_trip_through_sympy() -> None:
    expr = sp.expand(2 * x**3 * y**-2 - x * z + sp.Rational(1, 3))
    ss, terms = terms_from_expr(expr)
    assert sp.simplify(terms_to_expr(terms, ss) - expr) == 0


@pytest.mark.parametrize(
    ("a", "b"),
    [
        (x + y, x - y),
        (x**2 + 2 * x * y - 1 / z, y - 3 * z**2),
        (x / y + 1, y / x - 1),
        (x / 2 + y, x - y / 3),
        (sp.Rational(2, 3) * x - 1, x / 5 + sp.Rational(1, 4)),
    ],
)
def test_term_products_agree_with_sympy(a, b) -> None:
    ss, _ = terms_from_expr(a * b, symbols=sorted(s.name for s in (a + b).free_symbols))
    _, ta = terms_from_expr(a, symbols=ss)
    _, tb = terms_from_expr(b, symbols=ss)
    product = multiply_term_sets(ta, tb, ss)
    assert sp.expand(terms_to_expr(product, ss) - a * b) == 0
