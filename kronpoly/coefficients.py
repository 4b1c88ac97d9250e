"""Coefficient helpers used by the term multiplication hot path.

Rational coefficients get special treatment: a polynomial multiplier working
with rational coefficients first rescales both operands by the least common
multiple of their denominators, so only the numerators take part in the
term-by-term products. :func:`mul_coefficients` follows that contract and
multiplies numerators directly instead of building an intermediate rational.
:func:`common_denominator`, :func:`scale_to_integer` and
:func:`divide_coefficient` implement the rescaling around it.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from fractions import Fraction
from typing import Any

import sympy as sp

__all__ = [
    "is_rational",
    "numerator",
    "denominator",
    "mul_coefficients",
    "common_denominator",
    "scale_to_integer",
    "divide_coefficient",
]


def is_rational(value: Any) -> bool:
    """True for ``fractions.Fraction`` and non-integer ``sympy.Rational`` values."""
    if isinstance(value, Fraction):
        return True
    return isinstance(value, sp.Rational) and not isinstance(value, sp.Integer)


def numerator(value: Any) -> Any:
    if isinstance(value, Fraction):
        return value.numerator
    if isinstance(value, sp.Rational):
        return sp.Integer(value.p)
    return value


def mul_coefficients(a: Any, b: Any) -> Any:
    """Multiply two term coefficients.

    When both coefficients are rationals, only the numerators are multiplied
    (see the module docstring); otherwise ``a * b`` is returned.

    >>> from fractions import Fraction
    >>> mul_coefficients(Fraction(2, 3), Fraction(-4, 5))
    -8
    >>> mul_coefficients(2, 3)
    6
    """
    if is_rational(a) and is_rational(b):
        return numerator(a) * numerator(b)
    return a * b


def denominator(value: Any) -> int:
    """Denominator of a rational coefficient, 1 for anything else."""
    if isinstance(value, Fraction):
        return value.denominator
    if isinstance(value, sp.Rational):
        return int(value.q)
    return 1


def common_denominator(cfs: Iterable[Any]) -> int:
    """Least common multiple of the denominators of *cfs*.

    >>> from fractions import Fraction
    >>> common_denominator([Fraction(1, 2), 3, Fraction(-1, 3)])
    6
    """
    return math.lcm(1, *(denominator(cf) for cf in cfs))


def scale_to_integer(cf: Any, lcm: int) -> Any:
    """Return ``cf * lcm``; rationals whose denominator divides *lcm* become integers."""
    if lcm == 1:
        return cf
    if isinstance(cf, Fraction):
        scaled = cf * lcm
        return scaled.numerator if scaled.denominator == 1 else scaled
    if isinstance(cf, sp.Basic):
        return cf * sp.Integer(lcm)
    return cf * lcm


def divide_coefficient(cf: Any, divisor: int) -> Any:
    """Exact ``cf / divisor`` keeping the coefficient's numeric family."""
    if divisor == 1:
        return cf
    if isinstance(cf, sp.Basic):
        return cf / sp.Integer(divisor)
    if isinstance(cf, (int, Fraction)) and not isinstance(cf, bool):
        q = Fraction(cf, divisor)
        return q.numerator if q.denominator == 1 else q
    return cf / divisor
