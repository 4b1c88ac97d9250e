"""Conversion between SymPy expressions and kronpoly terms.

Used to build term sets from readable input and to check results against
SymPy's own arithmetic. Symbols are identified by name only: assumptions on a
``sympy.Symbol`` are not preserved on the way back.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from fractions import Fraction
from typing import Any

import sympy as sp

from .errors import InvalidArgument
from .kronecker_monomial import KroneckerMonomial
from .symbol_utils import SymbolSet
from .term import Term

__all__ = ["key_to_expr", "terms_from_expr", "terms_to_expr"]


def _sympy_exponent(e: Any) -> sp.Rational:
    if isinstance(e, Fraction):
        return sp.Rational(e.numerator, e.denominator)
    return sp.Integer(int(e))


def key_to_expr(key: Any, symbols: Sequence[str]) -> sp.Expr:
    """Return the monomial *key* over *symbols* as a product of SymPy powers."""
    factors = [
        sp.Symbol(name) ** _sympy_exponent(e)
        for name, e in zip(symbols, key.unpack(symbols))
        if e != 0
    ]
    return sp.Mul(*factors)


def _split_term(term: sp.Expr) -> tuple[sp.Expr, dict[str, sp.Rational]]:
    coeff, rest = term.as_coeff_Mul()
    powers: dict[str, sp.Rational] = {}
    for factor in sp.Mul.make_args(rest):
        if factor == 1:
            continue
        base, exp = factor.as_base_exp()
        if not isinstance(base, sp.Symbol) or not isinstance(exp, sp.Rational):
            raise InvalidArgument(f"the factor {factor} is not a power of a symbol with a rational exponent")
        powers[base.name] = powers.get(base.name, sp.Integer(0)) + exp
    return coeff, powers


def terms_from_expr(
    expr: Any, key_type: type = KroneckerMonomial, symbols: Iterable[Any] = ()
) -> tuple[SymbolSet, list[Term]]:
    """Expand *expr* into a symbol set and a list of terms.

    Parameters
    ----------
    expr : sympy expression or str
        A polynomial or Laurent polynomial, possibly with rational exponents
        when *key_type* is the dense :class:`~kronpoly.monomial.Monomial`.
    key_type : type, default=KroneckerMonomial
        Monomial class used for the keys.
    symbols : iterable of str, optional
        Extra symbols to include in the symbol set even if *expr* does not use
        them.

    Returns
    -------
    symbols : SymbolSet
        Free symbols of *expr* together with *symbols*.
    terms : list[Term]
        One term per distinct monomial, with SymPy number coefficients.

    Raises
    ------
    InvalidArgument
        If a factor is not a power of a symbol, or if a packed key type meets
        a non-integer exponent.
    RangeError
        If an exponent does not fit the packed key's width.

    Examples
    --------
    >>> ss, terms = terms_from_expr("3*x**2*y - 1/y")
    >>> list(ss)
    ['x', 'y']
    >>> sorted(t.key.format(ss) for t in terms)
    ['x**2*y', 'y**-1']
    """
    expr = sp.expand(sp.sympify(expr))
    names = {s.name for s in expr.free_symbols} | set(SymbolSet(symbols))
    ss = SymbolSet(names)
    packed = issubclass(key_type, KroneckerMonomial)

    acc: dict[Any, Any] = {}
    for term in sp.Add.make_args(expr):
        if term == 0:
            continue
        coeff, powers = _split_term(term)
        exps: list[Any] = []
        for name in ss:
            e = powers.get(name, sp.Integer(0))
            if e.q != 1:
                if packed:
                    raise InvalidArgument(
                        f"the exponent {e} of '{name}' is not an integer and cannot be Kronecker-encoded"
                    )
                exps.append(Fraction(int(e.p), int(e.q)))
            else:
                exps.append(int(e.p))
        key = key_type(exps, ss)
        acc[key] = acc.get(key, sp.Integer(0)) + coeff
    return ss, [Term(cf, key) for key, cf in acc.items() if cf != 0]


def terms_to_expr(terms: Iterable[Term], symbols: Sequence[str]) -> sp.Expr:
    """Sum of ``cf * key`` over *terms* as a SymPy expression."""
    return sp.Add(*[sp.sympify(t.cf) * key_to_expr(t.key, symbols) for t in terms])
