"""
term_multiplication: driver for term-by-term products
=====================================================

Purpose
-------
The innermost loop of a polynomial multiplication forms the product of one
term of each operand. :func:`multiply_terms` is that step: it hands the two
terms to the key type's ``multiply`` classmethod, which writes the result into
a caller-owned buffer.

Key invariants
--------------
- The packed key's ``multiply`` adds codes without a range check. Callers
  either validate the whole operand sets first with
  :func:`validate_product_range`, or go through :func:`multiply_term_sets`,
  which does so.
- When ``settings.debug_checks`` is on, :func:`multiply_terms` asserts that both
  keys are compatible with the symbol set before the unchecked step.
- No state is shared between calls. Accumulation of partial products belongs
  to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, MutableSequence, Sequence
from typing import Any

from .coefficients import common_denominator, divide_coefficient, scale_to_integer
from .errors import InvalidArgument, RangeError
from .settings import get_settings
from .term import Term

__all__ = [
    "multiply_terms",
    "new_term_buffer",
    "validate_product_range",
    "multiply_term_sets",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def new_term_buffer(key_type: type) -> list[Term | None]:
    """Return an output buffer with ``key_type.multiply_arity`` empty slots."""
    return [None] * key_type.multiply_arity


def multiply_terms(out: MutableSequence[Any], t1: Term, t2: Term, symbols: Sequence[str]) -> None:
    """Multiply two terms into ``out[0:multiply_arity]``.

    Parameters
    ----------
    out : mutable sequence
        Buffer with at least ``multiply_arity`` slots, see :func:`new_term_buffer`.
    t1, t2 : Term
        Operands. Both keys must be of the same type and refer to *symbols*.
    symbols : sequence of str
        Symbol set shared by both keys.

    Raises
    ------
    InvalidArgument
        If *out* is too small.
    AssertionError
        With ``debug_checks`` on, if the keys are of different types or are
        not compatible with *symbols*.
    """
    key_type = type(t1.key)
    if len(out) < key_type.multiply_arity:
        raise InvalidArgument(
            f"the output buffer has {len(out)} slots, but the multiplication of "
            f"{key_type.__name__} terms needs {key_type.multiply_arity}"
        )
    if get_settings().debug_checks:
        if type(t2.key) is not key_type:
            raise AssertionError(
                f"cannot multiply a {key_type.__name__} term by a {type(t2.key).__name__} term"
            )
        if not (t1.key.is_compatible(symbols) and t2.key.is_compatible(symbols)):
            raise AssertionError("a term passed to multiply_terms is not compatible with the symbol set")
    key_type.multiply(out, t1, t2, symbols)


def _component_ranges(keys: Iterable[Any], symbols: Sequence[str]) -> tuple[list[int], list[int]] | None:
    lo: list[int] | None = None
    hi: list[int] | None = None
    for key in keys:
        if not key.is_compatible(symbols):
            raise InvalidArgument(f"the monomial {key!r} is not compatible with the symbol set {list(symbols)!r}")
        vec = [int(e) for e in key.unpack(symbols)]
        if lo is None:
            lo, hi = list(vec), list(vec)
            continue
        for i, e in enumerate(vec):
            if e < lo[i]:
                lo[i] = e
            elif e > hi[i]:
                hi[i] = e
    if lo is None:
        return None
    return lo, hi


def validate_product_range(keys_a: Iterable[Any], keys_b: Iterable[Any], symbols: Sequence[str]) -> None:
    """Check that every pairwise product of *keys_a* and *keys_b* is encodable.

    For each component the smallest and largest exponent of each operand set
    are summed; the sums must lie inside the codec bound for ``len(symbols)``.
    Keys without a codec (the dense :class:`~kronpoly.monomial.Monomial`)
    only get the compatibility check.

    Raises
    ------
    InvalidArgument
        If a key is not compatible with *symbols*.
    RangeError
        If some product could leave the component bound.
    """
    keys_a = list(keys_a)
    keys_b = list(keys_b)
    ranges_a = _component_ranges(keys_a, symbols)
    ranges_b = _component_ranges(keys_b, symbols)
    if ranges_a is None or ranges_b is None:
        return
    codec = getattr(type(keys_a[0]), "codec", None)
    if codec is None:
        return
    bound = codec().limit(len(symbols)).bound
    (lo_a, hi_a), (lo_b, hi_b) = ranges_a, ranges_b
    for i, name in enumerate(symbols):
        lo, hi = lo_a[i] + lo_b[i], hi_a[i] + hi_b[i]
        if lo < -bound or hi > bound:
            logger.debug("product range check failed on %r: [%d, %d] vs bound %d", name, lo, hi, bound)
            raise RangeError(
                f"overflow in the multiplication of two Kronecker monomials: the exponent of '{name}' "
                f"ranges over [{lo}, {hi}], but the bound for a symbol set of size {len(symbols)} is {bound}"
            )
    logger.debug("product range check passed: %d x %d keys over %d symbols", len(keys_a), len(keys_b), len(symbols))


def multiply_term_sets(terms_a: Sequence[Term], terms_b: Sequence[Term], symbols: Sequence[str]) -> list[Term]:
    """Full Cartesian product of two term sets, with equal keys accumulated.

    Validates with :func:`validate_product_range` before the unchecked loop.
    Rational coefficients are handled by scaling each operand by the least
    common multiple of its denominators, multiplying the integer numerators,
    and dividing the accumulated coefficients by the product of both scales.
    Terms whose accumulated coefficient is zero are dropped. The result keeps
    first-seen key order.

    Examples
    --------
    >>> from kronpoly import KroneckerMonomial as KM, Term
    >>> a = [Term(1, KM([1, 0])), Term(1, KM([0, 1]))]
    >>> [(t.cf, t.key.format(["x", "y"])) for t in multiply_term_sets(a, a, ["x", "y"])]
    [(1, 'x**2'), (2, 'x*y'), (1, 'y**2')]
    """
    validate_product_range((t.key for t in terms_a), (t.key for t in terms_b), symbols)
    if not terms_a or not terms_b:
        return []
    lcm_a = common_denominator(t.cf for t in terms_a)
    lcm_b = common_denominator(t.cf for t in terms_b)
    if lcm_a != 1 or lcm_b != 1:
        logger.debug("rescaling rational operands by %d and %d", lcm_a, lcm_b)
        terms_a = [Term(scale_to_integer(t.cf, lcm_a), t.key) for t in terms_a]
        terms_b = [Term(scale_to_integer(t.cf, lcm_b), t.key) for t in terms_b]
    key_type = type(terms_a[0].key)
    out = new_term_buffer(key_type)
    acc: dict[Any, Any] = {}
    for t1 in terms_a:
        for t2 in terms_b:
            multiply_terms(out, t1, t2, symbols)
            for prod in out[: key_type.multiply_arity]:
                if prod.key in acc:
                    acc[prod.key] = acc[prod.key] + prod.cf
                else:
                    acc[prod.key] = prod.cf
    divisor = lcm_a * lcm_b
    return [Term(divide_coefficient(cf, divisor), key) for key, cf in acc.items() if cf != 0]
