"""Support helpers shared by the packed and the dense monomial types.

These operate on plain exponent lists so that both key kinds apply the same
validation rules and produce the same error messages.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from fractions import Fraction
from typing import Any

import sympy as sp

from .errors import InvalidArgument

__all__ = [
    "apply_insertion_map",
    "check_mask",
    "check_positions_map",
    "exponent_str",
    "format_plain",
    "format_tex",
    "power",
    "ipow_quotient",
]


def apply_insertion_map(
    values: Sequence[Any], insertion_map: Mapping[int, Sequence[Any]], fill: Any = 0
) -> list[Any]:
    """Insert ``len(run)`` copies of *fill* before each position of *insertion_map*.

    Raises
    ------
    InvalidArgument
        If the map is empty, has a negative key, or its largest key exceeds
        ``len(values)``.
    """
    if not insertion_map:
        raise InvalidArgument("invalid argument(s) for symbol set merging: the insertion map cannot be empty")
    size = len(values)
    first, last = min(insertion_map), max(insertion_map)
    if first < 0:
        raise InvalidArgument(
            f"invalid argument(s) for symbol set merging: the insertion map contains the negative index {first}"
        )
    if last > size:
        raise InvalidArgument(
            "invalid argument(s) for symbol set merging: the last index of the insertion map "
            f"({last}) must not be greater than the key's size ({size})"
        )
    out: list[Any] = []
    for i, v in enumerate(values):
        run = insertion_map.get(i)
        if run:
            out.extend([fill] * len(run))
        out.append(v)
    tail = insertion_map.get(size)
    if tail:
        out.extend([fill] * len(tail))
    return out


def check_mask(mask: Sequence[Any], symbols: Sequence[str], what: str) -> None:
    if len(mask) != len(symbols):
        raise InvalidArgument(
            f"invalid argument(s) for {what}: the size of the symbol set ({len(symbols)}) "
            f"differs from the size of the trimming mask ({len(mask)})"
        )


def check_positions_map(pmap: Mapping[int, Any], size: int, what: str) -> None:
    """Reject positions maps whose largest index is not smaller than *size*."""
    if pmap:
        last = max(pmap)
        if last >= size:
            raise InvalidArgument(
                f"invalid positions map for {what}: the last index of the positions map ({last}) "
                f"must be smaller than the size of the symbol set ({size})"
            )
        if min(pmap) < 0:
            raise InvalidArgument(f"invalid positions map for {what}: negative index {min(pmap)}")


def exponent_str(e: Any) -> str:
    if isinstance(e, Fraction) and e.denominator != 1:
        return f"({e.numerator}/{e.denominator})"
    if isinstance(e, sp.Rational) and not isinstance(e, sp.Integer):
        return f"({e.p}/{e.q})"
    return str(e)


def format_plain(exponents: Sequence[Any], symbols: Sequence[str]) -> str:
    """Render ``x**-1*y`` style text, skipping zero exponents."""
    parts = []
    for name, e in zip(symbols, exponents):
        if e == 0:
            continue
        parts.append(name if e == 1 else f"{name}**{exponent_str(e)}")
    return "*".join(parts)


def _tex_factor(name: str, e: Any) -> str:
    if e == 1:
        return "{%s}" % name
    if isinstance(e, Fraction) and e.denominator != 1:
        return "{%s}^{\\frac{%d}{%d}}" % (name, e.numerator, e.denominator)
    return "{%s}^{%s}" % (name, e)


def format_tex(exponents: Sequence[Any], symbols: Sequence[str]) -> str:
    """Render TeX; negative exponents go into a single denominator."""
    num, den = [], []
    for name, e in zip(symbols, exponents):
        if e > 0:
            num.append(_tex_factor(name, e))
        elif e < 0:
            den.append(_tex_factor(name, -e))
    num_s, den_s = "".join(num), "".join(den)
    if den_s:
        return "\\frac{%s}{%s}" % (num_s or "1", den_s)
    return num_s


def power(value: Any, exponent: Any) -> Any:
    """``value**exponent`` that stays exact for integer bases and negative exponents."""
    if isinstance(value, int) and not isinstance(value, bool) and isinstance(exponent, int) and exponent < 0:
        return Fraction(value) ** exponent
    if isinstance(exponent, Fraction) and isinstance(value, sp.Basic):
        return value ** sp.Rational(exponent.numerator, exponent.denominator)
    return value**exponent


def ipow_quotient(e: Any, n: int) -> Any:
    """Quotient of *e* by *n* truncated towards zero."""
    q = abs(e) // abs(n)
    return q if (e < 0) == (n < 0) else -q
