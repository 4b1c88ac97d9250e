"""Exception taxonomy shared by the codec, the monomial types and the merge algebra.

Every checked failure in :mod:`kronpoly` raises one of the classes below,
synchronously and without partial results. The classes also derive from the
closest builtin so callers can keep catching ``ValueError`` or
``OverflowError`` where that reads better.
"""

from __future__ import annotations

__all__ = [
    "KronpolyError",
    "RangeError",
    "InvalidArgument",
    "PowerDivisorZeroError",
    "StaleSymbolSetError",
]


class KronpolyError(Exception):
    """Base class of all kronpoly errors."""


class RangeError(KronpolyError, OverflowError):
    """A value exceeds the encodable bounds of the integer width in use.

    Raised for too many variables for the bit width, or for an exponent whose
    magnitude is larger than the per-length component bound.
    """


class InvalidArgument(KronpolyError, ValueError):
    """Size mismatches, out-of-range positions, empty insertion maps and calculus singularities."""


class PowerDivisorZeroError(KronpolyError, ZeroDivisionError):
    """``ipow_subs`` was asked to substitute a zero power."""


class StaleSymbolSetError(InvalidArgument):
    """A representation tagged with an old :class:`~kronpoly.symbol_utils.SymbolTable` version was used."""
