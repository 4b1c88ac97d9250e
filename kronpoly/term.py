"""Polynomial term: one coefficient paired with one monomial key."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

__all__ = ["Term"]

K = TypeVar("K")


@dataclass(frozen=True)
class Term(Generic[K]):
    """Immutable ``(cf, key)`` pair.

    Parameters
    ----------
    cf : Any
        Coefficient (int, ``Fraction``, float or SymPy number).
    key : monomial
        A :class:`~kronpoly.kronecker_monomial.KroneckerMonomial` or
        :class:`~kronpoly.monomial.Monomial`. The symbol set it refers to is
        owned by the caller.
    """

    cf: Any
    key: K
