"""Dense, non-packed monomial.

:class:`Monomial` keeps its exponents as a tuple, one entry per symbol. It has
no width limit and accepts rational exponents (``fractions.Fraction``), at the
price of a larger value and a componentwise product. It exposes the same
operations as :class:`~kronpoly.kronecker_monomial.KroneckerMonomial`;
``subs`` and ``ipow_subs`` return lists of ``(multiplier, monomial)`` pairs.
"""

from __future__ import annotations

import bisect
import operator
from collections.abc import Iterable, Mapping, MutableSequence, Sequence
from fractions import Fraction
from typing import IO, Any, ClassVar

import numpy as np
import sympy as sp

from .coefficients import mul_coefficients
from .errors import InvalidArgument, PowerDivisorZeroError
from .monomial_support import (
    apply_insertion_map,
    check_mask,
    check_positions_map,
    format_plain,
    format_tex,
    ipow_quotient,
    power,
)
from .symbol_utils import SymbolSet, _symbol_name
from .term import Term

__all__ = ["Monomial"]


def _exponent(value: Any) -> int | Fraction:
    if isinstance(value, Fraction):
        return value.numerator if value.denominator == 1 else value
    if isinstance(value, sp.Rational):
        return int(value.p) if value.q == 1 else Fraction(int(value.p), int(value.q))
    if isinstance(value, float):
        raise TypeError(f"monomial exponents must be integers or rationals, got the float {value!r}")
    return operator.index(value)


class Monomial:
    """Monomial with an explicit exponent tuple.

    Parameters
    ----------
    arg : optional
        Omitted or a ``SymbolSet`` for the unitary monomial, an iterable of
        exponents, or another monomial to convert (requires *symbols*).
    symbols : sequence of str, optional
        When given, the number of exponents must equal ``len(symbols)``.
    """

    __slots__ = ("_exponents",)

    multiply_arity: ClassVar[int] = 1

    def __init__(self, arg: Any = None, symbols: Sequence[str] | None = None) -> None:
        if isinstance(arg, SymbolSet):
            arg = [0] * len(arg)
        elif arg is None:
            arg = [0] * len(symbols) if symbols is not None else []
        elif symbols is not None and hasattr(arg, "unpack") and hasattr(arg, "is_compatible"):
            if not arg.is_compatible(symbols):
                raise InvalidArgument(
                    "the monomial used for construction is not compatible with the supplied symbol set"
                )
            arg = [int(e) for e in arg.unpack(symbols)]
        exps = tuple(_exponent(e) for e in arg)
        if symbols is not None and len(exps) != len(symbols):
            raise InvalidArgument(
                "the monomial constructor from range and symbol set yielded an invalid monomial: "
                f"the range length ({len(exps)}) differs from the size of the symbol set ({len(symbols)})"
            )
        self._exponents = exps

    @classmethod
    def _make(cls, exps: Iterable[Any]) -> Monomial:
        obj = object.__new__(cls)
        obj._exponents = tuple(e.numerator if isinstance(e, Fraction) and e.denominator == 1 else e for e in exps)
        return obj

    @property
    def exponents(self) -> tuple[int | Fraction, ...]:
        return self._exponents

    def __len__(self) -> int:
        return len(self._exponents)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Monomial):
            return NotImplemented
        return self._exponents == other._exponents

    def hash(self) -> int:
        return hash(self._exponents)

    def __hash__(self) -> int:
        return self.hash()

    def __repr__(self) -> str:
        return f"Monomial({list(self._exponents)!r})"

    def _check(self, symbols: Sequence[str]) -> tuple[int | Fraction, ...]:
        if len(self._exponents) != len(symbols):
            raise InvalidArgument(
                f"the monomial has {len(self._exponents)} exponents but the symbol set has {len(symbols)} symbols"
            )
        return self._exponents

    def is_compatible(self, symbols: Sequence[str]) -> bool:
        return len(self._exponents) == len(symbols)

    def is_unitary(self, symbols: Sequence[str]) -> bool:
        return all(e == 0 for e in self._check(symbols))

    def degree(self, symbols: Sequence[str], positions: Iterable[int] | None = None) -> int | Fraction:
        exps = self._check(symbols)
        if positions is None:
            return sum(exps)
        positions = sorted(set(positions))
        if positions and positions[0] < 0:
            raise InvalidArgument(
                "the positions set for the computation of the partial degree of a monomial "
                f"contains the negative value {positions[0]}"
            )
        if positions and positions[-1] >= len(exps):
            raise InvalidArgument(
                "the largest value in the positions set for the computation of the partial degree of a "
                f"monomial is {positions[-1]}, but the monomial has a size of only {len(exps)}"
            )
        return sum(exps[p] for p in positions)

    ldegree = degree

    def unpack(self, symbols: Sequence[str]) -> tuple[int | Fraction, ...]:
        return self._check(symbols)

    def format(self, symbols: Sequence[str]) -> str:
        return format_plain(self._check(symbols), symbols)

    def format_tex(self, symbols: Sequence[str]) -> str:
        return format_tex(self._check(symbols), symbols)

    def print(self, stream: IO[str], symbols: Sequence[str]) -> None:
        stream.write(self.format(symbols))

    def print_tex(self, stream: IO[str], symbols: Sequence[str]) -> None:
        stream.write(self.format_tex(symbols))

    def merge_symbols(self, insertion_map: Mapping[int, Sequence[str]], symbols: Sequence[str]) -> Monomial:
        return self._make(apply_insertion_map(self._check(symbols), insertion_map))

    def trim_identify(self, mask: MutableSequence[Any], symbols: Sequence[str]) -> None:
        check_mask(mask, symbols, "trim identification")
        for i, e in enumerate(self._check(symbols)):
            if e != 0:
                mask[i] = False

    def trim(self, mask: Sequence[Any], symbols: Sequence[str]) -> Monomial:
        check_mask(mask, symbols, "trimming")
        return self._make(e for e, drop in zip(self._check(symbols), mask) if not drop)

    @classmethod
    def multiply(cls, out: MutableSequence[Any], t1: Term, t2: Term, symbols: Sequence[str]) -> None:
        """Componentwise exponent sum; both keys must have ``len(symbols)`` exponents."""
        out[0] = Term(mul_coefficients(t1.cf, t2.cf), cls.multiply_monomials(t1.key, t2.key, symbols))

    @classmethod
    def multiply_monomials(cls, k1: Monomial, k2: Monomial, symbols: Sequence[str]) -> Monomial:
        return cls._make(a + b for a, b in zip(k1._exponents, k2._exponents))

    def partial(self, positions: Iterable[int] | int, symbols: Sequence[str]) -> tuple[Any, Monomial]:
        exps = list(self._check(symbols))
        positions = (positions,) if isinstance(positions, (int, np.integer)) else tuple(positions)
        if len(positions) > 1:
            raise InvalidArgument(
                "invalid size of the set of positions for the computation of the partial derivative "
                f"of a monomial: the set must have at most 1 element, but it has {len(positions)} elements"
            )
        if not positions:
            return 0, self._make([0] * len(exps))
        pos = positions[0]
        if pos >= len(exps) or pos < 0:
            raise InvalidArgument(
                f"invalid position for the computation of the partial derivative of a monomial: "
                f"the position is {pos}, but the monomial has a size of only {len(exps)}"
            )
        e = exps[pos]
        if e == 0:
            raise InvalidArgument(
                f"cannot differentiate a monomial with respect to '{symbols[pos]}': the exponent of the variable is zero"
            )
        exps[pos] = e - 1
        return e, self._make(exps)

    def integrate(self, name: Any, symbols: Sequence[str]) -> tuple[Any, Monomial]:
        name = _symbol_name(name)
        exps = list(self._check(symbols))
        pos = bisect.bisect_left(symbols, name)
        if pos < len(symbols) and symbols[pos] == name:
            e = exps[pos]
            if e == -1:
                raise InvalidArgument(
                    "unable to perform monomial integration: a negative unitary exponent was "
                    f"encountered in correspondence of the variable '{name}'"
                )
            exps[pos] = e + 1
            return e + 1, self._make(exps)
        exps.insert(pos, 1)
        return 1, self._make(exps)

    def evaluate(self, pmap: Mapping[int, Any], symbols: Sequence[str]) -> Any:
        exps = self._check(symbols)
        if len(pmap) != len(symbols):
            raise InvalidArgument(
                f"invalid positions map for evaluation: the size of the positions map ({len(pmap)}) "
                f"differs from the size of the symbol set ({len(symbols)})"
            )
        check_positions_map(pmap, len(symbols), "evaluation")
        result: Any = 1
        for idx in sorted(pmap):
            result = result * power(pmap[idx], exps[idx])
        return result

    def subs(self, pmap: Mapping[int, Any], symbols: Sequence[str]) -> list[tuple[Any, Monomial]]:
        exps = list(self._check(symbols))
        check_positions_map(pmap, len(symbols), "substitution")
        mult: Any = None
        for idx in sorted(pmap):
            factor = power(pmap[idx], exps[idx])
            mult = factor if mult is None else mult * factor
            exps[idx] = 0
        return [((1 if mult is None else mult), self._make(exps))]

    def ipow_subs(self, pmap: Mapping[int, Any], n: Any, symbols: Sequence[str]) -> list[tuple[Any, Monomial]]:
        n = operator.index(n)
        if n == 0:
            raise PowerDivisorZeroError("cannot perform monomial ipow substitution with a power of zero")
        exps = list(self._check(symbols))
        check_positions_map(pmap, len(symbols), "ipow substitution")
        mult: Any = None
        for idx in sorted(pmap):
            q = ipow_quotient(exps[idx], n)
            if q > 0:
                factor = power(pmap[idx], q)
                mult = factor if mult is None else mult * factor
                exps[idx] -= q * n
        return [((1 if mult is None else mult), self._make(exps))]
