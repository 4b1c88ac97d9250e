"""
kronecker_monomial: monomials packed into a single integer
==========================================================

Purpose
-------
:class:`KroneckerMonomial` stores the exponent vector of a monomial as one
Kronecker code (see :mod:`kronpoly.kronecker_array`). The value is cheap to
copy, hash and compare, and two monomials multiply by adding their codes.

A monomial never stores its symbol set. Every operation takes the symbol set
the monomial was built against as its last argument, and the caller is
responsible for keeping the pair together: two different monomials under two
different symbol sets can carry the same integer.

Widths
------
:class:`KroneckerMonomial` packs into ``int64``. Narrower widths are obtained
with :func:`kronecker_monomial_type`:

>>> import numpy as np
>>> K8 = kronecker_monomial_type(np.int8)
>>> K8([1, -1]).get_int()
-4

Key invariants
--------------
- ``get_int``/``set_int`` never validate; ``set_int`` is for single-threaded
  construction only.
- :meth:`KroneckerMonomial.multiply` performs no range check. Its operands
  must come from a validated entry point such as
  :func:`kronpoly.term_multiplication.validate_product_range`.
"""

from __future__ import annotations

import bisect
import operator
import threading
from collections.abc import Iterable, Mapping, MutableSequence, Sequence
from fractions import Fraction
from typing import IO, Any, ClassVar

import numpy as np

from .coefficients import mul_coefficients
from .errors import InvalidArgument, PowerDivisorZeroError
from .kronecker_array import KroneckerArray, get_kronecker_array
from .monomial_support import (
    apply_insertion_map,
    check_mask,
    check_positions_map,
    format_plain,
    format_tex,
    ipow_quotient,
    power,
)
from .settings import get_settings, normalize_int_type
from .symbol_utils import SymbolSet, _symbol_name
from .term import Term

__all__ = ["KroneckerMonomial", "kronecker_monomial_type"]


def _integral_exponent(value: Any, name: str) -> int:
    if isinstance(value, Fraction):
        if value.denominator != 1:
            raise InvalidArgument(
                f"the exponent {value} of '{name}' is not an integer and cannot be Kronecker-encoded"
            )
        return value.numerator
    return operator.index(value)


class KroneckerMonomial:
    """Monomial whose exponents are Kronecker-packed into one integer.

    Parameters
    ----------
    arg : optional
        - omitted or a :class:`~kronpoly.symbol_utils.SymbolSet`: the unitary
          monomial (all exponents zero);
        - an iterable of integers: the exponents, encoded immediately;
        - another monomial (requires *symbols*): conversion, checked for
          compatibility with *symbols*.
    symbols : sequence of str, optional
        When given with an iterable, its length must match ``len(symbols)``.

    Raises
    ------
    InvalidArgument
        Length mismatch against *symbols*, or an incompatible source monomial.
    RangeError
        The exponents cannot be encoded at this width.
    """

    __slots__ = ("_value",)

    _ka: ClassVar[KroneckerArray] = get_kronecker_array(np.int64)
    multiply_arity: ClassVar[int] = 1

    def __init__(self, arg: Any = None, symbols: Sequence[str] | None = None) -> None:
        if symbols is not None and arg is not None and not isinstance(arg, SymbolSet):
            if isinstance(arg, KroneckerMonomial):
                self._value = self._convert(arg, symbols)
                return
            if hasattr(arg, "unpack") and hasattr(arg, "is_compatible"):
                arg = [_integral_exponent(e, name) for e, name in zip(arg.unpack(symbols), symbols)]
            vec = list(arg)
            if len(vec) != len(symbols):
                raise InvalidArgument(
                    "the Kronecker monomial constructor from range and symbol set yielded an invalid monomial: "
                    f"the range length ({len(vec)}) differs from the size of the symbol set ({len(symbols)})"
                )
            self._value = self._ka.encode(vec)
            return
        if arg is None or isinstance(arg, SymbolSet):
            self._value = 0
        elif isinstance(arg, KroneckerMonomial):
            if arg._ka is not self._ka:
                raise TypeError("converting between Kronecker widths requires the symbol set")
            self._value = arg._value
        elif isinstance(arg, (int, np.integer)):
            raise TypeError(
                f"{type(self).__name__}() does not accept a raw code; use {type(self).__name__}.from_int()"
            )
        else:
            self._value = self._ka.encode(arg)

    def _convert(self, other: KroneckerMonomial, symbols: Sequence[str]) -> int:
        if not other.is_compatible(symbols):
            raise InvalidArgument("the monomial used for construction is not compatible with the supplied symbol set")
        if other._ka is self._ka:
            return other._value
        return self._ka.encode(other._ka.decode_list(other._value, len(symbols)))

    @classmethod
    def from_int(cls, code: Any) -> KroneckerMonomial:
        """Build a monomial from a raw code (persistence path, unchecked)."""
        obj = object.__new__(cls)
        obj._value = operator.index(code)
        return obj

    @classmethod
    def int_type(cls) -> type[np.signedinteger]:
        return cls._ka.int_type

    @classmethod
    def codec(cls) -> KroneckerArray:
        return cls._ka

    # -- raw access ---------------------------------------------------------

    def get_int(self) -> int:
        return self._value

    def set_int(self, code: Any) -> None:
        self._value = operator.index(code)

    # -- value semantics ----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KroneckerMonomial):
            return NotImplemented
        return self._ka is other._ka and self._value == other._value

    def __lt__(self, other: KroneckerMonomial) -> bool:
        if not isinstance(other, KroneckerMonomial) or other._ka is not self._ka:
            return NotImplemented
        return self._value < other._value

    def hash(self) -> int:
        """The code reinterpreted as an unsigned integer of the same width."""
        return self._value & ((1 << self._ka.bits) - 1)

    def __hash__(self) -> int:
        return self.hash()

    def __repr__(self) -> str:
        return f"{type(self).__name__}.from_int({self._value})"

    def __reduce__(self):
        return (_rebuild, (self._ka.int_type.__name__, self._value))

    # -- queries ------------------------------------------------------------

    def _decode(self, symbols: Sequence[str]) -> list[int]:
        return self._ka.decode_list(self._value, len(symbols))

    def is_compatible(self, symbols: Sequence[str]) -> bool:
        return self._ka.is_compatible(self._value, len(symbols))

    def is_unitary(self, symbols: Sequence[str]) -> bool:
        return self._value == 0

    def degree(self, symbols: Sequence[str], positions: Iterable[int] | None = None) -> int:
        """Total degree, or the partial degree over *positions*.

        Raises
        ------
        InvalidArgument
            If a position is negative or not smaller than ``len(symbols)``.
        """
        vec = self._decode(symbols)
        if positions is None:
            return sum(vec)
        positions = sorted(set(positions))
        if positions and positions[0] < 0:
            raise InvalidArgument(
                "the positions set for the computation of the partial degree of a monomial "
                f"contains the negative value {positions[0]}"
            )
        if positions and positions[-1] >= len(vec):
            raise InvalidArgument(
                "the largest value in the positions set for the computation of the partial degree of a "
                f"Kronecker monomial is {positions[-1]}, but the monomial has a size of only {len(vec)}"
            )
        return sum(vec[p] for p in positions)

    ldegree = degree

    def unpack(self, symbols: Sequence[str]) -> np.ndarray:
        """Decoded exponents as an array of this width's integer type."""
        if len(symbols) > self._ka.max_size:
            raise InvalidArgument(
                f"the size of the symbol set ({len(symbols)}) exceeds the maximum number of "
                f"exponents that can be unpacked from a {self._ka.int_type.__name__} Kronecker code "
                f"({self._ka.max_size})"
            )
        return self._ka.decode(self._value, len(symbols))

    # -- printing -----------------------------------------------------------

    def format(self, symbols: Sequence[str]) -> str:
        """Plain text form, e.g. ``x**-1*y**-2``; empty for the unitary monomial."""
        return format_plain(self._decode(symbols), symbols)

    def format_tex(self, symbols: Sequence[str]) -> str:
        return format_tex(self._decode(symbols), symbols)

    def print(self, stream: IO[str], symbols: Sequence[str]) -> None:
        stream.write(self.format(symbols))

    def print_tex(self, stream: IO[str], symbols: Sequence[str]) -> None:
        stream.write(self.format_tex(symbols))

    # -- symbol set manipulation ---------------------------------------------

    def merge_symbols(
        self, insertion_map: Mapping[int, Sequence[str]], symbols: Sequence[str]
    ) -> KroneckerMonomial:
        """Rebase onto a superset of *symbols* described by *insertion_map*.

        >>> KroneckerMonomial([1]).merge_symbols({0: ["a", "b"]}, ["d"]) == KroneckerMonomial([0, 0, 1])
        True
        """
        return type(self)(apply_insertion_map(self._decode(symbols), insertion_map))

    def trim_identify(self, mask: MutableSequence[Any], symbols: Sequence[str]) -> None:
        """Clear ``mask[i]`` wherever this monomial has a non-zero exponent."""
        check_mask(mask, symbols, "trim identification")
        for i, e in enumerate(self._decode(symbols)):
            if e != 0:
                mask[i] = False

    def trim(self, mask: Sequence[Any], symbols: Sequence[str]) -> KroneckerMonomial:
        """Drop the positions where *mask* is truthy."""
        check_mask(mask, symbols, "trimming")
        vec = self._decode(symbols)
        return type(self)([e for e, drop in zip(vec, mask) if not drop])

    # -- arithmetic ---------------------------------------------------------

    @classmethod
    def multiply(cls, out: MutableSequence[Any], t1: Term, t2: Term, symbols: Sequence[str]) -> None:
        """Write the product of two terms into ``out[0]``.

        The codes are added directly. This is only correct when the summed
        exponents stay inside the codec bound for ``len(symbols)``; no check
        is made here.
        """
        key = object.__new__(cls)
        key._value = t1.key._value + t2.key._value
        out[0] = Term(mul_coefficients(t1.cf, t2.cf), key)

    @classmethod
    def multiply_monomials(
        cls, k1: KroneckerMonomial, k2: KroneckerMonomial, symbols: Sequence[str]
    ) -> KroneckerMonomial:
        """Key-only form of :meth:`multiply`, with the same unchecked contract."""
        key = object.__new__(cls)
        key._value = k1._value + k2._value
        return key

    # -- calculus -----------------------------------------------------------

    def partial(self, positions: Iterable[int] | int, symbols: Sequence[str]) -> tuple[int, KroneckerMonomial]:
        """Derivative with respect to the variable at ``positions[0]``.

        Returns ``(multiplier, monomial)``. An empty *positions* means the
        variable is not in *symbols*: the result is ``(0, unitary)``.

        Raises
        ------
        InvalidArgument
            More than one position, a position outside *symbols*, or a zero
            exponent at the position.
        """
        positions = (positions,) if isinstance(positions, (int, np.integer)) else tuple(positions)
        if len(positions) > 1:
            raise InvalidArgument(
                "invalid size of the set of positions for the computation of the partial derivative "
                f"of a Kronecker monomial: the set must have at most 1 element, but it has {len(positions)} elements"
            )
        if not positions:
            return 0, type(self)()
        pos = positions[0]
        if pos >= len(symbols) or pos < 0:
            raise InvalidArgument(
                f"invalid position for the computation of the partial derivative of a Kronecker monomial: "
                f"the position is {pos}, but the monomial has a size of only {len(symbols)}"
            )
        vec = self._decode(symbols)
        e = vec[pos]
        if e == 0:
            raise InvalidArgument(
                f"cannot differentiate a Kronecker monomial with respect to '{symbols[pos]}': "
                "the exponent of the variable is zero"
            )
        vec[pos] = e - 1
        return e, type(self)(vec)

    def integrate(self, name: Any, symbols: Sequence[str]) -> tuple[int, KroneckerMonomial]:
        """Antiderivative with respect to *name*.

        Returns ``(divisor, monomial)``: the term coefficient is to be divided
        by ``divisor``. If *name* is not in *symbols*, the returned monomial
        refers to ``symbols`` with *name* inserted at its sorted position.

        Raises
        ------
        InvalidArgument
            If the exponent of *name* is -1.
        """
        name = _symbol_name(name)
        vec = self._decode(symbols)
        pos = bisect.bisect_left(symbols, name)
        if pos < len(symbols) and symbols[pos] == name:
            e = vec[pos]
            if e == -1:
                raise InvalidArgument(
                    "unable to perform Kronecker monomial integration: a negative unitary exponent was "
                    f"encountered in correspondence of the variable '{name}'"
                )
            vec[pos] = e + 1
            return e + 1, type(self)(vec)
        vec.insert(pos, 1)
        return 1, type(self)(vec)

    # -- substitution -------------------------------------------------------

    def evaluate(self, pmap: Mapping[int, Any], symbols: Sequence[str]) -> Any:
        """Product of ``value**exponent`` over every variable.

        *pmap* maps each position of *symbols* to its value (see
        :func:`kronpoly.symbol_utils.symbol_positions_map`) and must cover all
        of them.
        """
        if len(pmap) != len(symbols):
            raise InvalidArgument(
                f"invalid positions map for evaluation: the size of the positions map ({len(pmap)}) "
                f"differs from the size of the symbol set ({len(symbols)})"
            )
        check_positions_map(pmap, len(symbols), "evaluation")
        vec = self._decode(symbols)
        result: Any = 1
        for idx in sorted(pmap):
            result = result * power(pmap[idx], vec[idx])
        return result

    def subs(self, pmap: Mapping[int, Any], symbols: Sequence[str]) -> tuple[Any, KroneckerMonomial]:
        """Substitute values for the variables at the positions of *pmap*.

        Returns ``(multiplier, residual)`` where the substituted exponents
        are zero in ``residual``.
        """
        check_positions_map(pmap, len(symbols), "substitution")
        vec = self._decode(symbols)
        mult: Any = None
        for idx in sorted(pmap):
            factor = power(pmap[idx], vec[idx])
            mult = factor if mult is None else mult * factor
            vec[idx] = 0
        return (1 if mult is None else mult), type(self)(vec)

    def ipow_subs(self, pmap: Mapping[int, Any], n: Any, symbols: Sequence[str]) -> tuple[Any, KroneckerMonomial]:
        """Substitute ``value`` for ``var**n`` at the positions of *pmap*.

        With ``q = trunc(e / n)``, a positive ``q`` contributes ``value**q``
        to the multiplier and leaves ``e - q*n`` as the exponent; otherwise
        the variable is untouched.

        Raises
        ------
        PowerDivisorZeroError
            If *n* is zero.
        """
        n = operator.index(n)
        if n == 0:
            raise PowerDivisorZeroError("cannot perform Kronecker monomial ipow substitution with a power of zero")
        check_positions_map(pmap, len(symbols), "ipow substitution")
        vec = self._decode(symbols)
        mult: Any = None
        for idx in sorted(pmap):
            q = ipow_quotient(vec[idx], n)
            if q > 0:
                factor = power(pmap[idx], q)
                mult = factor if mult is None else mult * factor
                vec[idx] -= q * n
        return (1 if mult is None else mult), type(self)(vec)


_types: dict[type[np.signedinteger], type[KroneckerMonomial]] = {np.int64: KroneckerMonomial}
_types_lock = threading.Lock()


def kronecker_monomial_type(int_type: Any = None) -> type[KroneckerMonomial]:
    """Return the monomial class packing into *int_type* (default: configured width)."""
    key = normalize_int_type(get_settings().default_int_type if int_type is None else int_type)
    cls = _types.get(key)
    if cls is None:
        with _types_lock:
            cls = _types.get(key)
            if cls is None:
                cls = type(
                    f"KroneckerMonomial_{key.__name__}",
                    (KroneckerMonomial,),
                    {"__slots__": (), "_ka": get_kronecker_array(key), "__module__": __name__},
                )
                _types[key] = cls
    return cls


def _rebuild(int_type_name: str, code: int) -> KroneckerMonomial:
    return kronecker_monomial_type(int_type_name).from_int(code)
