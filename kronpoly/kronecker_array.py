"""
kronecker_array: pack bounded integer vectors into one machine integer
======================================================================

Purpose
-------
Encode a signed exponent vector of length ``n`` into a single integer of a
fixed width ``W`` (Kronecker substitution), and decode it back exactly.

For a given ``n`` every component lies in ``[-bound, bound]``. The code is the
mixed-radix sum ``sum(v[i] * weights[i])`` with ``weights[i] = r**i`` and
``r = 2*bound + 1``, so adding two codes adds the underlying vectors as long as
the result stays in range. That property is what makes monomial multiplication
a single integer addition.

Limits
------
The per-length table (:class:`KroneckerLimit`) is computed lazily, once per
width, under a lock, and is an immutable tuple afterwards. Readers never lock
once the table exists.

Bounds are chosen so that:

- ``r**n <= 2**(W-1)``, hence the code interval ``[h_min, h_max]`` with
  ``h_max = -h_min = (r**n - 1) // 2`` fits the signed width,
- the code interval never shrinks when ``n`` grows. A code that is valid for
  ``n`` symbols is therefore still valid after symbols are appended.

``max_size`` is the largest length whose bound is at least 1
(``3**max_size <= 2**(W-1)``): 4 for ``int8``, 9 for ``int16``, 19 for ``int32``
and 39 for ``int64``.

Logging
-------
Silent by default. Enable with::

    logging.getLogger("kronpoly.kronecker_array").setLevel(logging.DEBUG)
"""

from __future__ import annotations

import logging
import operator
import threading
from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np
from sympy import integer_nthroot

from .errors import RangeError
from .settings import get_settings, normalize_int_type

__all__ = [
    "KroneckerLimit",
    "KroneckerArray",
    "get_kronecker_array",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class KroneckerLimit:
    """Coding data for one vector length.

    Parameters
    ----------
    bound : int
        Symmetric component bound: every component lies in ``[-bound, bound]``.
    weights : tuple[int, ...]
        Mixed-radix coding weights, ``weights[i] == (2*bound + 1)**i``.
    h_min, h_max : int
        Smallest and largest valid code for this length.
    """

    bound: int
    weights: tuple[int, ...]
    h_min: int
    h_max: int

    @property
    def radix(self) -> int:
        return 2 * self.bound + 1


def _compute_limits(bits: int) -> tuple[KroneckerLimit, ...]:
    """Build the limits table for a signed integer of *bits* bits."""
    cap = 1 << (bits - 1)
    max_size = 0
    while 3 ** (max_size + 1) <= cap:
        max_size += 1

    radices = [1] * (max_size + 1)
    ceiling = cap
    # Walk down from the longest vector so that r_n**n <= r_{n+1}**(n+1).
    for size in range(max_size, 0, -1):
        root, _ = integer_nthroot(ceiling, size)
        radix = int(root)
        if radix % 2 == 0:
            radix -= 1
        radices[size] = radix
        ceiling = radix**size

    table = [KroneckerLimit(bound=0, weights=(), h_min=0, h_max=0)]
    for size in range(1, max_size + 1):
        radix = radices[size]
        weights = tuple(radix**i for i in range(size))
        h_max = (radix**size - 1) // 2
        table.append(KroneckerLimit(bound=(radix - 1) // 2, weights=weights, h_min=-h_max, h_max=h_max))
    return tuple(table)


class KroneckerArray:
    """Codec for one signed integer width.

    Instances are shared per width through :func:`get_kronecker_array`; build
    one directly only in tests.

    Parameters
    ----------
    int_type : numpy signed integer type
        ``np.int8``, ``np.int16``, ``np.int32`` or ``np.int64`` (or an
        equivalent dtype spelling).
    """

    def __init__(self, int_type: Any) -> None:
        self.int_type = normalize_int_type(int_type)
        info = np.iinfo(self.int_type)
        self.bits = int(info.bits)
        self.min_int = int(info.min)
        self.max_int = int(info.max)
        self._limits: tuple[KroneckerLimit, ...] | None = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"KroneckerArray({self.int_type.__name__})"

    def get_limits(self) -> tuple[KroneckerLimit, ...]:
        """Return the limits table, indexed by vector length ``0..max_size``."""
        limits = self._limits
        if limits is None:
            with self._lock:
                if self._limits is None:
                    self._limits = _compute_limits(self.bits)
                    logger.debug(
                        "computed Kronecker limits for %s: max_size=%d",
                        self.int_type.__name__,
                        len(self._limits) - 1,
                    )
                limits = self._limits
        return limits

    @property
    def max_size(self) -> int:
        """Largest vector length representable at this width."""
        return len(self.get_limits()) - 1

    def limit(self, size: int) -> KroneckerLimit:
        """Return the limits for vectors of length *size*, or raise :class:`RangeError`."""
        limits = self.get_limits()
        if size >= len(limits):
            raise RangeError(
                f"a vector of size {size} cannot be Kronecker-coded with {self.int_type.__name__}: "
                f"the maximum size is {len(limits) - 1}"
            )
        return limits[size]

    def encode(self, values: Iterable[Any]) -> int:
        """Encode a sequence of integers into one code.

        Raises
        ------
        RangeError
            If the sequence is longer than :attr:`max_size` or a component is
            outside the bound for its length.
        TypeError
            If a component is not an integer.
        """
        vec = [operator.index(v) for v in values]
        size = len(vec)
        lim = self.limit(size)
        code = 0
        for i, (v, w) in enumerate(zip(vec, lim.weights)):
            if v < -lim.bound or v > lim.bound:
                raise RangeError(
                    f"a component of a vector to be Kronecker-encoded is out of bounds: element {i} is {v}, "
                    f"the bound for size {size} is {lim.bound}"
                )
            code += v * w
        return code

    def is_compatible(self, code: int, size: int) -> bool:
        """Return True when *code* decodes at length *size* with every component in bound."""
        limits = self.get_limits()
        if size >= len(limits):
            return False
        lim = limits[size]
        return lim.h_min <= code <= lim.h_max

    def decode_list(self, code: int, size: int) -> list[int]:
        """Decode *code* into a list of Python ints of length *size*."""
        lim = self.limit(size)
        if not lim.h_min <= code <= lim.h_max:
            if size == 0:
                raise RangeError(f"only a code of zero can be decoded into an empty vector, got {code}")
            raise RangeError(
                f"the integer {code} is out of the bounds [{lim.h_min}, {lim.h_max}] "
                f"for a Kronecker code of size {size}"
            )
        shifted = code - lim.h_min
        radix = lim.radix
        out = []
        for _ in range(size):
            shifted, digit = divmod(shifted, radix)
            out.append(digit - lim.bound)
        return out

    def decode(self, code: int, size: int) -> np.ndarray:
        """Decode *code* into an array of length *size* with this codec's integer type.

        Raises
        ------
        RangeError
            If *size* exceeds :attr:`max_size` or *code* is not a valid code
            for *size*.
        """
        return np.array(self.decode_list(code, size), dtype=self.int_type)


_registry: dict[type[np.signedinteger], KroneckerArray] = {}
_registry_lock = threading.Lock()


def get_kronecker_array(int_type: Any = None) -> KroneckerArray:
    """Return the shared codec for *int_type* (default: the configured default width)."""
    key = normalize_int_type(get_settings().default_int_type if int_type is None else int_type)
    codec = _registry.get(key)
    if codec is None:
        with _registry_lock:
            codec = _registry.setdefault(key, KroneckerArray(key))
    return codec
