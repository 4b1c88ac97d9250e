"""Symbol sets and the merge algebra used to rebase monomials.

A :class:`SymbolSet` is an immutable, sorted, de-duplicated tuple of variable
names. Monomials never store one; every monomial operation receives the symbol
set it was built against.

When two operands with different symbol sets meet, :func:`merge_symbol_fsets`
computes their union together with one *insertion map* per operand. An
insertion map ``{pos: run}`` says "insert the symbols of ``run`` before
position ``pos`` of the original set" (``pos == len(original)`` appends), which
is exactly what ``merge_symbols`` on a monomial consumes.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

import sympy as sp

from .errors import InvalidArgument, StaleSymbolSetError

__all__ = [
    "SymbolSet",
    "InsertionMap",
    "merge_symbol_fsets",
    "index_of",
    "symbol_positions",
    "symbol_positions_map",
    "trim_symbol_set",
    "InsertionPlan",
    "SymbolTable",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

V = TypeVar("V")


def _symbol_name(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, sp.Symbol):
        return item.name
    raise TypeError(f"Symbol names must be str or sympy.Symbol, got {type(item).__name__}")


class SymbolSet(tuple):
    """Sorted tuple of unique symbol names.

    ``SymbolSet(["y", "x", "x"]) == ("x", "y")``. ``sympy.Symbol`` items are
    reduced to their names.
    """

    __slots__ = ()

    def __new__(cls, items: Iterable[Any] = ()) -> "SymbolSet":
        if isinstance(items, SymbolSet):
            return items
        if isinstance(items, (str, sp.Symbol)):
            items = (items,)
        return super().__new__(cls, sorted({_symbol_name(s) for s in items}))

    def __repr__(self) -> str:
        return f"SymbolSet({list(self)!r})"

    def index_of(self, name: Any) -> int:
        """Position of *name*, or ``len(self)`` when absent."""
        return index_of(self, name)


def as_symbol_set(symbols: Iterable[Any]) -> SymbolSet:
    return symbols if isinstance(symbols, SymbolSet) else SymbolSet(symbols)


InsertionMap = dict[int, SymbolSet]


def merge_symbol_fsets(
    a: Iterable[Any], b: Iterable[Any]
) -> tuple[SymbolSet, InsertionMap, InsertionMap]:
    """Merge two symbol sets.

    Parameters
    ----------
    a, b : iterable of str
        The operands' symbol sets (sorted and de-duplicated on entry).

    Returns
    -------
    union : SymbolSet
        Sorted union of ``a`` and ``b``.
    ins_a : dict[int, SymbolSet]
        Runs of symbols of ``b`` missing from ``a``, keyed by the position in
        ``a`` before which they go (``len(a)`` means "at the end").
    ins_b : dict[int, SymbolSet]
        Same for ``b``.

    Examples
    --------
    >>> u, ia, ib = merge_symbol_fsets(["b", "c", "e"], ["a", "c", "d", "f", "g"])
    >>> list(u)
    ['a', 'b', 'c', 'd', 'e', 'f', 'g']
    >>> {k: list(v) for k, v in ia.items()}
    {0: ['a'], 2: ['d'], 3: ['f', 'g']}
    >>> {k: list(v) for k, v in ib.items()}
    {1: ['b'], 3: ['e']}
    """
    sa = as_symbol_set(a)
    sb = as_symbol_set(b)
    union: list[str] = []
    runs_a: dict[int, list[str]] = {}
    runs_b: dict[int, list[str]] = {}
    i = j = 0
    while i < len(sa) and j < len(sb):
        if sa[i] == sb[j]:
            union.append(sa[i])
            i += 1
            j += 1
        elif sa[i] < sb[j]:
            union.append(sa[i])
            runs_b.setdefault(j, []).append(sa[i])
            i += 1
        else:
            union.append(sb[j])
            runs_a.setdefault(i, []).append(sb[j])
            j += 1
    for name in sa[i:]:
        union.append(name)
        runs_b.setdefault(j, []).append(name)
    for name in sb[j:]:
        union.append(name)
        runs_a.setdefault(i, []).append(name)

    ins_a = {k: SymbolSet(v) for k, v in runs_a.items()}
    ins_b = {k: SymbolSet(v) for k, v in runs_b.items()}
    return SymbolSet(union), ins_a, ins_b


def index_of(symbols: Sequence[str], name: Any) -> int:
    """Return the position of *name* in the sorted *symbols*, or ``len(symbols)`` if absent."""
    name = _symbol_name(name)
    lo, hi = 0, len(symbols)
    while lo < hi:
        mid = (lo + hi) // 2
        if symbols[mid] < name:
            lo = mid + 1
        else:
            hi = mid
    if lo < len(symbols) and symbols[lo] == name:
        return lo
    return len(symbols)


def symbol_positions(symbols: Sequence[str], names: Iterable[Any]) -> tuple[int, ...]:
    """Sorted positions in *symbols* of those *names* that occur in it."""
    n = len(symbols)
    return tuple(sorted({p for p in (index_of(symbols, s) for s in names) if p != n}))


def symbol_positions_map(symbols: Sequence[str], mapping: Mapping[Any, V]) -> dict[int, V]:
    """Re-key a ``name -> value`` mapping by position in *symbols*.

    Names not present in *symbols* are dropped. The result is ordered by
    position, which is what ``evaluate``/``subs``/``ipow_subs`` expect.
    """
    n = len(symbols)
    out: dict[int, V] = {}
    for name, value in mapping.items():
        pos = index_of(symbols, name)
        if pos != n:
            out[pos] = value
    return dict(sorted(out.items()))


def trim_symbol_set(symbols: Sequence[str], mask: Sequence[Any]) -> SymbolSet:
    """Return *symbols* without the positions where *mask* is truthy."""
    if len(symbols) != len(mask):
        raise InvalidArgument(
            "invalid argument(s) for symbol set trimming: the size of the original symbol set "
            f"({len(symbols)}) differs from the size of trimming mask ({len(mask)})"
        )
    return SymbolSet(s for s, drop in zip(symbols, mask) if not drop)


# === SECTION: Versioned symbol table [id: symbol-table]===
#
# A polynomial family sharing one symbol set tags every cached, rebased
# representation with the table version it was computed against. Merges and
# trims bump the version, so a stale tag is detected instead of silently
# decoding against the wrong positions.
# === END SECTION: Versioned symbol table ===


@dataclass(frozen=True)
class InsertionPlan:
    """Result of :meth:`SymbolTable.merge`.

    ``ins_table`` rebases keys built against the table's previous symbols;
    ``ins_other`` rebases keys built against the merged-in symbols.
    """

    old_version: int
    new_version: int
    symbols: SymbolSet
    ins_table: InsertionMap
    ins_other: InsertionMap

    @property
    def changed(self) -> bool:
        return self.old_version != self.new_version


class SymbolTable:
    """Shared, versioned symbol set.

    Parameters
    ----------
    symbols : iterable of str, optional
        Initial symbols.
    """

    def __init__(self, symbols: Iterable[Any] = ()) -> None:
        self._symbols = SymbolSet(symbols)
        self._version = 0
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"SymbolTable({list(self._symbols)!r}, version={self._version})"

    @property
    def symbols(self) -> SymbolSet:
        return self._symbols

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> tuple[SymbolSet, int]:
        """Return the current ``(symbols, version)`` pair consistently."""
        with self._lock:
            return self._symbols, self._version

    def merge(self, other: Iterable[Any]) -> InsertionPlan:
        """Merge *other* into the table; bumps the version only if new symbols appear."""
        with self._lock:
            old = self._version
            union, ins_table, ins_other = merge_symbol_fsets(self._symbols, other)
            if ins_table:
                self._symbols = union
                self._version += 1
                logger.debug("symbol table grew to %d symbols (version %d)", len(union), self._version)
            return InsertionPlan(
                old_version=old,
                new_version=self._version,
                symbols=union,
                ins_table=ins_table,
                ins_other=ins_other,
            )

    def trim(self, mask: Sequence[Any]) -> SymbolSet:
        """Drop the masked symbols and bump the version if any was dropped."""
        with self._lock:
            trimmed = trim_symbol_set(self._symbols, mask)
            if len(trimmed) != len(self._symbols):
                self._symbols = trimmed
                self._version += 1
                logger.debug("symbol table trimmed to %d symbols (version %d)", len(trimmed), self._version)
            return self._symbols

    def check_version(self, version: int) -> None:
        """Raise :class:`StaleSymbolSetError` unless *version* is current."""
        current = self._version
        if version != current:
            raise StaleSymbolSetError(
                f"representation computed against symbol table version {version}, current version is {current}"
            )
