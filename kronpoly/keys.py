"""Capability surface shared by the monomial key types.

Two key kinds exist: the packed :class:`~kronpoly.kronecker_monomial.KroneckerMonomial`
and the dense :class:`~kronpoly.monomial.Monomial`. The series layer picks one
class up front and calls it directly; this protocol only documents, and lets
tests check, that both expose the same operations.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableSequence, Sequence
from typing import IO, Any, ClassVar, Protocol, runtime_checkable

from .term import Term

__all__ = ["MonomialKey"]


@runtime_checkable
class MonomialKey(Protocol):
    multiply_arity: ClassVar[int]

    def is_compatible(self, symbols: Sequence[str]) -> bool: ...

    def is_unitary(self, symbols: Sequence[str]) -> bool: ...

    def degree(self, symbols: Sequence[str], positions: Sequence[int] | None = None) -> Any: ...

    def ldegree(self, symbols: Sequence[str], positions: Sequence[int] | None = None) -> Any: ...

    def hash(self) -> int: ...

    def unpack(self, symbols: Sequence[str]) -> Any: ...

    def print(self, stream: IO[str], symbols: Sequence[str]) -> None: ...

    def print_tex(self, stream: IO[str], symbols: Sequence[str]) -> None: ...

    def merge_symbols(self, insertion_map: Mapping[int, Sequence[str]], symbols: Sequence[str]) -> Any: ...

    def trim_identify(self, mask: MutableSequence[Any], symbols: Sequence[str]) -> None: ...

    def trim(self, mask: Sequence[Any], symbols: Sequence[str]) -> Any: ...

    @classmethod
    def multiply(cls, out: MutableSequence[Any], t1: Term, t2: Term, symbols: Sequence[str]) -> None: ...

    def partial(self, positions: Sequence[int], symbols: Sequence[str]) -> tuple[Any, Any]: ...

    def integrate(self, name: Any, symbols: Sequence[str]) -> tuple[Any, Any]: ...

    def evaluate(self, pmap: Mapping[int, Any], symbols: Sequence[str]) -> Any: ...

    def subs(self, pmap: Mapping[int, Any], symbols: Sequence[str]) -> Any: ...

    def ipow_subs(self, pmap: Mapping[int, Any], n: int, symbols: Sequence[str]) -> Any: ...
