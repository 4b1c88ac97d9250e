"""Runtime configuration for kronpoly.

Settings are held in an immutable :class:`KronpolySettings` record. Updates
replace the record atomically under a lock, so readers never observe a
half-applied change.

Examples
--------
>>> from kronpoly import settings
>>> settings.get_settings().debug_checks in (True, False)
True
>>> with settings.settings_override(debug_checks=False):
...     settings.get_settings().debug_checks
False
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, fields, replace
from typing import Any

import numpy as np

__all__ = [
    "KronpolySettings",
    "SUPPORTED_INT_TYPES",
    "get_settings",
    "set_settings",
    "reset_settings",
    "settings_override",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

SUPPORTED_INT_TYPES: tuple[type[np.signedinteger], ...] = (np.int8, np.int16, np.int32, np.int64)


def normalize_int_type(dtype: Any) -> type[np.signedinteger]:
    """Return the NumPy scalar type for *dtype*, or raise ``TypeError``.

    Accepts scalar types (``np.int32``), dtype objects and dtype strings
    (``"int32"``).
    """
    try:
        scalar = np.dtype(dtype).type
    except TypeError as exc:
        raise TypeError(f"Not a NumPy integer type: {dtype!r}") from exc
    if scalar not in SUPPORTED_INT_TYPES:
        names = ", ".join(t.__name__ for t in SUPPORTED_INT_TYPES)
        raise TypeError(f"Unsupported integer type {dtype!r}; expected one of: {names}.")
    return scalar


@dataclass(frozen=True)
class KronpolySettings:
    """Immutable settings record.

    Parameters
    ----------
    default_int_type : numpy signed integer type, default=numpy.int64
        Width used by :func:`kronpoly.kronecker_monomial.kronecker_monomial_type`
        and :func:`kronpoly.kronecker_array.get_kronecker_array` when no type
        is given.
    debug_checks : bool
        When True, :func:`kronpoly.term_multiplication.multiply_terms` asserts
        operand compatibility before entering the unchecked hot path.
    """

    default_int_type: type[np.signedinteger] = np.int64
    debug_checks: bool = __debug__


_DEFAULTS = KronpolySettings()
_lock = threading.Lock()
_current = _DEFAULTS


def get_settings() -> KronpolySettings:
    """Return the active settings record."""
    return _current


def _validated(changes: dict[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(KronpolySettings)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise TypeError(f"Unknown setting(s): {', '.join(unknown)}")
    out = dict(changes)
    if "default_int_type" in out:
        out["default_int_type"] = normalize_int_type(out["default_int_type"])
    if "debug_checks" in out:
        out["debug_checks"] = bool(out["debug_checks"])
    return out


def set_settings(**changes: Any) -> KronpolySettings:
    """Replace the named fields of the active settings and return the new record."""
    global _current
    changes = _validated(changes)
    with _lock:
        _current = replace(_current, **changes)
        new = _current
    logger.debug("settings updated: %s", changes)
    return new


def reset_settings() -> KronpolySettings:
    """Restore the default settings."""
    global _current
    with _lock:
        _current = _DEFAULTS
    return _DEFAULTS


@contextmanager
def settings_override(**changes: Any) -> Iterator[KronpolySettings]:
    """Temporarily apply *changes*, restoring the previous record on exit."""
    global _current
    changes = _validated(changes)
    with _lock:
        previous = _current
        _current = replace(previous, **changes)
        active = _current
    try:
        yield active
    finally:
        with _lock:
            _current = previous
