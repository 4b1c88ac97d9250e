"""Top-level public API for the ``kronpoly`` package.

kronpoly provides the monomial layer of a sparse multivariate polynomial
library: exponent vectors Kronecker-packed into a single machine integer, the
symbol-set merge algebra used to rebase them, and the term multiplication step
of the product loop. For example:

>>> from kronpoly import KroneckerMonomial, SymbolSet
>>> ss = SymbolSet(["x", "y"])
>>> KroneckerMonomial([-1, -2], ss).format(ss)
'x**-1*y**-2'

Both the packed :class:`KroneckerMonomial` and the dense :class:`Monomial`
are exported, together with the codec, configuration and error types.
"""

from . import settings
from .coefficients import mul_coefficients
from .errors import (
    InvalidArgument,
    KronpolyError,
    PowerDivisorZeroError,
    RangeError,
    StaleSymbolSetError,
)
from .keys import MonomialKey
from .kronecker_array import KroneckerArray, KroneckerLimit, get_kronecker_array
from .kronecker_monomial import KroneckerMonomial, kronecker_monomial_type
from .monomial import Monomial
from .settings import get_settings, reset_settings, set_settings, settings_override
from .symbol_utils import (
    InsertionPlan,
    SymbolSet,
    SymbolTable,
    index_of,
    merge_symbol_fsets,
    symbol_positions,
    symbol_positions_map,
    trim_symbol_set,
)
from .sympy_bridge import key_to_expr, terms_from_expr, terms_to_expr
from .term import Term
from .term_multiplication import (
    multiply_term_sets,
    multiply_terms,
    new_term_buffer,
    validate_product_range,
)

__all__ = [
    "settings",
    "mul_coefficients",
    "InvalidArgument",
    "KronpolyError",
    "PowerDivisorZeroError",
    "RangeError",
    "StaleSymbolSetError",
    "MonomialKey",
    "KroneckerArray",
    "KroneckerLimit",
    "get_kronecker_array",
    "KroneckerMonomial",
    "kronecker_monomial_type",
    "Monomial",
    "get_settings",
    "reset_settings",
    "set_settings",
    "settings_override",
    "InsertionPlan",
    "SymbolSet",
    "SymbolTable",
    "index_of",
    "merge_symbol_fsets",
    "symbol_positions",
    "symbol_positions_map",
    "trim_symbol_set",
    "key_to_expr",
    "terms_from_expr",
    "terms_to_expr",
    "Term",
    "multiply_term_sets",
    "multiply_terms",
    "new_term_buffer",
    "validate_product_range",
]
