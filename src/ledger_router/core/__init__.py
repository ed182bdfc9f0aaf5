"""
Ledger Router Core
==================

Unified exports for the exact rate-curve algebra and the immutable records the
routing table is built from. Arithmetic is rational (fractions.Fraction);
Decimal is used only to render amounts as strings.
"""

# NOTE:
#   The `core` package has no knowledge of the routing table. Everything here is
#   a pure value or a pure function, which keeps the algebra testable on its own.

from .constants import (
    DEFAULT_DECIMAL_PRECISION,
    DEFAULT_MAX_AGE_MS,
    DEFAULT_MAX_POINTS,
    MIN_SIMPLIFY_POINTS,
    AUTHORITY_PEER,
    AUTHORITY_LOCAL,
    AUTHORITY_PAIR,
)

# Amount coercion (I/O boundary)
from .amounts import (
    AmountLike,
    Point,
    UNREACHABLE,
    to_amount,
    to_non_negative_amount,
    to_point,
    is_unreachable,
)

# Decimal formatting helpers (non-core arithmetic)
from .fmt import (
    to_decimal,
    fmt_amount,
    fmt_points,
    fmt_point,
)

# Curve algebra
from .simplify import visvalingam_whyatt
from .curve import Curve, Simplifier

# Records and results
from .datatypes import (
    Advertisement,
    RouteRecord,
    BestHop,
    BestCost,
    Quote,
)

# Core exceptions
from .exc import AmountDomainError, CurveDomainError, RouteDomainError, InvariantViolation

__all__ = [
    # constants
    "DEFAULT_DECIMAL_PRECISION",
    "DEFAULT_MAX_AGE_MS",
    "DEFAULT_MAX_POINTS",
    "MIN_SIMPLIFY_POINTS",
    "AUTHORITY_PEER",
    "AUTHORITY_LOCAL",
    "AUTHORITY_PAIR",
    # amounts
    "AmountLike",
    "Point",
    "UNREACHABLE",
    "to_amount",
    "to_non_negative_amount",
    "to_point",
    "is_unreachable",
    # fmt
    "to_decimal",
    "fmt_amount",
    "fmt_points",
    "fmt_point",
    # curve
    "visvalingam_whyatt",
    "Curve",
    "Simplifier",
    # datatypes
    "Advertisement",
    "RouteRecord",
    "BestHop",
    "BestCost",
    "Quote",
    # exceptions
    "AmountDomainError",
    "CurveDomainError",
    "RouteDomainError",
    "InvariantViolation",
]
