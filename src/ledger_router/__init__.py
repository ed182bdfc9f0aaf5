"""
Top-level API for ledger_router.

Rate quoting and next-hop selection for a connector linking ledgers:
  - RoutingTable: learns local and peer routes, composes multi-hop routes,
    quotes both fixed-source and fixed-destination payments, exports a
    bounded summary for re-broadcast
  - Curve: exact piecewise-linear rate curves

Transport, persistence and payment execution are left to the caller: the
table takes plain advertisement mappings in and gives quotes and export
records out.
"""

# NOTE:
#   The library never configures logging. A NullHandler is attached to the package
#   logger so that applications decide where table activity goes.

from __future__ import annotations

import logging

from .table import RoutingTable
from .config import RoutingConfig
from .prefix import resolve_prefix

from .core import (
    Curve,
    Advertisement,
    RouteRecord,
    BestHop,
    BestCost,
    Quote,
    UNREACHABLE,
    visvalingam_whyatt,
    AmountDomainError,
    CurveDomainError,
    RouteDomainError,
    InvariantViolation,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # routing
    "RoutingTable",
    "RoutingConfig",
    "resolve_prefix",
    # curves and records
    "Curve",
    "Advertisement",
    "RouteRecord",
    "BestHop",
    "BestCost",
    "Quote",
    "UNREACHABLE",
    "visvalingam_whyatt",
    # errors
    "AmountDomainError",
    "CurveDomainError",
    "RouteDomainError",
    "InvariantViolation",
]
