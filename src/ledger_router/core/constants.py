"""
Ledger Router Core Constants
============================

Defaults shared by the curve algebra, the routing table and the formatting layer.
Arithmetic is exact (rational); the only precision knob is for decimal output.
"""

# ---------------------------------------------------------------------------
# Formatting (I/O only)
# ---------------------------------------------------------------------------

#: Significant digits used when a non-terminating rational is rendered as a
#: decimal string. Terminating values are always rendered exactly.
DEFAULT_DECIMAL_PRECISION: int = 28


# ---------------------------------------------------------------------------
# Routing table defaults
# ---------------------------------------------------------------------------

#: Lifetime of a learned (peer) route, in milliseconds.
DEFAULT_MAX_AGE_MS: int = 45_000

#: Maximum number of curve points per exported advertisement.
DEFAULT_MAX_POINTS: int = 10

#: Smallest point budget simplification can honour (both endpoints are kept).
MIN_SIMPLIFY_POINTS: int = 2


# ---------------------------------------------------------------------------
# Authority ranks (higher wins when two records claim the same triple)
# ---------------------------------------------------------------------------

AUTHORITY_PEER: int = 0
AUTHORITY_LOCAL: int = 1
AUTHORITY_PAIR: int = 2


__all__ = [
    "DEFAULT_DECIMAL_PRECISION",
    "DEFAULT_MAX_AGE_MS",
    "DEFAULT_MAX_POINTS",
    "MIN_SIMPLIFY_POINTS",
    "AUTHORITY_PEER",
    "AUTHORITY_LOCAL",
    "AUTHORITY_PAIR",
]
