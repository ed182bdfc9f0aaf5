"""
Formatting helpers (non-core arithmetic).

Core arithmetic uses exact rationals. Decimal here is only for rendering
amounts as plain decimal strings in quotes and exported advertisements, so
that peers written in any language read the same value.
"""

from __future__ import annotations

from decimal import Context, Decimal
from fractions import Fraction
from typing import List

from .amounts import AmountLike, Point, is_unreachable, to_amount
from .constants import DEFAULT_DECIMAL_PRECISION
from .exc import AmountDomainError

# Debug printing control (formatting layer)
DEBUG_FMT = False

def _dbg(msg: str) -> None:
    if DEBUG_FMT:
        print(msg)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _terminating_scale(den: int) -> int | None:
    """Return k such that den divides 10**k, or None if the expansion repeats."""
    twos = fives = 0
    while den % 2 == 0:
        den //= 2
        twos += 1
    while den % 5 == 0:
        den //= 5
        fives += 1
    if den != 1:
        return None
    return max(twos, fives)


def _plain(d: Decimal) -> str:
    s = format(d, "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    if s in ("-0", ""):
        s = "0"
    return s


# ---------------------------------------------------------------------------
# Public formatting
# ---------------------------------------------------------------------------

def to_decimal(x: AmountLike, *, precision: int = DEFAULT_DECIMAL_PRECISION) -> Decimal:
    """Decimal view of an amount: exact when the expansion terminates,
    otherwise rounded to `precision` significant digits."""
    if is_unreachable(x):
        raise AmountDomainError("cannot render an unreachable amount")
    q: Fraction = to_amount(x)
    k = _terminating_scale(q.denominator)
    if k is not None:
        return Decimal(f"{q.numerator * (10 ** k // q.denominator)}E-{k}")
    _dbg(f"to_decimal: repeating expansion for {q}, rounding to {precision} digits")
    return Context(prec=precision).divide(Decimal(q.numerator), Decimal(q.denominator))


def fmt_amount(x: AmountLike, *, precision: int = DEFAULT_DECIMAL_PRECISION) -> str:
    """Render an amount as a plain decimal string, e.g.:

      Fraction(50)      -> '50'
      Fraction(1, 8)    -> '0.125'
      Fraction(200, 3)  -> '66.66666666666666666666666667'
    """
    return _plain(to_decimal(x, precision=precision))


def fmt_points(points, *, precision: int = DEFAULT_DECIMAL_PRECISION) -> List[List[str]]:
    """Render curve points as `[[x, y], ...]` decimal strings (wire form)."""
    out: List[List[str]] = []
    for p in points:
        x, y = p
        out.append([fmt_amount(x, precision=precision), fmt_amount(y, precision=precision)])
    return out


def fmt_point(p: Point) -> str:
    """Compact `(x, y)` rendering for logs."""
    return f"({fmt_amount(p[0])}, {fmt_amount(p[1])})"


__all__ = [
    "to_decimal",
    "fmt_amount",
    "fmt_points",
    "fmt_point",
]
