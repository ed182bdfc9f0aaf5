"""
Amount primitives: exact rationals at the core, lenient coercion at the boundary.

- Internal amounts are `fractions.Fraction`; interpolation, inversion and
  segment intersection never round.
- Accepted inputs: int, str (decimal or "p/q"), Decimal, Fraction, float.
  Floats go through their shortest repr so 0.1 means one tenth, not the
  nearest binary double.
- bool, NaN and infinities are rejected with AmountDomainError.
- Unreachable inverse amounts are represented by `math.inf` (UNREACHABLE).
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Tuple, Union

from .exc import AmountDomainError

# Unified amount-like input type for public signatures
AmountLike = Union[int, str, Decimal, Fraction, float]

# Point as stored in curves: (x, y) with exact coordinates
Point = Tuple[Fraction, Fraction]

#: Result of inverting a curve above its maximum output.
UNREACHABLE = math.inf

ZERO = Fraction(0)


def to_amount(x: AmountLike) -> Fraction:
    """Coerce a numeric-like value to an exact Fraction (sign unrestricted)."""
    if isinstance(x, bool):
        raise AmountDomainError("bool is not an amount")
    if isinstance(x, Fraction):
        return x
    if isinstance(x, int):
        return Fraction(x)
    if isinstance(x, float):
        if math.isnan(x) or math.isinf(x):
            raise AmountDomainError(f"non-finite amount: {x!r}")
        return Fraction(repr(x))
    if isinstance(x, Decimal):
        if not x.is_finite():
            raise AmountDomainError(f"non-finite amount: {x!r}")
        return Fraction(x)
    if isinstance(x, str):
        s = x.strip()
        if not s:
            raise AmountDomainError("empty amount string")
        try:
            if "/" in s:
                return Fraction(s)
            d = Decimal(s)
        except (InvalidOperation, ValueError, ZeroDivisionError) as e:
            raise AmountDomainError(f"invalid amount string: {x!r}") from e
        if not d.is_finite():
            raise AmountDomainError(f"non-finite amount: {x!r}")
        return Fraction(d)
    raise AmountDomainError(f"unsupported amount type: {type(x).__name__}")


def to_non_negative_amount(x: AmountLike) -> Fraction:
    """Coerce and reject negative values (query amounts, curve coordinates)."""
    a = to_amount(x)
    if a < 0:
        raise AmountDomainError(f"negative amount not allowed: {x!r}")
    return a


def to_point(p) -> Point:
    """Coerce a 2-sequence into a non-negative exact point."""
    try:
        x, y = p
    except (TypeError, ValueError) as e:
        raise AmountDomainError(f"point must be an (x, y) pair, got {p!r}") from e
    return to_non_negative_amount(x), to_non_negative_amount(y)


def is_unreachable(x) -> bool:
    return isinstance(x, float) and math.isinf(x)


__all__ = [
    "AmountLike",
    "Point",
    "UNREACHABLE",
    "ZERO",
    "to_amount",
    "to_non_negative_amount",
    "to_point",
    "is_unreachable",
]
