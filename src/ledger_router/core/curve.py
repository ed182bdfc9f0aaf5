"""
Piecewise-linear rate curves (exact rational arithmetic).

A Curve maps an input amount on one ledger to the best output amount on
another. It is an immutable tuple of points with strictly increasing x; every
operation returns a new Curve.

Semantics at the edges:
- below the first point nothing is quoted (0), exactly at it the first y;
- at or beyond the last point the output is flat (capacity ceiling);
- inverting above the last y is UNREACHABLE (math.inf).
"""

# NOTE:
#   All coordinates are fractions.Fraction, so crossovers are exact and
#   combine/join postconditions hold with `==`. Decimal appears only when
#   points are rendered for the wire (see core/fmt.py).

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from fractions import Fraction
from functools import cached_property
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from .amounts import (
    UNREACHABLE,
    ZERO,
    AmountLike,
    Point,
    is_unreachable,
    to_amount,
    to_point,
)
from .exc import CurveDomainError
from .fmt import fmt_points
from .simplify import visvalingam_whyatt

# Debug printing control
DEBUG_CURVE = False

def _dbg(msg: str) -> None:
    if DEBUG_CURVE:
        print(msg)


Simplifier = Callable[[Sequence[Point], int], List[Point]]


# ---------------------------------------------------------------------------
# Segment helpers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Line:
    """Segment [x0, x1] of the line y = m·x + b.

         y₁ - y₀       x₁y₀ - x₀y₁
    m = ─────────  b = ─────────────
         x₁ - x₀         x₁ - x₀
    """
    m: Fraction
    b: Fraction
    x0: Fraction
    x1: Fraction

    @classmethod
    def through(cls, pa: Point, pb: Point) -> "_Line":
        # x is strictly increasing inside a curve, so dx > 0 and the slope is finite.
        dx = pb[0] - pa[0]
        return cls(
            m=(pb[1] - pa[1]) / dx,
            b=(pb[0] * pa[1] - pa[0] * pb[1]) / dx,
            x0=pa[0],
            x1=pb[0],
        )


def _intersect(line0: _Line, line1: _Line) -> Optional[Point]:
    """Crossing of two segments, or None if parallel or outside either span.

         b₁ - b₀
    x = ─────────  with line0.x₀ ≤ x ≤ line0.x₁ and line1.x₀ ≤ x ≤ line1.x₁
         m₀ - m₁
    """
    if line0.m == line1.m:
        return None
    x = (line1.b - line0.b) / (line0.m - line1.m)
    if x < line0.x0 or line0.x1 < x:
        return None
    if x < line1.x0 or line1.x1 < x:
        return None
    return x, line0.m * x + line0.b


def _overlapping_segments(points_a: Sequence[Point], points_b: Sequence[Point]) -> Iterator[Tuple[_Line, _Line]]:
    """Yield each pair of segments (one from each side) whose x-spans overlap.

    Both sides are walked in x order. `cursor` only moves forward: a segment
    of B that ends before the current A segment starts is never revisited, and
    the inner scan stops at the first B segment starting after A ends.
    """
    cursor = 1
    for ia in range(1, len(points_a)):
        line_a = _Line.through(points_a[ia - 1], points_a[ia])
        for ib in range(cursor, len(points_b)):
            line_b = _Line.through(points_b[ib - 1], points_b[ib])
            if line_b.x1 < line_a.x0:
                cursor += 1
                continue
            if line_a.x1 < line_b.x0:
                break
            yield line_a, line_b


def _sorted_unique(points: Iterable[Point]) -> Tuple[Point, ...]:
    """Stable sort by x, keeping the first point for each x."""
    out: List[Point] = []
    for p in sorted(points, key=lambda p: p[0]):
        if out and out[-1][0] == p[0]:
            continue
        out.append(p)
    return tuple(out)


# ---------------------------------------------------------------------------
# Curve
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Curve:
    """Immutable piecewise-linear rate curve.

    Use `Curve.from_points` for untrusted input (advertisements); it coerces
    amounts and enforces non-empty, non-negative, x strictly increasing and y
    non-decreasing. The plain constructor only enforces x ordering and is what
    the algebra uses for its own results.
    """

    points: Tuple[Point, ...] = ()

    def __post_init__(self) -> None:
        pts = tuple(self.points)
        object.__setattr__(self, "points", pts)
        for (x0, _), (x1, _) in zip(pts, pts[1:]):
            if not x0 < x1:
                raise CurveDomainError(f"curve x must be strictly increasing ({x0} then {x1})")

    # ------------- constructors -------------

    @classmethod
    def from_points(cls, points: Iterable[Sequence[AmountLike]]) -> "Curve":
        """Validate and coerce boundary input into a Curve."""
        if isinstance(points, (str, bytes)):
            raise CurveDomainError("points must be a sequence of (x, y) pairs")
        try:
            pts = [to_point(p) for p in points]
        except TypeError as e:
            raise CurveDomainError("points must be a sequence of (x, y) pairs") from e
        if not pts:
            raise CurveDomainError("a curve needs at least one point")
        for (x0, y0), (x1, y1) in zip(pts, pts[1:]):
            if not x0 < x1:
                raise CurveDomainError(f"curve x must be strictly increasing ({x0} then {x1})")
            if y1 < y0:
                raise CurveDomainError(f"curve y must be non-decreasing ({y0} then {y1})")
        return cls(tuple(pts))

    # ------------- accessors -------------

    @cached_property
    def _xs(self) -> List[Fraction]:
        return [p[0] for p in self.points]

    @cached_property
    def _ys(self) -> List[Fraction]:
        return [p[1] for p in self.points]

    def is_empty(self) -> bool:
        return not self.points

    def __len__(self) -> int:
        return len(self.points)

    @property
    def max_input(self) -> Fraction:
        """Input beyond which the output no longer grows."""
        return self.points[-1][0] if self.points else ZERO

    @property
    def max_output(self) -> Fraction:
        """Largest obtainable output (capacity)."""
        return self.points[-1][1] if self.points else ZERO

    def to_wire(self, **kw) -> List[List[str]]:
        """Points as `[[x, y], ...]` decimal strings."""
        return fmt_points(self.points, **kw)

    # ------------- evaluation -------------

    def amount_at(self, x: AmountLike) -> Fraction:
        """Output obtainable for input `x`."""
        pts = self.points
        if not pts:
            return ZERO
        x = to_amount(x)
        if x < pts[0][0]:
            return ZERO
        if x == pts[0][0]:
            return pts[0][1]
        if pts[-1][0] <= x:
            return pts[-1][1]

        i = bisect_left(self._xs, x)
        (x0, y0), (x1, y1) = pts[i - 1], pts[i]
        return (y1 - y0) / (x1 - x0) * (x - x0) + y0

    def amount_reverse(self, y: AmountLike):
        """Smallest input producing output `y`; UNREACHABLE above capacity."""
        pts = self.points
        if not pts:
            return UNREACHABLE
        y = to_amount(y)
        if pts[0][1] >= y:
            return pts[0][0]
        if pts[-1][1] < y:
            return UNREACHABLE

        i = bisect_left(self._ys, y)
        (x0, y0), (x1, y1) = pts[i - 1], pts[i]
        return (x1 - x0) / (y1 - y0) * (y - y0) + x0

    # ------------- algebra -------------

    def simplify(self, max_points: int, simplifier: Simplifier = visvalingam_whyatt) -> "Curve":
        """Reduce to at most `max_points` points, endpoints preserved."""
        return Curve(tuple(simplifier(self.points, max_points)))

    def combine(self, other: "Curve") -> "Curve":
        """Pointwise maximum of two alternatives for the same ledger pair."""
        if not self.points:
            return other
        if not other.points:
            return self
        pts = (
            self._map_to_max(other.points)
            + other._map_to_max(self.points)
            + self._crossovers(other)
        )
        return Curve(_sorted_unique(pts))

    def _map_to_max(self, points: Sequence[Point]) -> List[Point]:
        """Lift `points` onto max(self, points): each y is raised to self's output at that x."""
        return [(x, max(y, self.amount_at(x))) for x, y in points]

    def _crossovers(self, other: "Curve") -> List[Point]:
        """Points where self and `other` swap order.

        The shorter curve is extended flat to the other's last x first, so a
        capacity plateau can cross the other curve.
        """
        end_a = self.points[-1]
        end_b = other.points[-1]
        points_a = list(self.points)
        points_b = list(other.points)
        if end_a[0] < end_b[0]:
            points_a.append((end_b[0], end_a[1]))
        if end_b[0] < end_a[0]:
            points_b.append((end_a[0], end_b[1]))

        result: List[Point] = []
        for line_a, line_b in _overlapping_segments(points_a, points_b):
            solution = _intersect(line_a, line_b)
            if solution is not None:
                _dbg(f"crossover at x={solution[0]}, y={solution[1]}")
                result.append(solution)
        return result

    def join(self, other: "Curve") -> "Curve":
        """Composition: value flows through `self`, then through `other`."""
        if not self.points:
            return other
        if not other.points:
            return self
        forward = [(x, other.amount_at(y)) for x, y in self.points]
        backward = [(self.amount_reverse(x), y) for x, y in other.points]
        backward = [p for p in backward if not is_unreachable(p[0])]
        return Curve(_sorted_unique(forward + backward))

    def shift_y(self, dy: AmountLike) -> "Curve":
        """Translate every output by `dy` (flat fee or bonus)."""
        d = to_amount(dy)
        return Curve(tuple((x, y + d) for x, y in self.points))


__all__ = [
    "Curve",
    "Simplifier",
]
