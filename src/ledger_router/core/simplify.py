"""Visvalingam–Whyatt line simplification over exact points.

Point ranking comes from the `visvalingamwyatt` package: each point gets the
effective triangle area at which Visvalingam–Whyatt would eliminate it. The
ranking runs on float copies; the points returned are the caller's own exact
values, in their original order. Endpoints are always kept.

The routing table receives this function as an injectable `simplifier`
(`(points, max_points) -> points`), so any other algorithm with the same
signature can replace it.
"""

from __future__ import annotations

from typing import List, Sequence

import visvalingamwyatt as vw

from .amounts import Point
from .constants import MIN_SIMPLIFY_POINTS
from .exc import CurveDomainError


def visvalingam_whyatt(points: Sequence[Point], max_points: int) -> List[Point]:
    """Return at most `max_points` of `points`, keeping both endpoints."""
    if max_points < MIN_SIMPLIFY_POINTS:
        raise CurveDomainError(f"max_points must be >= {MIN_SIMPLIFY_POINTS}, got {max_points}")
    pts = list(points)
    n = len(pts)
    if n <= max_points:
        return pts

    thresholds = vw.Simplifier([(float(x), float(y)) for x, y in pts]).thresholds
    # ties go to the earlier point
    interior = sorted(range(1, n - 1), key=lambda i: (-float(thresholds[i]), i))
    keep = sorted([0, n - 1] + interior[: max_points - 2])
    return [pts[i] for i in keep]


__all__ = [
    "visvalingam_whyatt",
]
