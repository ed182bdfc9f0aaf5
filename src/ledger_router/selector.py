"""Best next-hop selection over the candidates for one ledger pair.

Candidates are keyed by connector. Ties resolve to the lexicographically
smallest connector id, so the answer never depends on insertion order.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Mapping, Optional

from .core.amounts import is_unreachable
from .core.datatypes import BestCost, BestHop, RouteRecord


def best_for_source_amount(candidates: Mapping[str, RouteRecord], source_amount: Fraction) -> Optional[BestHop]:
    """Connector delivering the most for `source_amount`; None without candidates."""
    best: Optional[BestHop] = None
    for connector in sorted(candidates):
        route = candidates[connector]
        value = route.curve.amount_at(source_amount)
        if best is None or value > best.value:
            best = BestHop(connector=connector, value=value, route=route)
    return best


def best_for_destination_amount(candidates: Mapping[str, RouteRecord], destination_amount: Fraction) -> Optional[BestCost]:
    """Connector needing the least input to deliver `destination_amount`.

    Candidates whose capacity is below the amount are skipped; None if none
    can deliver it.
    """
    best: Optional[BestCost] = None
    for connector in sorted(candidates):
        route = candidates[connector]
        cost = route.curve.amount_reverse(destination_amount)
        if is_unreachable(cost):
            continue
        if best is None or cost < best.cost:
            best = BestCost(connector=connector, cost=cost, route=route)
    return best


__all__ = [
    "best_for_source_amount",
    "best_for_destination_amount",
]
