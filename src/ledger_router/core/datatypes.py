"""
Core datatypes used by the routing table.

These datatypes are immutable so that table updates can swap whole values
and readers never observe a record mid-change.

Notes:
- Amounts inside records are exact (Fraction, via Curve); the only strings
  are in `Quote`, whose amounts are rendered decimals.
- `RouteRecord.connector` is the next-hop key: the party credited on
  `next_ledger`. For routes running entirely through this connector's own
  legs it is the own connector id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Dict, Mapping, Optional, Tuple

from .amounts import AmountLike
from .curve import Curve
from .exc import RouteDomainError


# ---------------------------------------------------------------------------
# Advertisement (boundary input)
# ---------------------------------------------------------------------------

def _require_text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise RouteDomainError(f"advertisement field {key!r} must be a non-empty string", field=key)
    return value


def _optional_text(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise RouteDomainError(f"advertisement field {key!r} must be a string", field=key)
    return value


@dataclass(frozen=True)
class Advertisement:
    """One single-hop route as received from a peer or configured locally.

    Fields:
    - source_ledger / destination_ledger: ledger prefixes of the hop.
    - connector: identity of the connector operating the hop.
    - min_message_window: latency bound in seconds (non-negative int).
    - curve: validated rate curve.
    - source_account / destination_account: connector's accounts on each ledger.
    - peer_info: opaque metadata, surfaced only in final-hop quotes.
    """

    source_ledger: str
    destination_ledger: str
    connector: str
    min_message_window: int
    curve: Curve
    source_account: Optional[str] = None
    destination_account: Optional[str] = None
    peer_info: Optional[Mapping[str, Any]] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Advertisement":
        """Validate a wire mapping (snake_case keys)."""
        if isinstance(data, Advertisement):
            return data
        if not isinstance(data, Mapping):
            raise RouteDomainError("advertisement must be a mapping")
        source = _require_text(data, "source_ledger")
        destination = _require_text(data, "destination_ledger")
        if source == destination:
            raise RouteDomainError(f"route from {source} to itself", field="destination_ledger")
        connector = _require_text(data, "connector")

        if "min_message_window" not in data:
            raise RouteDomainError("advertisement has no min_message_window", field="min_message_window")
        window = data["min_message_window"]
        if isinstance(window, bool) or not isinstance(window, int) or window < 0:
            raise RouteDomainError(
                f"min_message_window must be a non-negative int, got {window!r}",
                field="min_message_window",
            )

        if "points" not in data:
            raise RouteDomainError("advertisement has no points", field="points")
        curve = Curve.from_points(data["points"])

        peer_info = data.get("peer_info")
        if peer_info is not None and not isinstance(peer_info, Mapping):
            raise RouteDomainError("peer_info must be a mapping", field="peer_info")

        return cls(
            source_ledger=source,
            destination_ledger=destination,
            connector=connector,
            min_message_window=window,
            curve=curve,
            source_account=_optional_text(data, "source_account"),
            destination_account=_optional_text(data, "destination_account"),
            peer_info=dict(peer_info) if peer_info is not None else None,
        )


# ---------------------------------------------------------------------------
# RouteRecord
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RouteRecord:
    """A curve plus routing metadata for one (source, destination, connector).

    `hops` lists the ledgers the value crosses, source first. A record with
    two hops is a single leg; `is_local` and single leg means a directly
    configured pair. `expires_at` is None for routes that never expire.
    """

    curve: Curve
    hops: Tuple[str, ...]
    connector: str
    min_message_window: int
    created_at: int
    expires_at: Optional[int]
    is_local: bool
    source_account: Optional[str] = None
    destination_account: Optional[str] = None
    peer_info: Optional[Mapping[str, Any]] = field(default=None, compare=False)

    @classmethod
    def from_advertisement(
        cls,
        ad: Advertisement,
        *,
        now: int,
        expires_at: Optional[int],
        is_local: bool,
        connector: Optional[str] = None,
    ) -> "RouteRecord":
        return cls(
            curve=ad.curve,
            hops=(ad.source_ledger, ad.destination_ledger),
            connector=connector or ad.connector,
            min_message_window=ad.min_message_window,
            created_at=now,
            expires_at=expires_at,
            is_local=is_local,
            source_account=ad.source_account,
            destination_account=ad.destination_account,
            peer_info=ad.peer_info,
        )

    @property
    def source_ledger(self) -> str:
        return self.hops[0]

    @property
    def next_ledger(self) -> str:
        return self.hops[1]

    @property
    def destination_ledger(self) -> str:
        return self.hops[-1]

    @property
    def key(self) -> Tuple[str, str, str]:
        return self.source_ledger, self.destination_ledger, self.connector

    def is_single_leg(self) -> bool:
        return len(self.hops) == 2

    def is_pair(self) -> bool:
        """True for a directly configured local route."""
        return self.is_local and self.is_single_leg()

    def is_expired(self, now: int) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def amount_at(self, x: AmountLike) -> Fraction:
        return self.curve.amount_at(x)

    def amount_reverse(self, y: AmountLike):
        return self.curve.amount_reverse(y)


# ---------------------------------------------------------------------------
# Selection results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BestHop:
    """Winner of a fixed-source scan: `value` is the output at the destination."""
    connector: str
    value: Fraction
    route: RouteRecord


@dataclass(frozen=True)
class BestCost:
    """Winner of a fixed-destination scan: `cost` is the input at the source."""
    connector: str
    cost: Fraction
    route: RouteRecord


# ---------------------------------------------------------------------------
# Quote
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Quote:
    """Next-hop quote. Amounts are exact decimal strings."""

    is_final: bool
    connector: str
    source_ledger: str
    source_amount: str
    destination_ledger: str
    destination_amount: str
    destination_credit_account: Optional[str]
    final_ledger: str
    final_amount: str
    min_message_window: int
    peer_info: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire mapping with camelCase keys."""
        return {
            "isFinal": self.is_final,
            "connector": self.connector,
            "sourceLedger": self.source_ledger,
            "sourceAmount": self.source_amount,
            "destinationLedger": self.destination_ledger,
            "destinationAmount": self.destination_amount,
            "destinationCreditAccount": self.destination_credit_account,
            "finalLedger": self.final_ledger,
            "finalAmount": self.final_amount,
            "minMessageWindow": self.min_message_window,
            "peerInfo": dict(self.peer_info) if self.peer_info is not None else None,
        }


__all__ = [
    "Advertisement",
    "RouteRecord",
    "BestHop",
    "BestCost",
    "Quote",
]
