"""Route composition: chaining legs and settling competing claims on a triple.

Composition only ever extends *local* heads. A head is a route whose legs are
all operated by this connector; a tail is a single leg, either a configured
pair or a peer's advertisement. A peer's route is therefore never used as the
first leg of anything, and no shortcut is invented between ledgers that are
only connected through someone else.

Competing records for one (source, destination, connector) triple are settled
by authority: configured pair > local composite > anything with a peer leg.
A lower-ranked candidate is rejected, a higher-ranked one replaces. Equal
ranks merge (pointwise-max curve, larger latency bound, earliest expiry) when
both enter the same next ledger; otherwise one of the two is kept whole.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .core.constants import AUTHORITY_LOCAL, AUTHORITY_PAIR, AUTHORITY_PEER
from .core.datatypes import RouteRecord


def _earliest(a: Optional[int], b: Optional[int]) -> Optional[int]:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


def authority(route: RouteRecord) -> int:
    if route.is_pair():
        return AUTHORITY_PAIR
    if route.is_local:
        return AUTHORITY_LOCAL
    return AUTHORITY_PEER


def join_routes(head: RouteRecord, tail: RouteRecord, *, now: int) -> Optional[RouteRecord]:
    """Chain `tail` behind `head`, or None if the chain is not allowed.

    Not allowed: a non-local head, legs that do not meet, and any path that
    would visit a ledger twice (A→B→A and longer loops).

    The next-hop key of the result is the party credited on the head's next
    ledger: the tail's operator when the head is a single leg, otherwise the
    head's own key (the value is still inside this connector's legs).
    """
    if not head.is_local:
        return None
    if head.destination_ledger != tail.source_ledger:
        return None
    if any(ledger in head.hops for ledger in tail.hops[1:]):
        return None

    if head.is_single_leg():
        connector = tail.connector
        credit_account = tail.source_account
    else:
        connector = head.connector
        credit_account = head.destination_account

    return RouteRecord(
        curve=head.curve.join(tail.curve),
        hops=head.hops + tail.hops[1:],
        connector=connector,
        min_message_window=head.min_message_window + tail.min_message_window,
        created_at=now,
        expires_at=_earliest(head.expires_at, tail.expires_at),
        is_local=head.is_local and tail.is_local,
        source_account=head.source_account,
        destination_account=credit_account,
        peer_info=tail.peer_info,
    )


def merge_routes(existing: RouteRecord, incoming: RouteRecord) -> RouteRecord:
    """Equal-authority merge: best of both curves, worst-case latency.

    Only valid for records entering the same next ledger; the merged record
    keeps `existing`'s hops and accounts.
    """
    return replace(
        existing,
        curve=existing.curve.combine(incoming.curve),
        min_message_window=max(existing.min_message_window, incoming.min_message_window),
        expires_at=_earliest(existing.expires_at, incoming.expires_at),
        peer_info=existing.peer_info if existing.peer_info is not None else incoming.peer_info,
    )


def preferred(a: RouteRecord, b: RouteRecord) -> RouteRecord:
    """Pick one of two equal-authority records that leave through different ledgers.

    Their curves describe different first legs and accounts, so they cannot be
    merged. Larger capacity wins, then the smaller latency bound, then the
    smaller next ledger; the choice does not depend on argument order.
    """
    return min((a, b), key=lambda r: (-r.curve.max_output, r.min_message_window, r.next_ledger))


def reconcile(existing: Optional[RouteRecord], incoming: RouteRecord) -> Optional[RouteRecord]:
    """Record to store for the triple, or None if `incoming` is rejected."""
    if existing is None:
        return incoming
    rank_existing, rank_incoming = authority(existing), authority(incoming)
    if rank_incoming < rank_existing:
        return None
    if rank_incoming > rank_existing or incoming.is_pair():
        return incoming
    if existing.next_ledger != incoming.next_ledger:
        return incoming if preferred(existing, incoming) is incoming else None
    return merge_routes(existing, incoming)


__all__ = [
    "authority",
    "join_routes",
    "merge_routes",
    "preferred",
    "reconcile",
]
