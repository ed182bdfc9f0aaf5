"""Routing table: what this connector can quote, and through whom.

The index maps source ledger → destination ledger → next-hop connector →
RouteRecord. It only holds routes whose first leg this connector operates:
configured pairs and everything composed behind them. Peer advertisements
that were accepted are kept aside as tails, so composites can be rebuilt when
local configuration changes or a tail expires.

Every mutation works on a private copy of the index and publishes it with a
single assignment at the end. A reader that grabbed `self._index` sees either
the old or the new complete state, never a half-applied closure. There is no
locking: callers serialise writers (one advertisement at a time).

Time is in milliseconds. Every time-dependent method takes an explicit `now`;
when omitted, the injected clock is read.
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict, deque
from fractions import Fraction
from typing import (
    Any,
    Callable,
    Deque,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from .composer import join_routes, reconcile
from .config import RoutingConfig
from .core.amounts import AmountLike, to_non_negative_amount
from .core.constants import (
    DEFAULT_DECIMAL_PRECISION,
    DEFAULT_MAX_AGE_MS,
    DEFAULT_MAX_POINTS,
)
from .core.curve import Curve, Simplifier
from .core.datatypes import Advertisement, BestCost, BestHop, Quote, RouteRecord
from .core.exc import InvariantViolation, RouteDomainError
from .core.fmt import fmt_amount
from .core.simplify import visvalingam_whyatt
from .prefix import resolve_prefix
from .selector import best_for_destination_amount, best_for_source_amount

logger = logging.getLogger(__name__)

Index = Dict[str, Dict[str, Dict[str, RouteRecord]]]
AdvertisementLike = Union[Advertisement, Mapping[str, Any]]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _copy_index(index: Index) -> Index:
    return {
        src: {dst: dict(by_connector) for dst, by_connector in by_dest.items()}
        for src, by_dest in index.items()
    }


def _iter_records(index: Index) -> Iterator[RouteRecord]:
    for by_dest in index.values():
        for by_connector in by_dest.values():
            yield from by_connector.values()


class RoutingTable:
    """Routes from this connector's ledgers to every reachable ledger.

    Parameters
    ----------
    own_connector_id : str
        Identity of the connector owning the table; configured pairs are keyed by it.
    local_routes : iterable of advertisements
        Initial configured pairs (see `add_local_routes`).
    max_age_ms : int
        Lifetime of a peer route after its last advertisement.
    max_points : int
        Default point budget for `export`.
    clock : callable, optional
        Returns the current time in ms; defaults to the wall clock.
    simplifier : callable
        `(points, max_points) -> points`, used by `export`.
    now : int, optional
        Time at which the initial local routes are installed.
    """

    def __init__(
        self,
        own_connector_id: str,
        local_routes: Iterable[AdvertisementLike] = (),
        max_age_ms: int = DEFAULT_MAX_AGE_MS,
        *,
        max_points: int = DEFAULT_MAX_POINTS,
        decimal_precision: int = DEFAULT_DECIMAL_PRECISION,
        clock: Optional[Callable[[], int]] = None,
        simplifier: Simplifier = visvalingam_whyatt,
        now: Optional[int] = None,
    ) -> None:
        if not isinstance(own_connector_id, str) or not own_connector_id:
            raise RouteDomainError("own_connector_id must be a non-empty string", field="connector")
        if isinstance(max_age_ms, bool) or not isinstance(max_age_ms, int) or max_age_ms <= 0:
            raise ValueError(f"max_age_ms must be a positive int, got {max_age_ms!r}")
        self.own_connector_id = own_connector_id
        self.max_age_ms = max_age_ms
        self.max_points = max_points
        self.decimal_precision = decimal_precision
        self._clock = clock or _now_ms
        self._simplifier = simplifier

        self._pairs: Dict[Tuple[str, str], RouteRecord] = {}
        self._tails: Dict[Tuple[str, str, str], RouteRecord] = {}
        self._index: Index = {}

        local_routes = list(local_routes)
        if local_routes:
            self.add_local_routes(local_routes, now=now)

    @classmethod
    def from_config(
        cls,
        own_connector_id: str,
        local_routes: Iterable[AdvertisementLike] = (),
        config: Optional[RoutingConfig] = None,
        **kwargs: Any,
    ) -> "RoutingTable":
        config = config or RoutingConfig()
        return cls(
            own_connector_id,
            local_routes,
            config.max_age_ms,
            max_points=config.max_points,
            decimal_precision=config.decimal_precision,
            **kwargs,
        )

    # ------------- reads -------------

    def get_route(self, source: str, destination: str, connector: str) -> Optional[RouteRecord]:
        return self._index.get(source, {}).get(destination, {}).get(connector)

    def routes_between(self, source: str, destination: str) -> Dict[str, RouteRecord]:
        """Candidates for one ledger pair, keyed by next-hop connector."""
        return dict(self._index.get(source, {}).get(destination, {}))

    def routes(self) -> List[RouteRecord]:
        """Every indexed record, sorted by (source, destination, connector)."""
        return sorted(_iter_records(self._index), key=lambda r: r.key)

    def advertised_routes(self) -> List[RouteRecord]:
        """Retained peer advertisements, sorted by (source, destination, connector)."""
        return sorted(self._tails.values(), key=lambda r: r.key)

    def __len__(self) -> int:
        return sum(1 for _ in _iter_records(self._index))

    @property
    def source_ledgers(self) -> List[str]:
        return sorted(self._index)

    def known_ledgers(self) -> List[str]:
        """Every ledger named by a pair, a retained advertisement or the index."""
        ledgers = set()
        for record in list(self._pairs.values()) + list(self._tails.values()):
            ledgers.update(record.hops)
        for src, by_dest in self._index.items():
            ledgers.add(src)
            ledgers.update(by_dest)
        return sorted(ledgers)

    # ------------- mutation -------------

    def add_local_routes(self, advertisements: Iterable[AdvertisementLike], *, now: Optional[int] = None) -> None:
        """Install configured pairs and recompose everything behind them.

        Each advertisement becomes a local, non-expiring pair keyed by the own
        connector id. Re-declaring a pair replaces it. All input is validated
        before anything changes.
        """
        now = self._resolve_now(now)
        pairs = dict(self._pairs)
        for data in advertisements:
            ad = Advertisement.from_mapping(data)
            if ad.connector != self.own_connector_id:
                logger.debug(
                    "local route %s -> %s declared for %s; keyed by own id %s",
                    ad.source_ledger, ad.destination_ledger, ad.connector, self.own_connector_id,
                )
            pairs[(ad.source_ledger, ad.destination_ledger)] = RouteRecord.from_advertisement(
                ad, now=now, expires_at=None, is_local=True, connector=self.own_connector_id,
            )
        self._pairs = pairs
        self._rebuild(now)

    def add_route(self, advertisement: AdvertisementLike, *, now: Optional[int] = None) -> bool:
        """Learn a peer's single-hop route; True if it extended any local route.

        The advertisement is chained behind every local route ending at its
        source ledger. It is rejected (False, no change) when no such local
        route exists, when every chain would loop, when every resulting
        record would displace a record of higher authority, and when it carries
        the own connector id (an echo of this table's export). A newer
        advertisement for the same triple replaces the retained one.
        """
        now = self._resolve_now(now)
        ad = Advertisement.from_mapping(advertisement)
        if ad.connector == self.own_connector_id:
            logger.debug(
                "rejected route %s -> %s: advertised under own id %s",
                ad.source_ledger, ad.destination_ledger, ad.connector,
            )
            return False
        tail = RouteRecord.from_advertisement(
            ad, now=now, expires_at=now + self.max_age_ms, is_local=False,
        )

        # A re-advertisement replaces the previous one, so start from an index
        # composed without it.
        tails = dict(self._tails)
        base = self._index
        if tails.pop(tail.key, None) is not None:
            base = self._compose(tails, now)
        index = _copy_index(base)
        admitted = 0
        for head in self._heads_into(index, tail.source_ledger):
            candidate = join_routes(head, tail, now=now)
            if candidate is None:
                continue
            ok, _ = self._store(index, candidate)
            if ok:
                admitted += 1

        if not admitted:
            logger.debug(
                "rejected route %s -> %s via %s: no local route to extend",
                ad.source_ledger, ad.destination_ledger, ad.connector,
            )
            return False

        # Results carry a peer leg, so they are never heads; nothing further to close.
        tails[tail.key] = tail
        self._tails = tails
        self._index = index
        logger.debug(
            "accepted route %s -> %s via %s (%d local extensions)",
            ad.source_ledger, ad.destination_ledger, ad.connector, admitted,
        )
        return True

    def remove_expired_routes(self, now: Optional[int] = None) -> int:
        """Drop routes and retained advertisements with expires_at <= now.

        Configured pairs never expire. What survives is recomposed, so a
        composite whose tail was re-advertised in time comes back with the
        fresh expiry. Returns the number of indexed records that disappeared.
        """
        now = self._resolve_now(now)
        expired = sum(1 for r in _iter_records(self._index) if r.is_expired(now))
        tails = {k: t for k, t in self._tails.items() if not t.is_expired(now)}
        if not expired and len(tails) == len(self._tails):
            return 0
        logger.info(
            "expiring %d routes and %d advertisements at %d",
            expired, len(self._tails) - len(tails), now,
        )
        return self._replace_tails(tails, now)

    def remove_connector(self, connector: str, *, now: Optional[int] = None) -> int:
        """Forget every advertisement received from `connector`.

        Returns the number of indexed records that disappeared.
        """
        if connector == self.own_connector_id:
            raise RouteDomainError("cannot remove the own connector; reconfigure local routes instead", field="connector")
        now = self._resolve_now(now)
        tails = {k: t for k, t in self._tails.items() if t.connector != connector}
        if len(tails) == len(self._tails):
            return 0
        logger.info("forgetting %d advertisements from %s", len(self._tails) - len(tails), connector)
        return self._replace_tails(tails, now)

    def _replace_tails(self, tails: Dict[Tuple[str, str, str], RouteRecord], now: int) -> int:
        before = {r.key for r in _iter_records(self._index)}
        self._tails = tails
        self._rebuild(now)
        return len(before - {r.key for r in _iter_records(self._index)})

    # ------------- composition -------------

    def _resolve_now(self, now: Optional[int]) -> int:
        return self._clock() if now is None else int(now)

    @staticmethod
    def _heads_into(index: Index, ledger: str) -> List[RouteRecord]:
        """Local records ending at `ledger`, in key order."""
        heads = [
            route
            for by_dest in index.values()
            for route in by_dest.get(ledger, {}).values()
            if route.is_local
        ]
        heads.sort(key=lambda r: r.key)
        return heads

    @staticmethod
    def _store(index: Index, candidate: RouteRecord) -> Tuple[bool, Optional[RouteRecord]]:
        """Apply the authority rule for one candidate.

        Returns (admitted, changed): `changed` is the stored record when its
        path, curve or latency bound differs from what was there before.
        """
        src, dst, connector = candidate.key
        existing = index.get(src, {}).get(dst, {}).get(connector)
        stored = reconcile(existing, candidate)
        if stored is None:
            return False, None
        index.setdefault(src, {}).setdefault(dst, {})[connector] = stored
        if (
            existing is not None
            and existing.hops == stored.hops
            and existing.curve == stored.curve
            and existing.min_message_window == stored.min_message_window
        ):
            return True, None
        return True, stored

    def _rebuild(self, now: int) -> None:
        index = self._compose(self._tails, now)
        self._index = index
        logger.info(
            "rebuilt routing table: %d pairs, %d advertisements, %d routes",
            len(self._pairs), len(self._tails), sum(1 for _ in _iter_records(index)),
        )

    def _compose(self, tails: Mapping[Tuple[str, str, str], RouteRecord], now: int) -> Index:
        """Index built from configured pairs and the given tails.

        Pairs seed the index; every local record whose path, curve or latency changed
        is extended by each tail starting at its destination, until nothing
        changes. Paths never revisit a ledger, so the closure terminates.
        """
        index: Index = {}
        pairs = [self._pairs[k] for k in sorted(self._pairs)]
        tails_from: Dict[str, List[RouteRecord]] = defaultdict(list)
        for t in pairs + [tails[k] for k in sorted(tails)]:
            tails_from[t.source_ledger].append(t)

        queue: Deque[RouteRecord] = deque()
        for pair in pairs:
            _, changed = self._store(index, pair)
            if changed is not None:
                queue.append(changed)

        while queue:
            head = queue.popleft()
            if not head.is_local:
                continue
            for tail in tails_from.get(head.destination_ledger, ()):
                candidate = join_routes(head, tail, now=now)
                if candidate is None:
                    continue
                _, changed = self._store(index, candidate)
                if changed is not None:
                    queue.append(changed)
        return index

    # ------------- export -------------

    def export(self, max_points: Optional[int] = None) -> List[Dict[str, Any]]:
        """Bounded summary for re-broadcast, one record per ledger pair.

        All next-hop alternatives for a pair are combined into one curve
        advertised under the own connector id, with the largest latency bound
        among them, then simplified to `max_points`.
        """
        max_points = self.max_points if max_points is None else max_points
        index = self._index
        out: List[Dict[str, Any]] = []
        for src, by_dest in index.items():
            for dst, by_connector in by_dest.items():
                if not by_connector:
                    continue
                curve = Curve()
                window = 0
                account: Optional[str] = None
                for connector in sorted(by_connector):
                    route = by_connector[connector]
                    curve = curve.combine(route.curve)
                    window = max(window, route.min_message_window)
                    if account is None:
                        account = route.source_account
                record: Dict[str, Any] = {
                    "source_ledger": src,
                    "destination_ledger": dst,
                    "connector": self.own_connector_id,
                    "min_message_window": window,
                }
                if account is not None:
                    record["source_account"] = account
                record["points"] = curve.simplify(max_points, self._simplifier).to_wire(
                    precision=self.decimal_precision,
                )
                out.append(record)
        out.sort(key=lambda r: (r["source_ledger"], r["destination_ledger"], r["connector"]))
        return out

    # ------------- selection -------------

    def find_best_connector_for_source_amount(
        self, source: str, destination: str, source_amount: AmountLike,
    ) -> Optional[BestHop]:
        amount = to_non_negative_amount(source_amount)
        return best_for_source_amount(self.routes_between(source, destination), amount)

    def find_best_connector_for_destination_amount(
        self, source: str, destination: str, destination_amount: AmountLike,
    ) -> Optional[BestCost]:
        amount = to_non_negative_amount(destination_amount)
        return best_for_destination_amount(self.routes_between(source, destination), amount)

    def quote_by_source_amount(
        self, source_address: str, final_address: str, source_amount: AmountLike,
    ) -> Optional[Quote]:
        """Quote for sending `source_amount` from `source_address`; None if unreachable."""
        amount = to_non_negative_amount(source_amount)
        resolved = self._resolve(source_address, final_address)
        if resolved is None:
            return None
        index, source_ledger, final_ledger = resolved
        best = best_for_source_amount(index[source_ledger][final_ledger], amount)
        if best is None:
            return None
        return self._assemble(
            index, best.route, best.connector, source_ledger, final_ledger,
            source_amount=amount, final_amount=best.value,
        )

    def quote_by_destination_amount(
        self, source_address: str, final_address: str, destination_amount: AmountLike,
    ) -> Optional[Quote]:
        """Quote for delivering `destination_amount` at `final_address`; None if unreachable."""
        amount = to_non_negative_amount(destination_amount)
        resolved = self._resolve(source_address, final_address)
        if resolved is None:
            return None
        index, source_ledger, final_ledger = resolved
        best = best_for_destination_amount(index[source_ledger][final_ledger], amount)
        if best is None:
            return None
        return self._assemble(
            index, best.route, best.connector, source_ledger, final_ledger,
            source_amount=best.cost, final_amount=amount,
        )

    def _resolve(self, source_address: str, final_address: str) -> Optional[Tuple[Index, str, str]]:
        """Ledgers the addresses belong to, or None if no route joins them.

        Addresses resolve against every known ledger, so an address on a
        sub-ledger this table cannot reach is not quoted as its parent.
        """
        index = self._index
        ledgers = self.known_ledgers()
        source_ledger = resolve_prefix(ledgers, source_address)
        final_ledger = resolve_prefix(ledgers, final_address)
        if source_ledger is None or final_ledger is None:
            return None
        if not index.get(source_ledger, {}).get(final_ledger):
            return None
        return index, source_ledger, final_ledger

    def _assemble(
        self,
        index: Index,
        route: RouteRecord,
        connector: str,
        source_ledger: str,
        final_ledger: str,
        *,
        source_amount: Fraction,
        final_amount: Fraction,
    ) -> Quote:
        first_leg = index.get(source_ledger, {}).get(route.next_ledger, {}).get(self.own_connector_id)
        if first_leg is None or not first_leg.is_pair():
            raise InvariantViolation(
                f"route {route.hops} has no configured first leg {source_ledger} -> {route.next_ledger}"
            )
        is_final = route.next_ledger == final_ledger
        precision = self.decimal_precision
        return Quote(
            is_final=is_final,
            connector=connector,
            source_ledger=source_ledger,
            source_amount=fmt_amount(source_amount, precision=precision),
            destination_ledger=route.next_ledger,
            destination_amount=fmt_amount(first_leg.curve.amount_at(source_amount), precision=precision),
            destination_credit_account=None if is_final else route.destination_account,
            final_ledger=final_ledger,
            final_amount=fmt_amount(final_amount, precision=precision),
            min_message_window=route.min_message_window,
            peer_info=route.peer_info if is_final else None,
        )


__all__ = ["RoutingTable"]
