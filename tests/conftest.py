from __future__ import annotations

from typing import Any, Dict, List

import pytest

from ledger_router import RoutingTable


# -----------------------------
# Shared constants
# -----------------------------

START = 1434412800000  # 2015-06-16T00:00:00Z, ms
MAX_AGE = 45000

LEDGER_A = "ledgerA."
LEDGER_B = "ledgerB."
LEDGER_C = "ledgerC."
LEDGER_D = "ledgerD."
LEDGER_E = "ledgerE."

MARK = "http://mark.example"
MARY = "http://mary.example"
MARTIN = "http://martin.example"

MARK_A = "http://ledgerA.example/accounts/mark"
MARK_B = "http://ledgerB.example/accounts/mark"


# -----------------------------
# Test helpers (pure functions)
# -----------------------------

def advert(source: str, destination: str, connector: str, points, window: int = 1, **extra: Any) -> Dict[str, Any]:
    """Wire advertisement mapping with the usual defaults."""
    ad: Dict[str, Any] = {
        "source_ledger": source,
        "destination_ledger": destination,
        "connector": connector,
        "min_message_window": window,
        "points": points,
    }
    ad.update(extra)
    return ad


def mark_pairs() -> List[Dict[str, Any]]:
    """A↔B pairs operated by mark: A→B at 0.5, B→A at 2.0."""
    return [
        advert(
            LEDGER_A, LEDGER_B, MARK, [[0, 0], [200, 100]],
            source_account=MARK_A, destination_account=MARK_B,
            peer_info={"rate_info": "0.5"},
        ),
        advert(
            LEDGER_B, LEDGER_A, MARK, [[0, 0], [100, 200]],
            source_account=MARK_B, destination_account=MARK_A,
            peer_info={"rate_info": "2.0"},
        ),
    ]


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = START) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def tick(self, ms: int) -> None:
        self.now += ms


# -----------------------------
# Pytest fixtures
# -----------------------------

@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def table(clock: FakeClock) -> RoutingTable:
    return RoutingTable(MARK, mark_pairs(), MAX_AGE, clock=clock)
