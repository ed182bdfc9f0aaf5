"""Ledger addressing: dotted prefixes and longest-prefix resolution.

A ledger is identified by a prefix such as ``"us.bank1."``; an address under
it is the prefix plus a local part (``"us.bank1.alice"``). When several known
ledgers prefix the same address the longest one wins.
"""

from __future__ import annotations

from typing import Iterable, Optional


def resolve_prefix(ledgers: Iterable[str], address: str) -> Optional[str]:
    """Return the longest ledger in `ledgers` that prefixes `address`, or None."""
    best: Optional[str] = None
    for ledger in ledgers:
        if address.startswith(ledger) and (best is None or len(ledger) > len(best)):
            best = ledger
    return best


__all__ = ["resolve_prefix"]
