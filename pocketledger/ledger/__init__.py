"""Ledger package: the store, its notification bus, quick-add presets."""

from pocketledger.ledger.events import LedgerEventBus, Listener
from pocketledger.ledger.presets import POPULAR_OPERATIONS, PopularOperation, get_preset, quick_add
from pocketledger.ledger.store import LedgerStore, to_amount

__all__ = [
    "POPULAR_OPERATIONS",
    "LedgerEventBus",
    "LedgerStore",
    "Listener",
    "PopularOperation",
    "get_preset",
    "quick_add",
    "to_amount",
]
