"""Shared fixtures for PocketLedger tests."""

from datetime import datetime

import pytest

from pocketledger.config import LedgerSettings
from pocketledger.ledger import LedgerEventBus, LedgerStore
from pocketledger.storage import InMemorySnapshotStorage


# Wednesday
REF = datetime(2025, 1, 15, 12, 0, 0)


@pytest.fixture
def ref() -> datetime:
    return REF


@pytest.fixture
def storage() -> InMemorySnapshotStorage:
    return InMemorySnapshotStorage()


@pytest.fixture
def bus() -> LedgerEventBus:
    return LedgerEventBus()


@pytest.fixture
def store(storage, bus) -> LedgerStore:
    return LedgerStore(storage, bus=bus, settings=LedgerSettings())


@pytest.fixture
def events(store) -> list:
    """Every event the store publishes, in order."""
    received = []
    store.subscribe(received.append)
    return received


@pytest.fixture
def two_wallets(store) -> tuple[str, str]:
    return store.add_wallet("A", "cash"), store.add_wallet("B", "bank")
