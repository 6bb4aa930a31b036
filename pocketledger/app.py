"""
Component Factory for PocketLedger

Wires the ledger together from settings:
storage backend → ledger store → event bus → event logger → reports.

DESIGN DECISION: Nothing else in the package reads settings to pick a
backend. Tests build components directly with in-memory storage; a
host application calls `create_app_components()` once at startup.
"""

from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from pocketledger.audit import EventLogger, configure_logging
from pocketledger.config import Settings, get_settings
from pocketledger.ledger import LedgerEventBus, LedgerStore
from pocketledger.stats import LedgerReports
from pocketledger.storage import (
    CloudSync,
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    SnapshotStorage,
)
from pocketledger.validation import SnapshotValidator


logger = structlog.get_logger(__name__)


@dataclass
class AppComponents:
    """Everything a host application needs, built once."""

    store: LedgerStore
    reports: LedgerReports
    sync: CloudSync
    event_logger: EventLogger
    detach_event_logger: Callable[[], None]


def create_storage(settings: Settings, validator: Optional[SnapshotValidator] = None) -> SnapshotStorage:
    """Build the configured snapshot backend."""
    storage_settings = settings.storage

    if storage_settings.backend == "memory":
        return InMemorySnapshotStorage()

    return JsonFileSnapshotStorage(
        storage_settings.path,
        write_attempts=storage_settings.write_attempts,
        validator=validator,
    )


def create_ledger(
    settings: Optional[Settings] = None,
    storage: Optional[SnapshotStorage] = None,
) -> LedgerStore:
    """
    Build a ledger store.

    Args:
        settings: Application settings; defaults to get_settings()
        storage: Backend override; defaults to the configured one

    Returns:
        A LedgerStore, seeded with default wallets when configured
    """
    settings = settings or get_settings()
    validator = SnapshotValidator()

    store = LedgerStore(
        storage or create_storage(settings, validator),
        bus=LedgerEventBus(),
        validator=validator,
        settings=settings.ledger,
    )

    if settings.ledger.seed_default_wallets:
        store.seed_if_empty()

    return store


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[SnapshotStorage] = None,
    shadow_storage: Optional[SnapshotStorage] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Application settings; defaults to get_settings()
        storage: Main snapshot backend override
        shadow_storage: Backend for the sync placeholder's shadow copy

    Returns:
        AppComponents with logging configured and the event logger attached
    """
    settings = settings or get_settings()
    configure_logging(settings.logging)

    store = create_ledger(settings, storage)

    event_logger = EventLogger()
    detach = event_logger.attach(store.subscribe)

    if shadow_storage is None:
        if settings.storage.backend == "memory":
            shadow_storage = InMemorySnapshotStorage()
        else:
            shadow_storage = JsonFileSnapshotStorage(
                settings.storage.shadow_path,
                write_attempts=settings.storage.write_attempts,
            )

    logger.info(
        "app_components_created",
        backend=settings.storage.backend,
        wallets=len(store.wallets()),
    )

    return AppComponents(
        store=store,
        reports=LedgerReports(store, settings.ledger),
        sync=CloudSync(shadow_storage),
        event_logger=event_logger,
        detach_event_logger=detach,
    )
