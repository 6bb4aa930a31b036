"""
Cloud Sync Placeholder

There is no real cloud backend. Syncing writes the current snapshot
into a shadow storage slot and records when that happened, which is
enough for a settings screen to show "last synced" and for a restore
path to be tested end to end.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

import structlog
from pydantic import BaseModel, Field

from pocketledger.storage.interface import SnapshotStorage

if TYPE_CHECKING:
    from pocketledger.ledger.store import LedgerStore


logger = structlog.get_logger(__name__)


class SyncProvider(str, Enum):
    LOCAL = "local"
    GOOGLE = "google"
    ICLOUD = "icloud"


class SyncState(BaseModel):
    """What the sync placeholder last did."""

    provider: SyncProvider = SyncProvider.LOCAL
    last_sync: Optional[datetime] = Field(
        default=None,
        description="When the shadow copy was last written"
    )


class CloudSync:
    """Copies the ledger snapshot into a shadow storage backend."""

    def __init__(self, shadow: SnapshotStorage, provider: SyncProvider = SyncProvider.LOCAL):
        self._shadow = shadow
        self._state = SyncState(provider=provider)

    @property
    def state(self) -> SyncState:
        return self._state.model_copy()

    def sync(self, store: "LedgerStore") -> SyncState:
        """Write the store's snapshot to the shadow slot."""
        snapshot = store.snapshot()
        self._shadow.write(snapshot)
        self._state = SyncState(provider=self._state.provider, last_sync=datetime.now())

        logger.info(
            "ledger_synced",
            provider=self._state.provider.value,
            transactions=len(snapshot.transactions),
        )
        return self.state

    def restore(self, store: "LedgerStore") -> bool:
        """
        Replace the store's snapshot with the shadow copy.

        Returns False when nothing has been synced yet.
        """
        snapshot = self._shadow.read()
        if snapshot is None:
            return False
        store.import_backup(snapshot.model_dump(mode="json", by_alias=True))
        return True
