"""
Abstract Snapshot Storage Interface

The ledger store never talks to a concrete backend. It reads and
writes whole snapshots through this interface, so we can:
1. Use in-memory storage for tests
2. Use a JSON file on disk for a local install
3. Add other backends without touching ledger logic

The interface is intentionally tiny: the snapshot is the only unit of
persistence.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pocketledger.models.ledger import LedgerSnapshot


class SnapshotStorage(ABC):
    """
    Abstract interface for snapshot persistence.

    Implementations must hand out independent copies: mutating a
    snapshot returned by `read` must not change what is stored until
    `write` is called.
    """

    @abstractmethod
    def read(self) -> Optional[LedgerSnapshot]:
        """
        Load the persisted snapshot.

        Returns:
            The snapshot, or None if nothing has been stored yet

        Raises:
            SnapshotReadError: If stored data exists but cannot be loaded
        """
        pass

    @abstractmethod
    def write(self, snapshot: LedgerSnapshot) -> None:
        """
        Replace the persisted snapshot.

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SnapshotReadError(StorageError):
    """Stored data exists but is not a valid snapshot."""
    pass
