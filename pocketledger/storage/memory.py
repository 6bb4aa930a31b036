"""In-memory snapshot storage, used by tests and throwaway sessions."""

from typing import Optional

from pocketledger.models.ledger import LedgerSnapshot
from pocketledger.storage.interface import SnapshotStorage


class InMemorySnapshotStorage(SnapshotStorage):
    """Keeps a private deep copy of the last written snapshot."""

    def __init__(self, initial: Optional[LedgerSnapshot] = None):
        self._snapshot = initial.model_copy(deep=True) if initial else None
        self.write_count = 0

    def read(self) -> Optional[LedgerSnapshot]:
        if self._snapshot is None:
            return None
        return self._snapshot.model_copy(deep=True)

    def write(self, snapshot: LedgerSnapshot) -> None:
        self._snapshot = snapshot.model_copy(deep=True)
        self.write_count += 1

    def clear(self) -> None:
        self._snapshot = None
