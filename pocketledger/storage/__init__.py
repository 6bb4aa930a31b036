"""Snapshot storage package."""

from pocketledger.storage.interface import (
    SnapshotReadError,
    SnapshotStorage,
    StorageError,
)
from pocketledger.storage.json_file import JsonFileSnapshotStorage
from pocketledger.storage.memory import InMemorySnapshotStorage
from pocketledger.storage.sync import CloudSync, SyncProvider, SyncState

__all__ = [
    "CloudSync",
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
    "SnapshotReadError",
    "SnapshotStorage",
    "StorageError",
    "SyncProvider",
    "SyncState",
]
