"""Snapshot validation package."""

from pocketledger.validation.snapshot import MIGRATIONS, SnapshotIssue, SnapshotValidator

__all__ = ["MIGRATIONS", "SnapshotIssue", "SnapshotValidator"]
