"""Tests for snapshot storage backends."""

import json
import os

import pytest

from pocketledger.ledger import LedgerStore
from pocketledger.models import LedgerSnapshot, Wallet
from pocketledger.storage import (
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    SnapshotReadError,
    StorageError,
)


def snapshot_with_wallet(name="Cash") -> LedgerSnapshot:
    return LedgerSnapshot(wallets=[Wallet(id="w1", name=name, type="cash")])


class TestInMemoryStorage:
    """Tests for the in-memory backend."""

    def test_empty_reads_none(self):
        assert InMemorySnapshotStorage().read() is None

    def test_returns_independent_copies(self):
        """Test that callers cannot mutate stored state in place."""
        storage = InMemorySnapshotStorage()
        original = snapshot_with_wallet()
        storage.write(original)

        original.wallets[0].name = "Changed"
        loaded = storage.read()
        assert loaded.wallets[0].name == "Cash"

        loaded.wallets.clear()
        assert len(storage.read().wallets) == 1

    def test_write_count(self):
        storage = InMemorySnapshotStorage()
        storage.write(LedgerSnapshot())
        storage.write(LedgerSnapshot())
        assert storage.write_count == 2


class TestJsonFileStorage:
    """Tests for the JSON file backend."""

    def test_missing_file_reads_none(self, tmp_path):
        assert JsonFileSnapshotStorage(tmp_path / "ledger.json").read() is None

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "nested" / "ledger.json"
        storage = JsonFileSnapshotStorage(path)
        snapshot = snapshot_with_wallet()
        storage.write(snapshot)

        assert path.exists()
        assert json.loads(path.read_text(encoding="utf-8"))["wallets"][0]["createdAt"]
        assert storage.read() == snapshot

    def test_no_temp_files_left(self, tmp_path):
        storage = JsonFileSnapshotStorage(tmp_path / "ledger.json")
        storage.write(LedgerSnapshot())
        storage.write(snapshot_with_wallet())
        assert [p.name for p in tmp_path.iterdir()] == ["ledger.json"]

    def test_corrupt_file_raises(self, tmp_path):
        """Test that a corrupt file is never silently replaced."""
        path = tmp_path / "ledger.json"
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(SnapshotReadError):
            JsonFileSnapshotStorage(path).read()

    def test_legacy_file_is_migrated(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"wallets": [], "transactions": []}), encoding="utf-8")
        snapshot = JsonFileSnapshotStorage(path).read()
        assert snapshot.version == 1

    def test_replace_retried_on_os_error(self, tmp_path, monkeypatch):
        """Test that a transient replace failure is retried."""
        real_replace = os.replace
        calls = []

        def flaky_replace(src, dst):
            calls.append(src)
            if len(calls) == 1:
                raise PermissionError("file locked")
            return real_replace(src, dst)

        monkeypatch.setattr(os, "replace", flaky_replace)

        storage = JsonFileSnapshotStorage(tmp_path / "ledger.json", write_attempts=3)
        storage.write(snapshot_with_wallet())

        assert len(calls) == 2
        assert storage.read().wallets[0].id == "w1"

    def test_replace_gives_up_after_attempts(self, tmp_path, monkeypatch):
        calls = []

        def always_fail(src, dst):
            calls.append(src)
            raise OSError("disk gone")

        monkeypatch.setattr(os, "replace", always_fail)

        storage = JsonFileSnapshotStorage(tmp_path / "ledger.json", write_attempts=2)
        with pytest.raises(StorageError):
            storage.write(LedgerSnapshot())

        assert len(calls) == 2
        assert list(tmp_path.iterdir()) == []

    def test_failed_write_removes_temp_file(self, tmp_path, monkeypatch):
        """Test that a write error after the temp file is created cleans it up."""
        real_fdopen = os.fdopen

        class FullDisk:
            def __init__(self, f):
                self._f = f

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                self._f.close()

            def write(self, data):
                raise OSError(28, "No space left on device")

        monkeypatch.setattr(os, "fdopen", lambda fd, *a, **kw: FullDisk(real_fdopen(fd, *a, **kw)))

        storage = JsonFileSnapshotStorage(tmp_path / "ledger.json")
        with pytest.raises(StorageError, match="Failed to write"):
            storage.write(LedgerSnapshot())

        assert list(tmp_path.iterdir()) == []

    def test_store_persists_across_instances(self, tmp_path):
        """Test that a second store sees what the first wrote."""
        path = tmp_path / "ledger.json"
        first = LedgerStore(JsonFileSnapshotStorage(path))
        wallet_id = first.add_wallet("Cash", "cash")
        first.add_income("12.34", wallet_id)

        second = LedgerStore(JsonFileSnapshotStorage(path))
        assert str(second.get_wallet(wallet_id).balance) == "12.34"
        assert len(second.transactions()) == 1
