"""
JSON File Storage Implementation

The snapshot lives in a single JSON file (same format as a backup).

Writes go to a temporary file in the same directory which then
replaces the real file, so a crash mid-write never leaves a truncated
snapshot behind. The replace step is retried on OSError (e.g. a file
briefly locked by a sync client or virus scanner).

Reads run the stored JSON through the snapshot validator, so a
corrupted or unknown file raises instead of being replaced by an
empty ledger.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pocketledger.errors import InvalidBackup
from pocketledger.models.ledger import LedgerSnapshot
from pocketledger.storage.interface import (
    SnapshotReadError,
    SnapshotStorage,
    StorageError,
)
from pocketledger.validation import SnapshotValidator


logger = structlog.get_logger(__name__)


class JsonFileSnapshotStorage(SnapshotStorage):
    """
    File-backed snapshot storage.

    The parent directory is created on first write.
    """

    def __init__(
        self,
        path: Union[str, Path],
        write_attempts: int = 3,
        validator: Optional[SnapshotValidator] = None,
    ):
        self._path = Path(path)
        self._write_attempts = write_attempts
        self._validator = validator or SnapshotValidator()

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> Optional[LedgerSnapshot]:
        if not self._path.exists():
            return None

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read snapshot file {self._path}: {e}") from e

        try:
            return self._validator.load(raw)
        except InvalidBackup as e:
            raise SnapshotReadError(f"Stored snapshot at {self._path} is invalid: {e}") from e

    def write(self, snapshot: LedgerSnapshot) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=self._path.parent,
            )
        except OSError as e:
            raise StorageError(f"Failed to write snapshot file {self._path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(snapshot.to_json())
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write snapshot file {self._path}: {e}") from e

        try:
            self._replace(Path(tmp_name))
        except (OSError, RetryError) as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to replace snapshot file {self._path}: {e}") from e

    def _replace(self, tmp_path: Path) -> None:
        for attempt in Retrying(
            stop=stop_after_attempt(self._write_attempts),
            wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "snapshot_replace_retry",
                        path=str(self._path),
                        attempt=attempt.retry_state.attempt_number,
                    )
                os.replace(tmp_path, self._path)
