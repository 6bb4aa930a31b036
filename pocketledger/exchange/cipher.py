"""
Backup Encryption Hook

The ledger does not ship any cryptography. A cipher is just a pair of
string transforms applied to the exported backup; callers plug in a
real implementation when they need one.
"""

from typing import Optional, Protocol, runtime_checkable

from pocketledger.ledger.store import LedgerStore


@runtime_checkable
class BackupCipher(Protocol):
    """Reversible string transform for backup payloads."""

    def encode(self, plaintext: str) -> str:
        ...

    def decode(self, ciphertext: str) -> str:
        ...


class PassThroughCipher:
    """Default cipher: leaves the payload unchanged."""

    def encode(self, plaintext: str) -> str:
        return plaintext

    def decode(self, ciphertext: str) -> str:
        return ciphertext


def export_encrypted_backup(store: LedgerStore, cipher: Optional[BackupCipher] = None) -> str:
    cipher = cipher or PassThroughCipher()
    return cipher.encode(store.export_backup())


def import_encrypted_backup(
    store: LedgerStore,
    payload: str,
    cipher: Optional[BackupCipher] = None,
) -> None:
    """
    Decode `payload` and import it as a backup.

    Raises:
        InvalidBackup: If the decoded payload is not a valid snapshot
    """
    cipher = cipher or PassThroughCipher()
    store.import_backup(cipher.decode(payload))
