"""
Ledger Errors

All errors raised by ledger operations derive from LedgerError.
They are raised before any balance is touched, so a failed call
never leaves a half-applied mutation behind.

Unknown transaction ids on delete/undo/update are NOT errors;
those calls are silent no-ops.
"""

from typing import Any, Optional


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class WalletNotFound(LedgerError):
    """A transaction referenced a wallet id that does not exist."""

    def __init__(self, wallet_id: str):
        self.wallet_id = wallet_id
        super().__init__(f"Wallet not found: {wallet_id}")


class SameWallet(LedgerError):
    """A transfer used the same wallet as source and destination."""

    def __init__(self, wallet_id: str):
        self.wallet_id = wallet_id
        super().__init__(f"Transfer source and destination are the same wallet: {wallet_id}")


class InvalidAmount(LedgerError):
    """Amounts must be finite and strictly positive."""

    def __init__(self, amount: Any):
        self.amount = amount
        super().__init__(f"Amount must be a finite number greater than zero, got {amount!r}")


class InvalidTransactionUpdate(LedgerError):
    """An update would leave a transaction in an inconsistent shape."""
    pass


class InvalidLiabilityUpdate(LedgerError):
    """An update tried to change an immutable liability field."""
    pass


class InvalidEntry(LedgerError):
    """A new wallet, budget or liability failed model validation (e.g. a blank name)."""

    def __init__(self, entity: str, message: str):
        self.entity = entity
        super().__init__(f"Invalid {entity}: {message}")


class InvalidBackup(LedgerError):
    """
    A snapshot payload could not be loaded.

    `issues` holds the individual problems found during validation.
    """

    def __init__(self, message: str, issues: Optional[list] = None):
        self.issues = issues or []
        super().__init__(message)


class InvalidCsv(LedgerError):
    """A CSV payload is missing data rows or required headers."""
    pass


class UnknownPreset(LedgerError):
    """No quick-add preset exists with the given id."""

    def __init__(self, preset_id: str):
        self.preset_id = preset_id
        super().__init__(f"Unknown quick-add preset: {preset_id}")
