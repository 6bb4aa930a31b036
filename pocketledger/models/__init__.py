"""
Data Models Package

This package contains all Pydantic models used in PocketLedger.
All data flowing through the ledger must conform to these schemas.
"""

from pocketledger.models.ledger import (
    SNAPSHOT_VERSION,
    Budget,
    LedgerSnapshot,
    Liability,
    LiabilityDirection,
    LiabilityStatus,
    Transaction,
    TransactionType,
    Wallet,
    WalletType,
)
from pocketledger.models.stats import (
    BudgetStatus,
    BudgetUsage,
    CategoryShare,
    ChartPoint,
    RangeBounds,
    RangeKey,
    RangeTotals,
)
from pocketledger.models.events import (
    LedgerChanged,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerOperation,
    TransactionDeleted,
)

__all__ = [
    # Ledger models
    "SNAPSHOT_VERSION",
    "Budget",
    "LedgerSnapshot",
    "Liability",
    "LiabilityDirection",
    "LiabilityStatus",
    "Transaction",
    "TransactionType",
    "Wallet",
    "WalletType",
    # Derived views
    "BudgetStatus",
    "BudgetUsage",
    "CategoryShare",
    "ChartPoint",
    "RangeBounds",
    "RangeKey",
    "RangeTotals",
    # Events
    "LedgerChanged",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerOperation",
    "TransactionDeleted",
]
