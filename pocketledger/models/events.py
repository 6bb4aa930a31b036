"""
Ledger Event Models

Every successful ledger mutation produces an event on the store's
notification channel. There are two kinds, told apart by `kind`:

- "changed": fired after every mutation, once the snapshot is written
- "deleted": fired only by transaction deletion, after the "changed"
  event, carrying the deleted transaction so a UI can offer undo
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from pocketledger.models.ledger import (
    Budget,
    Liability,
    LedgerSnapshot,
    Transaction,
    TransactionType,
    Wallet,
)


class LedgerOperation(str, Enum):
    """The store operation that produced an event."""
    WALLET_ADDED = "wallet_added"
    INCOME_ADDED = "income_added"
    EXPENSE_ADDED = "expense_added"
    TRANSFER_ADDED = "transfer_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    DELETE_UNDONE = "delete_undone"
    BUDGET_SET = "budget_set"
    BUDGET_REMOVED = "budget_removed"
    LIABILITY_ADDED = "liability_added"
    LIABILITY_UPDATED = "liability_updated"
    LIABILITY_DELETED = "liability_deleted"
    BACKUP_IMPORTED = "backup_imported"
    LEDGER_RESET = "ledger_reset"
    LEDGER_SEEDED = "ledger_seeded"


_ADDED_OPERATIONS = {
    TransactionType.INCOME: LedgerOperation.INCOME_ADDED,
    TransactionType.EXPENSE: LedgerOperation.EXPENSE_ADDED,
    TransactionType.TRANSFER: LedgerOperation.TRANSFER_ADDED,
}


class _LedgerEventBase(BaseModel):
    """Fields shared by every ledger event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event was published (local time)"
    )
    operation: LedgerOperation = Field(
        ...,
        description="Store operation that caused the event"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g. 'wallet', 'transaction', 'budget')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Id (or key) of the affected entity"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Operation-specific data"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind,
            "operation": self.operation.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "details": self.details,
        }


class LedgerChanged(_LedgerEventBase):
    """Generic 'data changed' notification."""

    kind: Literal["changed"] = "changed"


class TransactionDeleted(_LedgerEventBase):
    """Deletion notification, used to drive an undo affordance."""

    kind: Literal["deleted"] = "deleted"
    operation: LedgerOperation = LedgerOperation.TRANSACTION_DELETED
    entity_type: Optional[str] = "transaction"
    transaction: Transaction = Field(
        ...,
        description="Full pre-deletion copy of the transaction"
    )


LedgerEvent = Annotated[
    Union[LedgerChanged, TransactionDeleted],
    Field(discriminator="kind"),
]


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.wallet_added(wallet)
        event = LedgerEventBuilder.deleted(transaction)
    """

    @staticmethod
    def wallet_added(wallet: Wallet) -> LedgerChanged:
        return LedgerChanged(
            operation=LedgerOperation.WALLET_ADDED,
            entity_type="wallet",
            entity_id=wallet.id,
            details={
                "name": wallet.name,
                "type": wallet.type.value,
                "balance": str(wallet.balance),
            },
        )

    @staticmethod
    def transaction_added(tx: Transaction) -> LedgerChanged:
        return LedgerChanged(
            operation=_ADDED_OPERATIONS[tx.type],
            entity_type="transaction",
            entity_id=tx.id,
            details={
                "amount": str(tx.amount),
                "wallet_ids": tx.wallet_ids,
            },
        )

    @staticmethod
    def transaction_updated(before: Transaction, after: Transaction) -> LedgerChanged:
        changed = sorted(
            name for name in Transaction.model_fields
            if getattr(before, name) != getattr(after, name)
        )
        return LedgerChanged(
            operation=LedgerOperation.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=after.id,
            details={"changed_fields": changed},
        )

    @staticmethod
    def transaction_removed(tx: Transaction) -> LedgerChanged:
        return LedgerChanged(
            operation=LedgerOperation.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=tx.id,
            details={
                "type": tx.type.value,
                "amount": str(tx.amount),
            },
        )

    @staticmethod
    def deleted(tx: Transaction) -> TransactionDeleted:
        return TransactionDeleted(
            entity_id=tx.id,
            transaction=tx,
        )

    @staticmethod
    def delete_undone(tx: Transaction) -> LedgerChanged:
        return LedgerChanged(
            operation=LedgerOperation.DELETE_UNDONE,
            entity_type="transaction",
            entity_id=tx.id,
            details={
                "type": tx.type.value,
                "amount": str(tx.amount),
            },
        )

    @staticmethod
    def budget_set(budget: Budget, created: bool) -> LedgerChanged:
        return LedgerChanged(
            operation=LedgerOperation.BUDGET_SET,
            entity_type="budget",
            entity_id=budget.category,
            details={
                "limit": str(budget.limit),
                "created": created,
            },
        )

    @staticmethod
    def budget_removed(category: str) -> LedgerChanged:
        return LedgerChanged(
            operation=LedgerOperation.BUDGET_REMOVED,
            entity_type="budget",
            entity_id=category,
        )

    @staticmethod
    def liability_changed(
        operation: LedgerOperation,
        liability_id: str,
        liability: Optional[Liability] = None,
    ) -> LedgerChanged:
        details = {}
        if liability is not None:
            details = {
                "direction": liability.direction.value,
                "status": liability.status.value,
                "amount": str(liability.amount),
            }
        return LedgerChanged(
            operation=operation,
            entity_type="liability",
            entity_id=liability_id,
            details=details,
        )

    @staticmethod
    def snapshot_replaced(operation: LedgerOperation, snapshot: LedgerSnapshot) -> LedgerChanged:
        return LedgerChanged(
            operation=operation,
            entity_type="snapshot",
            details={
                "wallets": len(snapshot.wallets),
                "transactions": len(snapshot.transactions),
                "budgets": len(snapshot.budgets),
                "liabilities": len(snapshot.liabilities),
            },
        )
