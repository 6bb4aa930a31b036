"""
Ledger Store

The single writer of ledger state. Every mutation follows the same
read-modify-write cycle:

1. Read the snapshot from the storage backend
2. Validate the request (nothing is touched yet)
3. Mutate the working copy, adjusting wallet balances
4. Write the snapshot back
5. Publish the change notification

Because validation happens before step 3 and the working copy is
private until step 4, a call that raises leaves stored state exactly
as it was.

BALANCE INVARIANT:
For every wallet, balance == opening balance + net effect of every
live transaction referencing it. Create applies a transaction's
effect, delete reverses it, undo re-applies it, update reverses the
old effect and applies the new one.
"""

import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Mapping, Optional, Union

import structlog
from pydantic import BaseModel, ValidationError

from pocketledger.config import LedgerSettings
from pocketledger.errors import (
    InvalidAmount,
    InvalidEntry,
    InvalidLiabilityUpdate,
    InvalidTransactionUpdate,
    LedgerError,
    SameWallet,
    WalletNotFound,
)
from pocketledger.ledger.events import LedgerEventBus, Listener
from pocketledger.models.events import LedgerEvent, LedgerEventBuilder, LedgerOperation
from pocketledger.models.ledger import (
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
from pocketledger.storage.interface import SnapshotStorage
from pocketledger.validation import SnapshotValidator


logger = structlog.get_logger(__name__)

Amount = Union[Decimal, int, float, str]

DEFAULT_WALLETS = (
    ("Hand Cash", WalletType.CASH),
    ("Main Bank", WalletType.BANK),
)

IMMUTABLE_FIELDS = {"id", "created_at", "createdAt"}

# Fields that only make sense for one transaction type
_TYPE_FIELDS = {
    TransactionType.INCOME: {"wallet_id", "source"},
    TransactionType.EXPENSE: {"wallet_id", "category"},
    TransactionType.TRANSFER: {"from_wallet_id", "to_wallet_id"},
}
_LINKAGE_FIELDS = {"wallet_id", "source", "category", "from_wallet_id", "to_wallet_id"}


def to_amount(value: Amount) -> Decimal:
    """
    Coerce a user-supplied amount to a positive finite Decimal.

    Raises:
        InvalidAmount: For zero, negative, NaN, infinite or non-numeric input
    """
    if isinstance(value, bool):
        raise InvalidAmount(value)
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidAmount(value)

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(value) from None

    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount(value)
    return amount


def _resolve_fields(
    model: type[BaseModel],
    changes: Mapping[str, Any],
    error: type[LedgerError],
) -> dict[str, Any]:
    """
    Map update keys (snake_case or camelCase) onto model field names.

    Raises `error` for immutable or unknown fields.
    """
    by_name = {name: name for name in model.model_fields}
    by_name.update(
        (field.alias, name) for name, field in model.model_fields.items() if field.alias
    )

    resolved = {}
    for key, value in changes.items():
        if key in IMMUTABLE_FIELDS:
            raise error(f"Field '{key}' cannot be changed")
        if key not in by_name:
            raise error(f"Unknown field '{key}'")
        resolved[by_name[key]] = value
    return resolved


def _new_entry(model: type[BaseModel], entity: str, **fields: Any) -> Any:
    """Build a new wallet/budget/liability, reporting bad input as InvalidEntry."""
    try:
        return model(**fields)
    except ValidationError as e:
        message = "; ".join(error["msg"] for error in e.errors())
        raise InvalidEntry(entity, message) from e


def _apply_effects(snapshot: LedgerSnapshot, tx: Transaction, sign: int) -> None:
    """Add (sign=1) or reverse (sign=-1) a transaction's balance effect."""
    for wallet_id, delta in tx.balance_effects():
        wallet = snapshot.find_wallet(wallet_id)
        if wallet is not None:
            wallet.balance += delta * sign


class LedgerStore:
    """
    Wallets, transactions, budgets and liabilities behind one API.

    Usage:
        store = LedgerStore(InMemorySnapshotStorage())
        cash = store.add_wallet("Hand Cash", "cash")
        store.add_income(1000, cash, source="Salary")
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        bus: Optional[LedgerEventBus] = None,
        validator: Optional[SnapshotValidator] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._storage = storage
        self._bus = bus or LedgerEventBus()
        self._validator = validator or SnapshotValidator()
        self._settings = settings or LedgerSettings()
        self._last_deleted: Optional[Transaction] = None

    # =========================================================================
    # PLUMBING
    # =========================================================================

    def _load(self) -> LedgerSnapshot:
        snapshot = self._storage.read()
        return snapshot if snapshot is not None else LedgerSnapshot()

    def _commit(self, snapshot: LedgerSnapshot, *events: LedgerEvent) -> None:
        self._storage.write(snapshot)
        for event in events:
            self._bus.publish(event)

    def _require_wallet(self, snapshot: LedgerSnapshot, wallet_id: Optional[str]) -> Wallet:
        wallet = snapshot.find_wallet(wallet_id)
        if wallet is None:
            raise WalletNotFound(wallet_id)
        return wallet

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns the unsubscribe handle."""
        return self._bus.subscribe(listener)

    @property
    def bus(self) -> LedgerEventBus:
        return self._bus

    # =========================================================================
    # READ ACCESSORS
    # =========================================================================

    def snapshot(self) -> LedgerSnapshot:
        """A private copy of the full current state."""
        return self._load()

    def wallets(self) -> list[Wallet]:
        return self._load().wallets

    def get_wallet(self, wallet_id: str) -> Optional[Wallet]:
        return self._load().find_wallet(wallet_id)

    def transactions(self) -> list[Transaction]:
        """All transactions, newest first."""
        return sorted(self._load().transactions, key=lambda tx: tx.created_at, reverse=True)

    def recent_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        limit = self._settings.recent_limit if limit is None else limit
        return self.transactions()[:max(0, limit)]

    def budgets(self) -> list[Budget]:
        return self._load().budgets

    def liabilities(self) -> list[Liability]:
        return self._load().liabilities

    def total_balance(self) -> Decimal:
        return sum((w.balance for w in self._load().wallets), Decimal("0"))

    @property
    def last_deleted(self) -> Optional[Transaction]:
        """Copy of the transaction that undo_delete would restore."""
        if self._last_deleted is None:
            return None
        return self._last_deleted.model_copy(deep=True)

    # =========================================================================
    # WALLETS
    # =========================================================================

    def add_wallet(
        self,
        name: str,
        type: Union[WalletType, str],
        initial_balance: Union[Decimal, int, float, str] = 0,
    ) -> str:
        """
        Create a wallet with an opening balance (may be negative).

        Returns:
            The new wallet id
        """
        try:
            balance = Decimal(str(initial_balance))
        except InvalidOperation:
            raise InvalidAmount(initial_balance) from None
        if not balance.is_finite():
            raise InvalidAmount(initial_balance)

        snapshot = self._load()
        wallet = _new_entry(Wallet, "wallet", name=name, type=type, balance=balance)
        snapshot.wallets.append(wallet)

        self._commit(snapshot, LedgerEventBuilder.wallet_added(wallet))
        logger.info("wallet_added", wallet_id=wallet.id, wallet_type=wallet.type.value)
        return wallet.id

    def seed_if_empty(self) -> bool:
        """
        Create the default "Hand Cash" and "Main Bank" wallets when
        there are no wallets at all.

        Returns:
            True if wallets were created
        """
        snapshot = self._load()
        if snapshot.wallets:
            return False

        snapshot.wallets = [Wallet(name=name, type=kind) for name, kind in DEFAULT_WALLETS]
        self._commit(
            snapshot,
            LedgerEventBuilder.snapshot_replaced(LedgerOperation.LEDGER_SEEDED, snapshot),
        )
        logger.info("ledger_seeded", wallets=len(snapshot.wallets))
        return True

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def _add_transaction(self, snapshot: LedgerSnapshot, tx: Transaction) -> str:
        _apply_effects(snapshot, tx, 1)
        snapshot.transactions.append(tx)

        self._commit(snapshot, LedgerEventBuilder.transaction_added(tx))
        logger.info(
            "transaction_added",
            transaction_id=tx.id,
            transaction_type=tx.type.value,
            amount=str(tx.amount),
        )
        return tx.id

    @staticmethod
    def _created_at(created_at: Optional[Union[datetime, str]]) -> dict:
        return {} if created_at is None else {"created_at": created_at}

    def add_income(
        self,
        amount: Amount,
        wallet_id: str,
        source: Optional[str] = None,
        note: Optional[str] = None,
        created_at: Optional[Union[datetime, str]] = None,
    ) -> str:
        """Record income; the wallet balance goes up by `amount`."""
        value = to_amount(amount)
        snapshot = self._load()
        self._require_wallet(snapshot, wallet_id)

        tx = Transaction(
            type=TransactionType.INCOME,
            amount=value,
            wallet_id=wallet_id,
            source=source,
            note=note,
            **self._created_at(created_at),
        )
        return self._add_transaction(snapshot, tx)

    def add_expense(
        self,
        amount: Amount,
        wallet_id: str,
        category: Optional[str] = None,
        note: Optional[str] = None,
        created_at: Optional[Union[datetime, str]] = None,
    ) -> str:
        """Record an expense. Balances may go negative; there is no overdraft check."""
        value = to_amount(amount)
        snapshot = self._load()
        self._require_wallet(snapshot, wallet_id)

        tx = Transaction(
            type=TransactionType.EXPENSE,
            amount=value,
            wallet_id=wallet_id,
            category=category,
            note=note,
            **self._created_at(created_at),
        )
        return self._add_transaction(snapshot, tx)

    def add_transfer(
        self,
        amount: Amount,
        from_wallet_id: str,
        to_wallet_id: str,
        note: Optional[str] = None,
        created_at: Optional[Union[datetime, str]] = None,
    ) -> str:
        """
        Move money between two wallets as a single transfer record.

        Raises:
            SameWallet: If source and destination are equal (checked first)
            WalletNotFound: If either wallet does not exist
        """
        if from_wallet_id == to_wallet_id:
            raise SameWallet(from_wallet_id)

        value = to_amount(amount)
        snapshot = self._load()
        self._require_wallet(snapshot, from_wallet_id)
        self._require_wallet(snapshot, to_wallet_id)

        tx = Transaction(
            type=TransactionType.TRANSFER,
            amount=value,
            from_wallet_id=from_wallet_id,
            to_wallet_id=to_wallet_id,
            note=note,
            **self._created_at(created_at),
        )
        return self._add_transaction(snapshot, tx)

    def delete_transaction(self, tx_id: str) -> None:
        """
        Delete a transaction and reverse its balance effect.

        The deleted transaction becomes the undo buffer, replacing
        whatever was there. Unknown ids are ignored.
        """
        snapshot = self._load()
        tx = snapshot.find_transaction(tx_id)
        if tx is None:
            logger.debug("delete_transaction_ignored", transaction_id=tx_id)
            return

        _apply_effects(snapshot, tx, -1)
        snapshot.transactions = [t for t in snapshot.transactions if t.id != tx_id]

        self._storage.write(snapshot)
        self._last_deleted = tx.model_copy(deep=True)

        self._bus.publish(LedgerEventBuilder.transaction_removed(tx))
        self._bus.publish(LedgerEventBuilder.deleted(tx))
        logger.info("transaction_deleted", transaction_id=tx.id, amount=str(tx.amount))

    def undo_delete(self) -> None:
        """Restore the most recently deleted transaction, if any."""
        if self._last_deleted is None:
            logger.debug("undo_delete_ignored")
            return

        tx = self._last_deleted
        snapshot = self._load()
        snapshot.transactions.append(tx.model_copy(deep=True))
        _apply_effects(snapshot, tx, 1)

        self._storage.write(snapshot)
        self._last_deleted = None

        self._bus.publish(LedgerEventBuilder.delete_undone(tx))
        logger.info("delete_undone", transaction_id=tx.id)

    def update_transaction(self, tx_id: str, **changes: Any) -> None:
        """
        Edit a transaction in place, keeping balances consistent.

        The old balance effect is reversed using the stored values and
        the new effect applied using the updated ones. When `type`
        changes, fields that belong only to the old type are cleared.

        Raises:
            InvalidTransactionUpdate: For immutable or unknown fields, or
                a result with an inconsistent wallet linkage
            InvalidAmount: For a non-positive or non-finite amount
            WalletNotFound: If the result references an unknown wallet
        """
        snapshot = self._load()
        current = snapshot.find_transaction(tx_id)
        if current is None:
            logger.debug("update_transaction_ignored", transaction_id=tx_id)
            return

        updated = self._build_update(current, changes)

        for wallet_id in updated.wallet_ids:
            self._require_wallet(snapshot, wallet_id)

        _apply_effects(snapshot, current, -1)
        _apply_effects(snapshot, updated, 1)
        snapshot.transactions = [
            updated if t.id == tx_id else t for t in snapshot.transactions
        ]

        self._commit(snapshot, LedgerEventBuilder.transaction_updated(current, updated))
        logger.info(
            "transaction_updated",
            transaction_id=tx_id,
            fields=sorted(changes),
        )

    def _build_update(self, current: Transaction, changes: Mapping[str, Any]) -> Transaction:
        resolved = _resolve_fields(Transaction, changes, InvalidTransactionUpdate)

        if "amount" in resolved:
            resolved["amount"] = to_amount(resolved["amount"])

        data = current.model_dump()

        if "type" in resolved:
            try:
                new_type = TransactionType(resolved["type"])
            except ValueError:
                raise InvalidTransactionUpdate(
                    f"Unknown transaction type {resolved['type']!r}"
                ) from None
            if new_type != current.type:
                for name in _LINKAGE_FIELDS - _TYPE_FIELDS[new_type]:
                    data[name] = None

        data.update(resolved)

        try:
            return Transaction.model_validate(data)
        except ValidationError as e:
            message = "; ".join(error["msg"] for error in e.errors())
            raise InvalidTransactionUpdate(f"Invalid transaction update: {message}") from e

    # =========================================================================
    # BUDGETS
    # =========================================================================

    def set_budget(self, category: str, limit: Amount) -> None:
        """Create or overwrite the monthly limit for a category."""
        value = to_amount(limit)
        snapshot = self._load()

        budget = snapshot.find_budget(category.strip())
        created = budget is None
        if created:
            budget = _new_entry(Budget, "budget", category=category, limit=value)
            snapshot.budgets.append(budget)
        else:
            budget.limit = value

        self._commit(snapshot, LedgerEventBuilder.budget_set(budget, created))
        logger.info("budget_set", category=budget.category, limit=str(value), created=created)

    def remove_budget(self, category: str) -> None:
        category = category.strip()
        snapshot = self._load()
        if snapshot.find_budget(category) is None:
            logger.debug("remove_budget_ignored", category=category)
            return

        snapshot.budgets = [b for b in snapshot.budgets if b.category != category]
        self._commit(snapshot, LedgerEventBuilder.budget_removed(category))
        logger.info("budget_removed", category=category)

    # =========================================================================
    # LIABILITIES
    # =========================================================================

    def add_liability(
        self,
        direction: Union[LiabilityDirection, str],
        person: str,
        amount: Amount,
        note: Optional[str] = None,
        due_date: Optional[Union[date, str]] = None,
    ) -> str:
        """Record money owed; status always starts as unpaid."""
        value = to_amount(amount)
        snapshot = self._load()

        liability = _new_entry(
            Liability,
            "liability",
            direction=direction,
            person=person,
            amount=value,
            note=note,
            due_date=due_date,
            status=LiabilityStatus.UNPAID,
        )
        snapshot.liabilities.append(liability)

        self._commit(
            snapshot,
            LedgerEventBuilder.liability_changed(
                LedgerOperation.LIABILITY_ADDED, liability.id, liability
            ),
        )
        logger.info("liability_added", liability_id=liability.id, direction=liability.direction.value)
        return liability.id

    def update_liability(self, liability_id: str, **changes: Any) -> None:
        """
        Merge `changes` into a liability. Unknown ids are ignored.

        Raises:
            InvalidLiabilityUpdate: For immutable or unknown fields, or
                values that fail validation
            InvalidAmount: For a non-positive or non-finite amount
        """
        snapshot = self._load()
        current = snapshot.find_liability(liability_id)
        if current is None:
            logger.debug("update_liability_ignored", liability_id=liability_id)
            return

        resolved = _resolve_fields(Liability, changes, InvalidLiabilityUpdate)
        if "amount" in resolved:
            resolved["amount"] = to_amount(resolved["amount"])

        data = current.model_dump()
        data.update(resolved)
        try:
            updated = Liability.model_validate(data)
        except ValidationError as e:
            message = "; ".join(error["msg"] for error in e.errors())
            raise InvalidLiabilityUpdate(f"Invalid liability update: {message}") from e

        snapshot.liabilities = [
            updated if l.id == liability_id else l for l in snapshot.liabilities
        ]
        self._commit(
            snapshot,
            LedgerEventBuilder.liability_changed(
                LedgerOperation.LIABILITY_UPDATED, liability_id, updated
            ),
        )
        logger.info("liability_updated", liability_id=liability_id, fields=sorted(changes))

    def delete_liability(self, liability_id: str) -> None:
        snapshot = self._load()
        if snapshot.find_liability(liability_id) is None:
            logger.debug("delete_liability_ignored", liability_id=liability_id)
            return

        snapshot.liabilities = [l for l in snapshot.liabilities if l.id != liability_id]
        self._commit(
            snapshot,
            LedgerEventBuilder.liability_changed(LedgerOperation.LIABILITY_DELETED, liability_id),
        )
        logger.info("liability_deleted", liability_id=liability_id)

    # =========================================================================
    # BACKUP / RESET
    # =========================================================================

    def export_backup(self) -> str:
        """Pretty-printed JSON of the full snapshot."""
        return self._load().to_json()

    def import_backup(self, payload: Union[str, bytes, Mapping[str, Any]]) -> None:
        """
        Replace the whole ledger with a backup.

        The payload is validated (and migrated from older versions)
        before anything is written. The undo buffer is cleared.

        Raises:
            InvalidBackup: If the payload cannot be loaded
        """
        snapshot = self._validator.load(payload)

        self._storage.write(snapshot)
        self._last_deleted = None

        self._bus.publish(
            LedgerEventBuilder.snapshot_replaced(LedgerOperation.BACKUP_IMPORTED, snapshot)
        )
        logger.info(
            "backup_imported",
            wallets=len(snapshot.wallets),
            transactions=len(snapshot.transactions),
        )

    def reset(self) -> None:
        """Replace the ledger with an empty snapshot."""
        snapshot = LedgerSnapshot()

        self._storage.write(snapshot)
        self._last_deleted = None

        self._bus.publish(
            LedgerEventBuilder.snapshot_replaced(LedgerOperation.LEDGER_RESET, snapshot)
        )
        logger.info("ledger_reset")
