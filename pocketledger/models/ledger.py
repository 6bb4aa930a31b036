"""
Core Ledger Models for PocketLedger

These models define the schemas for everything the ledger persists:
wallets, transactions, budgets, liabilities, and the snapshot that
bundles them together.

Serialized field names are camelCase (createdAt, walletId, ...) so a
snapshot is interchangeable with the JSON backups of the PocketLedger
mobile app. Python code uses the snake_case attribute names; both
spellings are accepted on input.

Timestamps are stored as naive local datetimes. Timezone-aware input
(e.g. "2025-01-03T10:00:00Z") is converted to local time once, here.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


SNAPSHOT_VERSION = 1


def new_id() -> str:
    """Generate a new entity id."""
    return str(uuid4())


def as_local(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time. Naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


LocalDatetime = Annotated[datetime, AfterValidator(as_local)]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class WalletType(str, Enum):
    """Kinds of money containers."""
    CASH = "cash"
    BANK = "bank"


class TransactionType(str, Enum):
    """
    Transaction kinds.

    The direction of money is implied by the type; amounts are
    always stored positive.
    """
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class LiabilityDirection(str, Enum):
    """Who owes whom."""
    I_OWE = "i_owe"
    OWES_ME = "owes_me"


class LiabilityStatus(str, Enum):
    """Repayment status of a liability."""
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


# =============================================================================
# BASE
# =============================================================================

class LedgerModel(BaseModel):
    """Shared configuration for all persisted ledger models."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class Wallet(LedgerModel):
    """
    A named money container with a running balance.

    The balance is derived-but-stored: it always equals the opening
    balance plus the net effect of every live transaction referencing
    this wallet. Only transaction mutations change it.
    """

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique wallet id"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name (e.g. 'Hand Cash', 'City Bank')"
    )
    type: WalletType = Field(
        ...,
        description="Cash or bank"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Signed running balance (may go negative)"
    )
    created_at: LocalDatetime = Field(
        default_factory=datetime.now,
        description="When the wallet was created"
    )


class Transaction(LedgerModel):
    """
    An income, expense, or transfer event.

    Linkage rules:
    - income/expense reference exactly one wallet via wallet_id
    - transfers reference from_wallet_id and to_wallet_id, which differ
    - category belongs to expenses, source belongs to income
    """

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique transaction id"
    )
    type: TransactionType = Field(
        ...,
        description="Income, expense, or transfer"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount; direction comes from type"
    )
    note: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Free-form note"
    )
    category: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Expense category (e.g. 'Food')"
    )
    source: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Income source (e.g. 'Salary')"
    )
    wallet_id: Optional[str] = None
    from_wallet_id: Optional[str] = None
    to_wallet_id: Optional[str] = None
    created_at: LocalDatetime = Field(
        default_factory=datetime.now,
        description="When the transaction happened"
    )

    @field_validator("note", "category", "source", "wallet_id", "from_wallet_id", "to_wallet_id")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty strings as missing."""
        return v or None

    @model_validator(mode="after")
    def validate_linkage(self) -> "Transaction":
        """Validate wallet linkage and type-specific fields."""
        if self.type == TransactionType.TRANSFER:
            if not self.from_wallet_id or not self.to_wallet_id:
                raise ValueError("Transfer requires both fromWalletId and toWalletId")
            if self.from_wallet_id == self.to_wallet_id:
                raise ValueError("Transfer source and destination must differ")
            if self.wallet_id:
                raise ValueError("Transfer cannot reference walletId")
        else:
            if not self.wallet_id:
                raise ValueError(f"{self.type.value.capitalize()} requires walletId")
            if self.from_wallet_id or self.to_wallet_id:
                raise ValueError(
                    f"{self.type.value.capitalize()} cannot reference fromWalletId/toWalletId"
                )

        if self.category is not None and self.type != TransactionType.EXPENSE:
            raise ValueError("Only expenses can have a category")
        if self.source is not None and self.type != TransactionType.INCOME:
            raise ValueError("Only income can have a source")

        return self

    @property
    def wallet_ids(self) -> list[str]:
        """All wallet ids this transaction touches."""
        if self.type == TransactionType.TRANSFER:
            return [self.from_wallet_id, self.to_wallet_id]
        return [self.wallet_id]

    def balance_effects(self) -> list[tuple[str, Decimal]]:
        """
        Signed balance deltas this transaction applies on creation.

        Reversing a transaction applies the same deltas negated.
        """
        if self.type == TransactionType.INCOME:
            return [(self.wallet_id, self.amount)]
        if self.type == TransactionType.EXPENSE:
            return [(self.wallet_id, -self.amount)]
        return [
            (self.from_wallet_id, -self.amount),
            (self.to_wallet_id, self.amount),
        ]


class Budget(LedgerModel):
    """Monthly spending limit for one expense category."""

    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Expense category (unique key)"
    )
    limit: Decimal = Field(
        ...,
        gt=0,
        description="Monthly limit"
    )
    created_at: LocalDatetime = Field(
        default_factory=datetime.now
    )


class Liability(LedgerModel):
    """
    Money owed to or by someone.

    Liabilities are tracked separately; they never move wallet balances.
    """

    id: str = Field(
        default_factory=new_id,
        min_length=1
    )
    direction: LiabilityDirection
    person: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Who is involved"
    )
    amount: Decimal = Field(
        ...,
        gt=0
    )
    due_date: Optional[date] = None
    status: LiabilityStatus = Field(
        default=LiabilityStatus.UNPAID
    )
    note: Optional[str] = Field(
        default=None,
        max_length=500
    )
    created_at: LocalDatetime = Field(
        default_factory=datetime.now
    )


# =============================================================================
# SNAPSHOT
# =============================================================================

class LedgerSnapshot(LedgerModel):
    """
    The complete persisted state of the ledger.

    This is the unit of persistence, backup, and restore.
    """

    version: int = Field(
        default=SNAPSHOT_VERSION,
        ge=1,
        description="Snapshot schema version"
    )
    wallets: list[Wallet] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
    liabilities: list[Liability] = Field(default_factory=list)

    def find_wallet(self, wallet_id: Optional[str]) -> Optional[Wallet]:
        return next((w for w in self.wallets if w.id == wallet_id), None)

    def find_transaction(self, tx_id: str) -> Optional[Transaction]:
        return next((t for t in self.transactions if t.id == tx_id), None)

    def find_budget(self, category: str) -> Optional[Budget]:
        return next((b for b in self.budgets if b.category == category), None)

    def find_liability(self, liability_id: str) -> Optional[Liability]:
        return next((l for l in self.liabilities if l.id == liability_id), None)

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize with camelCase keys."""
        return self.model_dump_json(by_alias=True, indent=indent)
