"""Quick-add presets for the most common operations."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional, Union

from pydantic import BaseModel

from pocketledger.errors import UnknownPreset
from pocketledger.models.ledger import TransactionType

if TYPE_CHECKING:
    from pocketledger.ledger.store import Amount, LedgerStore


class PopularOperation(BaseModel):
    """A one-tap income or expense template."""

    id: str
    label: str
    emoji: str
    type: TransactionType
    category: Optional[str] = None
    source: Optional[str] = None


POPULAR_OPERATIONS: list[PopularOperation] = [
    PopularOperation(id="food", label="Food", emoji="🍔", type=TransactionType.EXPENSE, category="Food"),
    PopularOperation(id="travel", label="Travel", emoji="✈️", type=TransactionType.EXPENSE, category="Travel"),
    PopularOperation(id="health", label="Health", emoji="❤️", type=TransactionType.EXPENSE, category="Health"),
    PopularOperation(id="salary", label="Salary", emoji="💼", type=TransactionType.INCOME, source="Salary"),
]


def get_preset(preset_id: str) -> PopularOperation:
    for preset in POPULAR_OPERATIONS:
        if preset.id == preset_id:
            return preset
    raise UnknownPreset(preset_id)


def quick_add(
    store: "LedgerStore",
    preset_id: str,
    amount: "Amount",
    wallet_id: str,
    note: Optional[str] = None,
    created_at: Optional[Union[datetime, str]] = None,
) -> str:
    """
    Record a transaction from a preset.

    Returns:
        The new transaction id
    """
    preset = get_preset(preset_id)

    if preset.type == TransactionType.INCOME:
        return store.add_income(
            amount, wallet_id, source=preset.source, note=note, created_at=created_at
        )
    return store.add_expense(
        amount, wallet_id, category=preset.category, note=note, created_at=created_at
    )
