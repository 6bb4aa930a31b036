"""
CSV Interchange

Export
------
``transactions_to_csv`` writes one row per transaction under the header

  ``Date,Type,Amount,Wallet,From Wallet,To Wallet,Category,Source,Note``

Every field is double-quoted (inner quotes doubled) and rows are joined
by ``\\n`` with no trailing newline. Wallet columns hold wallet ids.

Import
------
``import_transactions_csv`` reads the same layout back into a store.

- ``Date``, ``Type`` and ``Amount`` columns are required; the rest are
  optional and read as empty when absent.
- Wallet ids from another ledger are mapped onto existing wallets when
  the id exists here; otherwise a bank wallet named ``Imported Wallet``
  (income/expense), ``Imported From`` or ``Imported To`` (transfer legs)
  is created. The mapping is reused for the rest of the file.
- Rows with an unusable amount, type, date or wallet linkage are
  skipped and counted, never fatal.
- Rows go through the normal store operations, so balances stay
  consistent with the imported history.
"""

import csv
import io
from collections.abc import Iterable, Mapping
from typing import Optional

import structlog
from pydantic import BaseModel, Field, TypeAdapter

from pocketledger.errors import InvalidCsv, LedgerError
from pocketledger.ledger.store import LedgerStore, to_amount
from pocketledger.models.ledger import LocalDatetime, Transaction, TransactionType, WalletType

logger = structlog.get_logger(__name__)

CSV_HEADER = [
    "Date",
    "Type",
    "Amount",
    "Wallet",
    "From Wallet",
    "To Wallet",
    "Category",
    "Source",
    "Note",
]

REQUIRED_COLUMNS: set[str] = {"Date", "Type", "Amount"}

_DATE = TypeAdapter(LocalDatetime)


class CsvImportResult(BaseModel):
    """Outcome of a CSV import."""

    imported: int = 0
    skipped: int = 0
    transaction_ids: list[str] = Field(default_factory=list)
    created_wallet_ids: list[str] = Field(
        default_factory=list,
        description="Placeholder wallets created for unknown wallet ids"
    )


def _row(tx: Transaction) -> list[str]:
    return [
        tx.created_at.isoformat(),
        tx.type.value,
        str(tx.amount),
        tx.wallet_id or "",
        tx.from_wallet_id or "",
        tx.to_wallet_id or "",
        tx.category or "",
        tx.source or "",
        tx.note or "",
    ]


def transactions_to_csv(transactions: Iterable[Transaction]) -> str:
    """Serialize transactions in the given order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")

    writer.writerow(CSV_HEADER)
    for tx in transactions:
        writer.writerow(_row(tx))

    return buffer.getvalue().removesuffix("\n")


class _WalletMapper:
    """Maps wallet ids from the CSV onto wallets of the target store."""

    def __init__(self, store: LedgerStore):
        self._store = store
        self._existing = {wallet.id for wallet in store.wallets()}
        self._mapping: dict[str, str] = {}
        self.created: list[str] = []

    def resolve(self, old_id: str, label: str) -> Optional[str]:
        if not old_id:
            return None
        if old_id in self._mapping:
            return self._mapping[old_id]

        if old_id in self._existing:
            self._mapping[old_id] = old_id
        else:
            new_id = self._store.add_wallet(f"Imported {label}", WalletType.BANK)
            self._mapping[old_id] = new_id
            self.created.append(new_id)
            logger.info("csv_wallet_created", legacy_wallet_id=old_id, wallet_id=new_id)

        return self._mapping[old_id]


def _read_rows(text: str) -> list[dict[str, str]]:
    reader = csv.DictReader(io.StringIO(text))

    header = [name.strip() for name in (reader.fieldnames or [])]
    reader.fieldnames = header

    missing = REQUIRED_COLUMNS.difference(header)
    if missing:
        raise InvalidCsv(f"CSV headers mismatch: missing {', '.join(sorted(missing))}")

    rows = [
        {key: (value or "").strip() for key, value in row.items() if key is not None}
        for row in reader
    ]
    if not rows:
        raise InvalidCsv("CSV has no data rows")
    return rows


def _import_row(store: LedgerStore, mapper: _WalletMapper, row: Mapping[str, str]) -> str:
    """Import one row; raises ValueError or LedgerError when it must be skipped."""
    tx_type = TransactionType(row.get("Type", "").lower())

    amount = to_amount(row.get("Amount", ""))
    created_at = _DATE.validate_python(row["Date"]) if row.get("Date") else None
    note = row.get("Note") or None

    if tx_type == TransactionType.TRANSFER:
        from_id = mapper.resolve(row.get("From Wallet", ""), "From")
        to_id = mapper.resolve(row.get("To Wallet", ""), "To")
        if not from_id or not to_id or from_id == to_id:
            raise ValueError("transfer needs two different wallets")
        return store.add_transfer(amount, from_id, to_id, note=note, created_at=created_at)

    wallet_id = mapper.resolve(row.get("Wallet", ""), "Wallet")
    if not wallet_id:
        raise ValueError(f"{tx_type.value} needs a wallet")

    if tx_type == TransactionType.INCOME:
        return store.add_income(
            amount, wallet_id, source=row.get("Source") or None, note=note, created_at=created_at
        )
    return store.add_expense(
        amount, wallet_id, category=row.get("Category") or None, note=note, created_at=created_at
    )


def import_transactions_csv(store: LedgerStore, text: str) -> CsvImportResult:
    """
    Import transactions from CSV text.

    Raises:
        InvalidCsv: If required headers are missing or there are no data rows
    """
    rows = _read_rows(text)
    mapper = _WalletMapper(store)
    result = CsvImportResult()

    # Line 1 is the header
    for line_number, row in enumerate(rows, start=2):
        try:
            tx_id = _import_row(store, mapper, row)
        except (ValueError, LedgerError) as e:
            result.skipped += 1
            logger.warning("csv_row_skipped", line=line_number, reason=str(e))
            continue

        result.imported += 1
        result.transaction_ids.append(tx_id)

    result.created_wallet_ids = list(mapper.created)
    logger.info(
        "csv_imported",
        imported=result.imported,
        skipped=result.skipped,
        created_wallets=len(result.created_wallet_ids),
    )
    return result
