"""Text body of the printable transaction report."""

from collections.abc import Iterable

from pocketledger.models.ledger import Transaction


REPORT_TITLE = "Finance Report"


def report_line(index: int, tx: Transaction, currency_symbol: str = "৳") -> str:
    return (
        f"{index}. {tx.type.value.upper()}  "
        f"{currency_symbol}{tx.amount}  {tx.created_at.date().isoformat()}"
    )


def report_lines(transactions: Iterable[Transaction], currency_symbol: str = "৳") -> list[str]:
    """
    Title followed by one numbered line per transaction, e.g.

        Finance Report
        1. EXPENSE  ৳300  2025-01-03
    """
    lines = [REPORT_TITLE]
    lines.extend(
        report_line(index, tx, currency_symbol)
        for index, tx in enumerate(transactions, start=1)
    )
    return lines
