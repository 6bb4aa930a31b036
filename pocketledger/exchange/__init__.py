"""Interchange package: CSV, printable report, backup cipher hook."""

from pocketledger.exchange.cipher import (
    BackupCipher,
    PassThroughCipher,
    export_encrypted_backup,
    import_encrypted_backup,
)
from pocketledger.exchange.csv_io import (
    CSV_HEADER,
    CsvImportResult,
    import_transactions_csv,
    transactions_to_csv,
)
from pocketledger.exchange.report import REPORT_TITLE, report_lines

__all__ = [
    "CSV_HEADER",
    "REPORT_TITLE",
    "BackupCipher",
    "CsvImportResult",
    "PassThroughCipher",
    "export_encrypted_backup",
    "import_encrypted_backup",
    "import_transactions_csv",
    "report_lines",
    "transactions_to_csv",
]
