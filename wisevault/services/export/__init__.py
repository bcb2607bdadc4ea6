"""Data export package."""

from wisevault.services.export.csv_exporter import (
    BILL_COLUMNS,
    TRANSACTION_COLUMNS,
    bills_to_csv,
    export_bills_to_csv,
    export_ledger,
    export_transactions_to_csv,
    transactions_to_csv,
)

__all__ = [
    "BILL_COLUMNS",
    "TRANSACTION_COLUMNS",
    "bills_to_csv",
    "export_bills_to_csv",
    "export_ledger",
    "export_transactions_to_csv",
    "transactions_to_csv",
]
