"""Services package."""

from wisevault.services.export import (
    bills_to_csv,
    export_ledger,
    transactions_to_csv,
)
from wisevault.services.storage import (
    AuditStorageInterface,
    CorruptSnapshotError,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    LedgerStorageInterface,
    StorageError,
)

__all__ = [
    # Export
    "bills_to_csv",
    "export_ledger",
    "transactions_to_csv",
    # Storage
    "AuditStorageInterface",
    "CorruptSnapshotError",
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
    "LedgerStorageInterface",
    "StorageError",
]
