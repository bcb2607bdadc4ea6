"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
In-memory is the default; a JSON file backend is used when configured.
"""

from wisevault.services.storage.interface import (
    AuditStorageInterface,
    CorruptSnapshotError,
    LedgerStorageInterface,
    StorageError,
)
from wisevault.services.storage.json_file import JsonFileLedgerStorage
from wisevault.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "CorruptSnapshotError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
]
