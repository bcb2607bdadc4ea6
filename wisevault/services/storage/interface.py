"""
Abstract Storage Interface

DESIGN DECISION: Persistence is optional. By default a ledger lives only
for the session, like the app it models. When a storage backend is
configured, the whole ledger is written as one snapshot after every
change.

We define an abstract interface for storage operations so we can:
1. Keep the default session-only behaviour (in-memory backend)
2. Persist to a JSON file when WISEVAULT_STORAGE_PATH is set
3. Swap in a real database later without touching the ledger

The interface is intentionally simple: it stores whole snapshots rather
than individual records, because the ledger is small.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from wisevault.models.audit import AuditEvent
from wisevault.models.ledger import LedgerSnapshot


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger snapshot storage.

    Any storage implementation must implement these methods.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where snapshots go."""

    @abstractmethod
    def save_snapshot(self, snapshot: LedgerSnapshot) -> None:
        """
        Replace the stored ledger with this snapshot.

        Raises:
            StorageError: If the write fails
        """

    @abstractmethod
    def load_snapshot(self) -> Optional[LedgerSnapshot]:
        """
        Load the stored ledger.

        Returns:
            The snapshot, or None if nothing has been stored yet

        Raises:
            CorruptSnapshotError: If stored data cannot be parsed
        """

    @abstractmethod
    def clear(self) -> None:
        """Delete the stored snapshot, if any."""


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """

    @abstractmethod
    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        """Events sharing a correlation id, in chronological order."""

    @abstractmethod
    def get_events_by_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEvent]:
        """Events for one transaction or bill, in chronological order."""

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events, newest first."""


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptSnapshotError(StorageError):
    """Stored ledger data exists but cannot be parsed."""
    pass
