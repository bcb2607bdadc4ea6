"""
In-Memory Storage

The default backends. The ledger snapshot lives only as long as the
process, matching a session-only app; the audit storage backs the
activity list on the settings page.
"""

from typing import Optional
from uuid import UUID

from wisevault.models.audit import AuditEvent
from wisevault.models.ledger import LedgerSnapshot
from wisevault.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Holds one snapshot in memory."""

    def __init__(self):
        self._snapshot: Optional[LedgerSnapshot] = None

    @property
    def location(self) -> str:
        return "memory"

    def save_snapshot(self, snapshot: LedgerSnapshot) -> None:
        # Copy so later edits to the live ledger don't leak into the saved one
        self._snapshot = snapshot.model_copy(deep=True)

    def load_snapshot(self) -> Optional[LedgerSnapshot]:
        if self._snapshot is None:
            return None
        return self._snapshot.model_copy(deep=True)

    def clear(self) -> None:
        self._snapshot = None


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events for the current process."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_events_by_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events[-limit:])) if limit > 0 else []
