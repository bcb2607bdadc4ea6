"""
Audit Models for WiseVault

Every ledger mutation is recorded as an audit event.
This provides:
1. A visible activity history on the settings page
2. Debugging information when balances look wrong
3. The ability to reconstruct what happened in a session

DESIGN DECISION: Audit logs are append-only. We never delete or modify them,
not even when the ledger itself is cleared.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_REMOVED = "transaction_removed"

    # Bills
    BILL_ADDED = "bill_added"
    BILL_UPDATED = "bill_updated"
    BILL_REMOVED = "bill_removed"
    BILL_MARKED_PAID = "bill_marked_paid"
    BILL_MARKED_UNPAID = "bill_marked_unpaid"

    # Settings
    BUDGET_UPDATED = "budget_updated"
    PREFERENCES_UPDATED = "preferences_updated"

    # Data management
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_SAVED = "ledger_saved"
    SAVE_FAILED = "save_failed"
    LEDGER_CLEARED = "ledger_cleared"
    DATA_EXPORTED = "data_exported"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every mutation of the ledger creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'bill', 'ledger')"
    )
    entity_id: Optional[UUID] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., a bill toggle and its payment)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(
            transaction_id=txn.id,
            description=txn.description,
            amount=txn.amount,
            transaction_type=txn.type.value,
            correlation_id=correlation_id,
        )
        event = AuditEventBuilder.bill_paid_toggled(
            bill_id=bill.id,
            name=bill.name,
            is_paid=bill.is_paid,
            correlation_id=correlation_id,
        )
    """

    @staticmethod
    def transaction_added(
        transaction_id: UUID,
        description: str,
        amount: Decimal,
        transaction_type: str,
        correlation_id: Optional[UUID] = None,
        is_user_action: bool = True,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"{transaction_type.capitalize()} recorded: {description}",
            details={
                "amount": str(amount),
                "type": transaction_type,
            },
            is_user_action=is_user_action,
        )

    @staticmethod
    def transaction_removed(
        transaction_id: UUID,
        description: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
        is_user_action: bool = True,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REMOVED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction removed: {description}",
            details={"amount": str(amount)},
            is_user_action=is_user_action,
        )

    @staticmethod
    def bill_added(
        bill_id: UUID,
        name: str,
        amount: Decimal,
        due_day: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_ADDED,
            entity_type="bill",
            entity_id=bill_id,
            correlation_id=correlation_id,
            description=f"Bill added: {name}",
            details={
                "amount": str(amount),
                "due_day": due_day,
            },
            is_user_action=True,
        )

    @staticmethod
    def bill_updated(
        bill_id: UUID,
        changes: dict,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_UPDATED,
            entity_type="bill",
            entity_id=bill_id,
            correlation_id=correlation_id,
            description=f"Bill updated: {', '.join(sorted(changes))}",
            details={k: str(v) for k, v in changes.items()},
            is_user_action=True,
        )

    @staticmethod
    def bill_removed(
        bill_id: UUID,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_REMOVED,
            entity_type="bill",
            entity_id=bill_id,
            correlation_id=correlation_id,
            description=f"Bill removed: {name}",
            is_user_action=True,
        )

    @staticmethod
    def bill_paid_toggled(
        bill_id: UUID,
        name: str,
        is_paid: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.BILL_MARKED_PAID
                if is_paid
                else AuditEventType.BILL_MARKED_UNPAID
            ),
            entity_type="bill",
            entity_id=bill_id,
            correlation_id=correlation_id,
            description=f"Bill marked {'paid' if is_paid else 'unpaid'}: {name}",
            details={"is_paid": is_paid},
            is_user_action=True,
        )

    @staticmethod
    def budget_updated(
        monthly_limit: Decimal,
        savings_goal: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            entity_type="budget",
            correlation_id=correlation_id,
            description="Budget targets updated",
            details={
                "monthly_limit": str(monthly_limit),
                "savings_goal": str(savings_goal),
            },
            is_user_action=True,
        )

    @staticmethod
    def preferences_updated(
        currency: str,
        use_biometrics: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PREFERENCES_UPDATED,
            entity_type="preferences",
            correlation_id=correlation_id,
            description="Preferences updated",
            details={
                "currency": currency,
                "use_biometrics": use_biometrics,
            },
            is_user_action=True,
        )

    @staticmethod
    def ledger_loaded(
        location: str,
        transaction_count: int,
        bill_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            entity_type="ledger",
            description=f"Ledger loaded from {location}",
            details={
                "transactions": transaction_count,
                "bills": bill_count,
            },
        )

    @staticmethod
    def ledger_saved(
        location: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger saved to {location}",
        )

    @staticmethod
    def save_failed(
        location: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Could not save ledger to {location}",
            error_message=error_message,
        )

    @staticmethod
    def ledger_cleared(
        transaction_count: int,
        bill_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            correlation_id=correlation_id,
            description="All transactions and bills cleared",
            details={
                "transactions_removed": transaction_count,
                "bills_removed": bill_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def data_exported(
        paths: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_EXPORTED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Exported {len(paths)} file(s)",
            details={"paths": paths},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
