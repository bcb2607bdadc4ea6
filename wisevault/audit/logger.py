"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged.
This provides:
1. Complete traceability of a session
2. Debugging capability when a figure looks wrong
3. An activity history the user can see on the settings page

The audit logger:
- Is synchronous, like the ledger it records
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from wisevault.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from wisevault.models.ledger import Bill, Transaction
from wisevault.services.storage.interface import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: Optional[str] = None):
    """structlog logger using the configuration above."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, if one is configured (for the activity list)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for audit events.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = get_logger("wisevault.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Newest-first activity list; empty without storage."""
        if self._storage is None:
            return []
        return self._storage.get_recent_events(limit)

    def log_transaction_added(
        self,
        transaction: Transaction,
        correlation_id: Optional[UUID] = None,
        is_user_action: bool = True,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction.id,
            description=transaction.description,
            amount=transaction.amount,
            transaction_type=transaction.type.value,
            correlation_id=correlation_id,
            is_user_action=is_user_action,
        ))

    def log_transaction_removed(
        self,
        transaction: Transaction,
        correlation_id: Optional[UUID] = None,
        is_user_action: bool = True,
    ) -> None:
        self.log(AuditEventBuilder.transaction_removed(
            transaction_id=transaction.id,
            description=transaction.description,
            amount=transaction.amount,
            correlation_id=correlation_id,
            is_user_action=is_user_action,
        ))

    def log_bill_added(self, bill: Bill, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.bill_added(
            bill_id=bill.id,
            name=bill.name,
            amount=bill.amount,
            due_day=bill.due_day,
            correlation_id=correlation_id,
        ))

    def log_bill_updated(
        self,
        bill: Bill,
        changes: dict,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.bill_updated(
            bill_id=bill.id,
            changes=changes,
            correlation_id=correlation_id,
        ))

    def log_bill_removed(self, bill: Bill, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.bill_removed(
            bill_id=bill.id,
            name=bill.name,
            correlation_id=correlation_id,
        ))

    def log_bill_paid_toggled(self, bill: Bill, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.bill_paid_toggled(
            bill_id=bill.id,
            name=bill.name,
            is_paid=bill.is_paid,
            correlation_id=correlation_id,
        ))

    def log_budget_updated(
        self,
        monthly_limit: Decimal,
        savings_goal: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.budget_updated(
            monthly_limit=monthly_limit,
            savings_goal=savings_goal,
            correlation_id=correlation_id,
        ))

    def log_preferences_updated(
        self,
        currency: str,
        use_biometrics: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.preferences_updated(
            currency=currency,
            use_biometrics=use_biometrics,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., marking a bill paid).
    Pass it through all subsequent operations.
    """
    return uuid4()
