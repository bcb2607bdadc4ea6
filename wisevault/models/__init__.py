"""
Data Models Package

This package contains all Pydantic models used in WiseVault.
Everything the ledger stores or reports conforms to these schemas.
"""

from wisevault.models.ledger import (
    BILL_PAYMENT_PREFIX,
    MAX_AMOUNT,
    MAX_BILL_NAME_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    NEAR_LIMIT_THRESHOLD,
    Bill,
    Budget,
    Currency,
    LedgerSnapshot,
    LedgerSummary,
    Preferences,
    Transaction,
    TransactionType,
)
from wisevault.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "BILL_PAYMENT_PREFIX",
    "MAX_AMOUNT",
    "MAX_BILL_NAME_LENGTH",
    "MAX_DESCRIPTION_LENGTH",
    "NEAR_LIMIT_THRESHOLD",
    "Bill",
    "Budget",
    "Currency",
    "LedgerSnapshot",
    "LedgerSummary",
    "Preferences",
    "Transaction",
    "TransactionType",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
