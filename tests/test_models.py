"""
Tests for WiseVault

Test strategy:
1. Unit tests for individual components (models, metrics, forms)
2. Integration tests for flows (in-memory and tmp_path storage)
3. No network, no Streamlit runtime in tests
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from wisevault.models.ledger import (
    BILL_PAYMENT_PREFIX,
    Bill,
    Budget,
    Currency,
    LedgerSnapshot,
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


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_creation(self):
        """Test Transaction model creation with defaults."""
        txn = Transaction(
            amount=Decimal("12.50"),
            description="Coffee",
            type=TransactionType.EXPENSE,
        )
        assert txn.amount == Decimal("12.50")
        assert txn.bill_id is None
        assert txn.date is not None
        assert txn.is_income is False

    def test_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        txn = Transaction(
            amount=Decimal("1"),
            description="  Salary  ",
            type=TransactionType.INCOME,
        )
        assert txn.description == "Salary"

    def test_transaction_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in (Decimal("0"), Decimal("-5")):
            with pytest.raises(ValueError):
                Transaction(amount=amount, description="x", type=TransactionType.EXPENSE)

    def test_transaction_rejects_empty_description(self):
        """Test that a blank description is rejected."""
        with pytest.raises(ValueError):
            Transaction(amount=Decimal("1"), description="   ", type=TransactionType.EXPENSE)

    def test_transaction_is_immutable(self):
        """Test that recorded transactions cannot be edited."""
        txn = Transaction(amount=Decimal("1"), description="x", type=TransactionType.EXPENSE)
        with pytest.raises(ValidationError):
            txn.amount = Decimal("2")

    def test_signed_amount(self):
        """Test that the sign comes from the type."""
        income = Transaction(amount=Decimal("10"), description="a", type=TransactionType.INCOME)
        expense = Transaction(amount=Decimal("10"), description="b", type=TransactionType.EXPENSE)
        assert income.signed_amount == Decimal("10")
        assert expense.signed_amount == Decimal("-10")

    def test_is_bill_payment(self):
        """Test that a bill link marks a payment."""
        txn = Transaction(
            amount=Decimal("10"),
            description="Bill Payment: Rent",
            type=TransactionType.EXPENSE,
            bill_id=uuid4(),
        )
        assert txn.is_bill_payment is True


class TestBillModel:
    """Tests for the Bill model."""

    def test_bill_defaults(self):
        """Test Bill model defaults."""
        bill = Bill(name="Rent", amount=Decimal("500"))
        assert bill.due_day == 1
        assert bill.is_paid is False
        assert bill.monthly_recurrence is True

    def test_bill_due_day_bounds(self):
        """Test due day must be between 1 and 31."""
        for day in (0, 32):
            with pytest.raises(ValueError):
                Bill(name="Rent", amount=Decimal("500"), due_day=day)
        assert Bill(name="Rent", amount=Decimal("500"), due_day=31).due_day == 31

    def test_bill_assignment_is_validated(self):
        """Test that in-place edits are validated."""
        bill = Bill(name="Rent", amount=Decimal("500"))
        with pytest.raises(ValidationError):
            bill.amount = Decimal("-1")

    def test_bill_id_is_frozen(self):
        """Test that a bill id cannot be reassigned."""
        bill = Bill(name="Rent", amount=Decimal("500"))
        with pytest.raises(ValidationError):
            bill.id = uuid4()

    def test_payment_description(self):
        """Test the description used for payment transactions."""
        bill = Bill(name="Internet", amount=Decimal("60"))
        assert bill.payment_description == f"{BILL_PAYMENT_PREFIX}Internet"
        assert bill.payment_description == "Bill Payment: Internet"


class TestBudgetModel:
    """Tests for Budget progress figures."""

    def test_budget_defaults(self):
        """Test default targets."""
        budget = Budget()
        assert budget.monthly_limit == Decimal("2000")
        assert budget.savings_goal == Decimal("5000")

    def test_spending_progress(self):
        """Test spending progress ratio."""
        budget = Budget(monthly_limit=Decimal("200"), spent=Decimal("50"))
        assert budget.spending_progress == 0.25
        assert budget.is_near_limit is False

    def test_progress_is_clamped(self):
        """Test progress never leaves [0, 1]."""
        over = Budget(monthly_limit=Decimal("100"), spent=Decimal("250"))
        negative = Budget(savings_goal=Decimal("100"), saved_amount=Decimal("-40"))
        assert over.spending_progress == 1.0
        assert negative.savings_progress == 0.0

    def test_near_limit_threshold(self):
        """Test the warning starts at 90% of the limit."""
        assert Budget(monthly_limit=Decimal("100"), spent=Decimal("90")).is_near_limit
        assert not Budget(monthly_limit=Decimal("100"), spent=Decimal("89.99")).is_near_limit

    def test_zero_target(self):
        """Test progress against a zero target."""
        assert Budget(monthly_limit=Decimal("0")).spending_progress == 0.0
        assert Budget(monthly_limit=Decimal("0"), spent=Decimal("1")).spending_progress == 1.0

    def test_negative_target_rejected(self):
        """Test that targets cannot be negative."""
        with pytest.raises(ValueError):
            Budget(monthly_limit=Decimal("-1"))


class TestPreferencesAndCurrency:
    """Tests for preferences and currency display."""

    def test_currency_symbols(self):
        """Test currency labels as shown in the picker."""
        assert Currency.USD.label == "USD ($)"
        assert Currency.EUR.label == "EUR (€)"
        assert Currency.GBP.symbol == "£"
        assert Currency.JPY.symbol == "¥"

    def test_preferences_defaults(self):
        """Test default preferences."""
        prefs = Preferences()
        assert prefs.currency == Currency.USD
        assert prefs.use_biometrics is False

    def test_snapshot_json_round_trip(self):
        """Test a snapshot survives JSON serialization."""
        bill = Bill(name="Rent", amount=Decimal("500"), is_paid=True)
        snapshot = LedgerSnapshot(
            transactions=[
                Transaction(
                    amount=Decimal("500"),
                    description=bill.payment_description,
                    type=TransactionType.EXPENSE,
                    bill_id=bill.id,
                ),
            ],
            bills=[bill],
            preferences=Preferences(currency=Currency.GBP),
        )
        restored = LedgerSnapshot.model_validate_json(snapshot.model_dump_json())
        assert restored.transactions[0].bill_id == bill.id
        assert restored.bills[0].is_paid is True
        assert restored.preferences.currency == Currency.GBP


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Expense recorded: Coffee",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.BILL_ADDED,
            description="Bill added: Rent",
            details={"amount": "500"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "bill_added"
        assert log_dict["details"]["amount"] == "500"
        assert log_dict["entity_id"] is None

    def test_audit_event_builder_transaction_added(self):
        """Test AuditEventBuilder.transaction_added."""
        correlation_id = uuid4()
        transaction_id = uuid4()

        event = AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            description="Salary",
            amount=Decimal("1000"),
            transaction_type="income",
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.entity_id == transaction_id
        assert event.correlation_id == correlation_id
        assert event.description == "Income recorded: Salary"
        assert event.is_user_action is True

    def test_audit_event_builder_bill_paid_toggled(self):
        """Test paid and unpaid map to different event types."""
        bill_id = uuid4()
        paid = AuditEventBuilder.bill_paid_toggled(bill_id=bill_id, name="Rent", is_paid=True)
        unpaid = AuditEventBuilder.bill_paid_toggled(bill_id=bill_id, name="Rent", is_paid=False)
        assert paid.event_type == AuditEventType.BILL_MARKED_PAID
        assert unpaid.event_type == AuditEventType.BILL_MARKED_UNPAID

    def test_audit_event_builder_severities(self):
        """Test severities of data management events."""
        assert AuditEventBuilder.ledger_saved("memory").severity == AuditSeverity.DEBUG
        assert AuditEventBuilder.save_failed("f.json", "disk full").severity == AuditSeverity.ERROR
        assert AuditEventBuilder.ledger_cleared(1, 2).severity == AuditSeverity.WARNING


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
