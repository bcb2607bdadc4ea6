"""
Integration tests for the user-facing flows.
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from wisevault.audit import AuditLogger
from wisevault.config import BudgetDefaults, get_settings
from wisevault.ledger import LedgerStore
from wisevault.models.audit import AuditEventType
from wisevault.models.ledger import MAX_BILL_NAME_LENGTH, Currency, TransactionType
from wisevault.orchestrator import (
    BillFlow,
    LedgerAuditor,
    SettingsFlow,
    TransactionFlow,
    create_app_components,
    load_ledger,
)
from wisevault.services.storage import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    StorageError,
)


class BrokenLedgerStorage(InMemoryLedgerStorage):
    @property
    def location(self) -> str:
        return "broken"

    def save_snapshot(self, snapshot):
        raise StorageError("disk full")


@pytest.fixture
def audit_logger():
    return AuditLogger(InMemoryAuditStorage())


@pytest.fixture
def auditor(audit_logger):
    return LedgerAuditor(audit_logger)


@pytest.fixture
def store(auditor):
    store = LedgerStore()
    store.subscribe(auditor)
    return store


@pytest.fixture
def storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def flows(store, storage, auditor, tmp_path):
    """Transaction, bill and settings flows sharing one auditor."""
    return (
        TransactionFlow(store, storage, auditor),
        BillFlow(store, storage, auditor),
        SettingsFlow(store, storage, auditor, export_dir=tmp_path / "exports"),
    )


def _event_types(audit_logger):
    return [e.event_type for e in reversed(audit_logger.recent_events(1000))]


class TestTransactionFlow:
    """Tests for the add-transaction flow."""

    def test_submit_valid(self, flows, store, storage):
        """Test a valid form is recorded and saved."""
        transactions, _, _ = flows
        txn = transactions.submit_transaction(" 25.00 ", "Groceries", "expense")

        assert txn in store.transactions
        assert store.total_expenses == Decimal("25.00")
        assert storage.load_snapshot().transactions == [txn]

    def test_submit_non_numeric_is_ignored(self, flows, store, audit_logger):
        """Test a bad amount changes nothing and logs no event."""
        transactions, _, _ = flows
        assert transactions.submit_transaction("twelve", "Lunch") is None
        assert store.transactions == ()
        assert audit_logger.recent_events() == []

    def test_delete(self, flows, store):
        """Test deleting by id and by position."""
        transactions, _, _ = flows
        a = transactions.submit_transaction("1", "a")
        transactions.submit_transaction("2", "b")

        assert transactions.delete_transaction(a.id) is True
        assert transactions.delete_transaction(uuid4()) is False
        assert [t.description for t in transactions.delete_transactions_at([0])] == ["b"]
        assert store.transactions == ()

    def test_events_are_audited(self, flows, audit_logger):
        """Test an add is audited and the save is recorded."""
        transactions, _, _ = flows
        transactions.submit_transaction("5", "Snack")
        assert _event_types(audit_logger) == [
            AuditEventType.TRANSACTION_ADDED,
            AuditEventType.LEDGER_SAVED,
        ]


class TestBillFlow:
    """Tests for the bill flows."""

    def test_worked_example(self, flows, store):
        """Test income 1000, rent 500 paid then unpaid."""
        transactions, bills, _ = flows
        transactions.submit_transaction("1000", "Salary", TransactionType.INCOME)
        rent = bills.submit_bill("500", "Rent", 1)

        bills.toggle_paid(rent.id)
        assert len(store.transactions) == 2
        assert store.balance == Decimal("500")

        bills.toggle_paid(rent.id)
        assert len(store.transactions) == 1
        assert store.balance == Decimal("1000")

    def test_submit_invalid_bill(self, flows, store):
        """Test an invalid bill form is ignored."""
        _, bills, _ = flows
        assert bills.submit_bill("abc", "Rent") is None
        assert bills.submit_bill("100", "Rent", due_day=0) is None
        assert store.bills == ()

    def test_toggle_shares_correlation_id(self, flows, audit_logger):
        """Test the payment and the bill change are one action."""
        _, bills, _ = flows
        bill = bills.submit_bill("60", "Internet")
        bills.toggle_paid(bill.id)

        paid_event = next(
            e for e in audit_logger.recent_events(100)
            if e.event_type == AuditEventType.BILL_MARKED_PAID
        )
        related = audit_logger.storage.get_events_by_correlation_id(paid_event.correlation_id)
        types = [e.event_type for e in related]
        assert AuditEventType.TRANSACTION_ADDED in types
        payment_event = related[types.index(AuditEventType.TRANSACTION_ADDED)]
        assert payment_event.is_user_action is False

    def test_edit_bill(self, flows, store):
        """Test editing writes only the changed fields."""
        _, bills, _ = flows
        bill = bills.submit_bill("30", "Phone", 3)
        bills.toggle_paid(bill.id)

        updated = bills.edit_bill(bill.id, "35", "Phone", 3, True)

        assert updated.amount == Decimal("35")
        assert store.payment_for(bill.id).amount == Decimal("35")

    def test_edit_without_changes(self, flows, audit_logger):
        """Test an unchanged form is not audited."""
        _, bills, _ = flows
        bill = bills.submit_bill("30", "Phone", 3)
        before = len(audit_logger.recent_events(100))
        assert bills.edit_bill(bill.id, "30", "Phone", 3, True) is bill
        assert len(audit_logger.recent_events(100)) == before

    def test_edit_invalid_or_unknown(self, flows):
        """Test bad edits return None."""
        _, bills, _ = flows
        bill = bills.submit_bill("30", "Phone")
        assert bills.edit_bill(bill.id, "-1", "Phone", 1, True) is None
        assert bills.edit_bill(uuid4(), "30", "Phone", 1, True) is None
        assert bill.amount == Decimal("30")

    def test_remove_bill_keeps_balance(self, flows, store):
        """Test removing a paid bill leaves the balance alone."""
        transactions, bills, _ = flows
        transactions.submit_transaction("1000", "Salary", "income")
        bill = bills.submit_bill("500", "Rent")
        bills.toggle_paid(bill.id)

        assert bills.remove_bill(bill.id) is True
        assert store.balance == Decimal("500")

    def test_overlong_bill_name_is_ignored(self, flows, store):
        """Test a name too long for its payment description never becomes a bill."""
        _, bills, _ = flows
        assert bills.submit_bill("50", "N" * (MAX_BILL_NAME_LENGTH + 4)) is None
        assert store.bills == ()

    def test_longest_name_pays_and_unpays(self, flows, store):
        """Test a bill with the longest allowed name keeps the paid invariant."""
        _, bills, _ = flows
        bill = bills.submit_bill("50", "N" * MAX_BILL_NAME_LENGTH)

        bills.toggle_paid(bill.id)
        assert bill.is_paid is True
        assert store.payment_for(bill.id).description == bill.payment_description

        bills.toggle_paid(bill.id)
        assert bill.is_paid is False
        assert store.transactions == ()


class TestSettingsFlow:
    """Tests for the settings flow."""

    def test_submit_settings(self, flows, store, audit_logger):
        """Test targets and preferences are saved."""
        _, _, settings = flows
        budget = settings.submit_settings("1500", "2500", "EUR", True)

        assert budget.monthly_limit == Decimal("1500")
        assert store.preferences.currency == Currency.EUR
        assert AuditEventType.PREFERENCES_UPDATED in _event_types(audit_logger)

    def test_unchanged_preferences_not_rewritten(self, flows, audit_logger):
        """Test only the budget is audited when preferences did not change."""
        _, _, settings = flows
        settings.submit_settings("100", "200")
        assert AuditEventType.PREFERENCES_UPDATED not in _event_types(audit_logger)
        assert AuditEventType.BUDGET_UPDATED in _event_types(audit_logger)

    def test_invalid_settings_ignored(self, flows, store):
        """Test a bad target changes nothing."""
        _, _, settings = flows
        assert settings.submit_settings("abc", "100") is None
        assert store.budget.monthly_limit == Decimal("2000")

    def test_export_data(self, flows, audit_logger, tmp_path):
        """Test export writes both files and is audited."""
        transactions, _, settings = flows
        transactions.submit_transaction("5", "Snack")

        paths = settings.export_data()

        assert all(p.exists() for p in paths)
        assert paths[0].parent == tmp_path / "exports"
        assert audit_logger.recent_events(1)[0].event_type == AuditEventType.DATA_EXPORTED

    def test_clear_all_data(self, flows, store, storage):
        """Test clearing empties the ledger and saves it."""
        transactions, bills, settings = flows
        transactions.submit_transaction("5", "Snack")
        bills.submit_bill("500", "Rent")

        assert settings.clear_all_data() == (1, 1)
        assert store.transactions == ()
        assert storage.load_snapshot().bills == []

    def test_recent_activity(self, flows):
        """Test the activity list is newest first."""
        transactions, _, settings = flows
        transactions.submit_transaction("5", "Snack")
        activity = settings.recent_activity(1)
        assert activity[0].event_type == AuditEventType.LEDGER_SAVED


class TestPersistence:
    """Tests for saving and loading the ledger."""

    def test_save_failure_keeps_memory_state(self, store, auditor, audit_logger):
        """Test a failed save is audited and the ledger is unchanged."""
        flow = TransactionFlow(store, BrokenLedgerStorage(), auditor)

        txn = flow.submit_transaction("5", "Snack")

        assert txn in store.transactions
        assert AuditEventType.SAVE_FAILED in _event_types(audit_logger)

    def test_load_from_json_file(self, tmp_path, audit_logger):
        """Test a session picks up where the last one stopped."""
        storage = JsonFileLedgerStorage(tmp_path / "ledger.json")
        first = load_ledger(storage, audit_logger)
        flow = BillFlow(first, storage)
        bill = flow.submit_bill("500", "Rent")
        flow.toggle_paid(bill.id)

        second = load_ledger(storage, audit_logger)

        assert second.get_bill(bill.id).is_paid is True
        assert second.balance == first.balance
        assert _event_types(audit_logger)[-1] == AuditEventType.LEDGER_LOADED

    def test_corrupt_file_starts_empty(self, tmp_path, audit_logger):
        """Test an unreadable snapshot gives an empty ledger with defaults."""
        path = tmp_path / "ledger.json"
        path.write_text("garbage", encoding="utf-8")
        defaults = BudgetDefaults(monthly_limit=Decimal("750"))

        store = load_ledger(JsonFileLedgerStorage(path), audit_logger, defaults)

        assert store.transactions == ()
        assert store.budget.monthly_limit == Decimal("750")
        assert _event_types(audit_logger) == [AuditEventType.SYSTEM_ERROR]

    def test_no_storage_uses_defaults(self):
        """Test a fresh ledger takes the configured defaults."""
        defaults = BudgetDefaults(savings_goal=Decimal("123"), currency=Currency.JPY)
        store = load_ledger(defaults=defaults)
        assert store.budget.savings_goal == Decimal("123")
        assert store.preferences.currency == Currency.JPY

    def test_renamed_paid_bill_reloads(self, tmp_path, audit_logger):
        """Test renaming a paid bill to the longest name still saves a loadable file."""
        storage = JsonFileLedgerStorage(tmp_path / "ledger.json")
        flow = BillFlow(load_ledger(storage, audit_logger), storage)
        bill = flow.submit_bill("500", "Rent")
        flow.toggle_paid(bill.id)
        longest = "R" * MAX_BILL_NAME_LENGTH

        assert flow.edit_bill(bill.id, "500", longest, 1, True) is not None
        assert flow.edit_bill(bill.id, "500", longest + "R", 1, True) is None

        reloaded = load_ledger(storage, audit_logger)
        payment = reloaded.payment_for(bill.id)
        assert reloaded.get_bill(bill.id).name == longest
        assert payment.description == f"Bill Payment: {longest}"
        assert _event_types(audit_logger)[-1] == AuditEventType.LEDGER_LOADED


class TestCreateAppComponents:
    """Tests for the component factory."""

    @pytest.fixture(autouse=True)
    def clean_settings(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("WISEVAULT_STORAGE_PATH", raising=False)
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_session_only_by_default(self):
        """Test no storage is used unless configured."""
        components = create_app_components()
        assert components.storage is None
        components.bills.submit_bill("10", "Gym")
        assert components.audit_logger.recent_events(1)[0].event_type == AuditEventType.BILL_ADDED

    def test_json_storage_when_configured(self, monkeypatch, tmp_path):
        """Test WISEVAULT_STORAGE_PATH turns on the JSON file."""
        path = tmp_path / "ledger.json"
        monkeypatch.setenv("WISEVAULT_STORAGE_PATH", str(path))
        get_settings.cache_clear()

        components = create_app_components()
        components.transactions.submit_transaction("5", "Snack")

        assert isinstance(components.storage, JsonFileLedgerStorage)
        assert path.exists()
        reloaded = create_app_components()
        assert len(reloaded.store.transactions) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
