"""
Main Orchestrator for WiseVault

This module ties together all the components and defines the
user-facing flows:
1. Transactions (add from form, delete)
2. Bills (add from form, edit, mark paid/unpaid, delete)
3. Settings (budget targets, preferences, export, clear all data)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Raw form input only reaches the ledger after it validates
- Invalid input is dropped silently; the caller gets None back
- Every ledger change is audited, including the ones the ledger makes
  on its own (a bill going unpaid when its payment is deleted)
- When persistence is configured, the ledger is saved after every action

All flows share one LedgerStore and one LedgerAuditor per session.
"""

from contextlib import contextmanager, nullcontext
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Union
from uuid import UUID

from wisevault.audit import AuditLogger, create_correlation_id, get_logger
from wisevault.config import BudgetDefaults, get_settings
from wisevault.ledger import LedgerChange, LedgerStore
from wisevault.models.audit import AuditEvent, AuditEventBuilder
from wisevault.models.ledger import (
    Bill,
    Budget,
    Currency,
    Preferences,
    Transaction,
    TransactionType,
)
from wisevault.services.export import export_ledger
from wisevault.services.storage import (
    InMemoryAuditStorage,
    JsonFileLedgerStorage,
    LedgerStorageInterface,
    StorageError,
)
from wisevault.validation import (
    BillForm,
    BudgetSettingsForm,
    TransactionForm,
    parse_form,
)


logger = get_logger(__name__)


class LedgerAuditor:
    """
    Store listener that turns every ledger change into an audit event.

    Flows wrap each user action in auditor.action() so that all events
    caused by one action share a correlation id.
    """

    def __init__(self, audit_logger: AuditLogger):
        self._audit_logger = audit_logger
        self._correlation_id: Optional[UUID] = None

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @contextmanager
    def action(self, correlation_id: Optional[UUID] = None) -> Iterator[UUID]:
        previous = self._correlation_id
        self._correlation_id = correlation_id or create_correlation_id()
        try:
            yield self._correlation_id
        finally:
            self._correlation_id = previous

    def __call__(self, change: LedgerChange, payload: dict) -> None:
        audit = self._audit_logger
        cid = self._correlation_id

        if change == LedgerChange.TRANSACTION_ADDED:
            txn = payload["transaction"]
            audit.log_transaction_added(txn, cid, is_user_action=not txn.is_bill_payment)
        elif change == LedgerChange.TRANSACTION_REMOVED:
            txn = payload["transaction"]
            audit.log_transaction_removed(txn, cid, is_user_action=not txn.is_bill_payment)
        elif change == LedgerChange.BILL_ADDED:
            audit.log_bill_added(payload["bill"], cid)
        elif change == LedgerChange.BILL_UPDATED:
            audit.log_bill_updated(payload["bill"], payload["changes"], cid)
        elif change == LedgerChange.BILL_REMOVED:
            audit.log_bill_removed(payload["bill"], cid)
        elif change == LedgerChange.BILL_PAID_TOGGLED:
            audit.log_bill_paid_toggled(payload["bill"], cid)
        elif change == LedgerChange.BUDGET_UPDATED:
            budget = payload["budget"]
            audit.log_budget_updated(budget.monthly_limit, budget.savings_goal, cid)
        elif change == LedgerChange.PREFERENCES_UPDATED:
            prefs = payload["preferences"]
            audit.log_preferences_updated(prefs.currency.value, prefs.use_biometrics, cid)
        elif change == LedgerChange.CLEARED:
            audit.log(AuditEventBuilder.ledger_cleared(
                transaction_count=payload["transactions"],
                bill_count=payload["bills"],
                correlation_id=cid,
            ))
        # RESTORED is audited by load_ledger, which knows where it came from


class _LedgerFlow:
    """Shared plumbing: the store, optional persistence, optional auditing."""

    def __init__(
        self,
        store: LedgerStore,
        storage: Optional[LedgerStorageInterface] = None,
        auditor: Optional[LedgerAuditor] = None,
    ):
        self._store = store
        self._storage = storage
        self._auditor = auditor

    @property
    def store(self) -> LedgerStore:
        return self._store

    def _action(self, correlation_id: Optional[UUID] = None):
        if self._auditor is not None:
            return self._auditor.action(correlation_id)
        return nullcontext(correlation_id)

    def _audit(self, event: AuditEvent) -> None:
        if self._auditor is not None:
            self._auditor.audit_logger.log(event)

    def _persist(self, correlation_id: Optional[UUID] = None) -> bool:
        """
        Save the ledger if a storage backend is configured.

        A failed save is logged and audited but never raised: the
        in-memory ledger stays authoritative for the session.
        """
        if self._storage is None:
            return True

        try:
            self._storage.save_snapshot(self._store.snapshot())
        except StorageError as e:
            logger.error("ledger_save_failed", location=self._storage.location, error=str(e))
            self._audit(AuditEventBuilder.save_failed(
                location=self._storage.location,
                error_message=str(e),
                correlation_id=correlation_id,
            ))
            return False

        self._audit(AuditEventBuilder.ledger_saved(
            location=self._storage.location,
            correlation_id=correlation_id,
        ))
        return True


class TransactionFlow(_LedgerFlow):
    """
    The add-transaction sheet and the transaction list.
    """

    def submit_transaction(
        self,
        amount: Any,
        description: Any,
        type: Union[TransactionType, str] = TransactionType.EXPENSE,
    ) -> Optional[Transaction]:
        """
        Record a transaction from raw form values.

        Returns the new transaction, or None if the form was invalid
        (in which case nothing changes).
        """
        form = parse_form(
            TransactionForm,
            amount=amount,
            description=description,
            type=type,
        )
        if form is None:
            return None

        with self._action() as correlation_id:
            transaction = self._store.add_transaction(
                amount=form.amount,
                description=form.description,
                type=form.type,
            )
            self._persist(correlation_id)
        return transaction

    def delete_transaction(self, transaction_id: UUID) -> bool:
        with self._action() as correlation_id:
            removed = self._store.remove_transaction(transaction_id)
            if removed:
                self._persist(correlation_id)
        return removed

    def delete_transactions_at(self, offsets: Iterable[int]) -> list[Transaction]:
        with self._action() as correlation_id:
            removed = self._store.remove_transactions_at(offsets)
            if removed:
                self._persist(correlation_id)
        return removed


class BillFlow(_LedgerFlow):
    """
    The bills screen: add, edit, remove, and mark paid/unpaid.
    """

    def submit_bill(
        self,
        amount: Any,
        name: Any,
        due_day: Any = 1,
        monthly_recurrence: bool = True,
    ) -> Optional[Bill]:
        """
        Add a bill from raw form values.

        Returns the new bill, or None if the form was invalid.
        """
        form = parse_form(
            BillForm,
            amount=amount,
            name=name,
            due_day=due_day,
            monthly_recurrence=monthly_recurrence,
        )
        if form is None:
            return None

        with self._action() as correlation_id:
            bill = self._store.add_bill(
                name=form.name,
                amount=form.amount,
                due_day=form.due_day,
                monthly_recurrence=form.monthly_recurrence,
            )
            self._persist(correlation_id)
        return bill

    def edit_bill(
        self,
        bill_id: UUID,
        amount: Any,
        name: Any,
        due_day: Any,
        monthly_recurrence: bool,
    ) -> Optional[Bill]:
        """
        Apply an edited bill form.

        Only fields that actually changed are written. Returns None for
        an invalid form or an unknown bill.
        """
        form = parse_form(
            BillForm,
            amount=amount,
            name=name,
            due_day=due_day,
            monthly_recurrence=monthly_recurrence,
        )
        bill = self._store.get_bill(bill_id)
        if form is None or bill is None:
            return None

        changes = {
            field: value
            for field, value in form.model_dump().items()
            if getattr(bill, field) != value
        }
        if not changes:
            return bill

        with self._action() as correlation_id:
            updated = self._store.update_bill(bill_id, **changes)
            self._persist(correlation_id)
        return updated

    def toggle_paid(self, bill_id: UUID) -> Optional[Bill]:
        """
        Mark a bill paid (recording its payment) or unpaid (removing it).
        """
        with self._action() as correlation_id:
            bill = self._store.toggle_bill_paid(bill_id)
            if bill is not None:
                self._persist(correlation_id)
        return bill

    def remove_bill(self, bill_id: UUID) -> bool:
        with self._action() as correlation_id:
            removed = self._store.remove_bill(bill_id)
            if removed:
                self._persist(correlation_id)
        return removed


class SettingsFlow(_LedgerFlow):
    """
    The settings sheet: budget targets, preferences, data management.
    """

    def __init__(
        self,
        store: LedgerStore,
        storage: Optional[LedgerStorageInterface] = None,
        auditor: Optional[LedgerAuditor] = None,
        export_dir: Optional[Union[str, Path]] = None,
    ):
        super().__init__(store, storage, auditor)
        self._export_dir = Path(export_dir) if export_dir else get_settings().storage.export_path

    def submit_settings(
        self,
        monthly_limit: Any,
        savings_goal: Any,
        currency: Union[Currency, str] = Currency.USD,
        use_biometrics: bool = False,
    ) -> Optional[Budget]:
        """
        Save the settings sheet.

        Returns the new budget targets, or None if either amount is invalid
        (nothing is changed in that case).
        """
        form = parse_form(
            BudgetSettingsForm,
            monthly_limit=monthly_limit,
            savings_goal=savings_goal,
            currency=currency,
            use_biometrics=use_biometrics,
        )
        if form is None:
            return None

        with self._action() as correlation_id:
            budget = self._store.set_budget(form.monthly_limit, form.savings_goal)
            prefs = self._store.preferences
            if prefs.currency != form.currency or prefs.use_biometrics != form.use_biometrics:
                self._store.set_preferences(form.currency, form.use_biometrics)
            self._persist(correlation_id)
        return budget

    def export_data(self, directory: Optional[Union[str, Path]] = None) -> list[Path]:
        """Write transactions and bills as CSV files. Returns the paths."""
        target = Path(directory) if directory else self._export_dir
        with self._action() as correlation_id:
            paths = export_ledger(self._store.snapshot(), target)
            self._audit(AuditEventBuilder.data_exported(
                paths=[str(p) for p in paths],
                correlation_id=correlation_id,
            ))
        return paths

    def clear_all_data(self) -> tuple[int, int]:
        """
        Remove every transaction and bill.

        Budget targets and preferences are kept. Returns
        (transactions_removed, bills_removed).
        """
        with self._action() as correlation_id:
            counts = self._store.clear()
            self._persist(correlation_id)
        return counts

    def recent_activity(self, limit: int = 20) -> list[AuditEvent]:
        if self._auditor is None:
            return []
        return self._auditor.audit_logger.recent_events(limit)


def load_ledger(
    storage: Optional[LedgerStorageInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
    defaults: Optional[BudgetDefaults] = None,
) -> LedgerStore:
    """
    Build the session's ledger.

    Restores the stored snapshot when there is one; otherwise starts an
    empty ledger with the configured budget defaults. An unreadable
    snapshot is logged and the session starts empty.
    """
    if storage is not None:
        try:
            snapshot = storage.load_snapshot()
        except StorageError as e:
            logger.error("ledger_load_failed", location=storage.location, error=str(e))
            if audit_logger:
                audit_logger.log_error(
                    error_type="ledger_load_failed",
                    error_message=str(e),
                    details={"location": storage.location},
                )
            snapshot = None

        if snapshot is not None:
            if audit_logger:
                audit_logger.log(AuditEventBuilder.ledger_loaded(
                    location=storage.location,
                    transaction_count=len(snapshot.transactions),
                    bill_count=len(snapshot.bills),
                ))
            return LedgerStore.from_snapshot(snapshot)

    defaults = defaults or BudgetDefaults()
    return LedgerStore(
        budget=Budget(
            monthly_limit=defaults.monthly_limit,
            savings_goal=defaults.savings_goal,
        ),
        preferences=Preferences(currency=defaults.currency),
    )


@dataclass
class AppComponents:
    """Everything one UI session needs."""
    store: LedgerStore
    transactions: TransactionFlow
    bills: BillFlow
    settings: SettingsFlow
    audit_logger: AuditLogger
    storage: Optional[LedgerStorageInterface] = None


def create_app_components(
    use_storage: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured JSON file storage.
                    Storage is only used when WISEVAULT_STORAGE_PATH is set.
    """
    settings = get_settings()
    audit_logger = AuditLogger(InMemoryAuditStorage())

    storage: Optional[LedgerStorageInterface] = None
    if use_storage and settings.storage.persistence_enabled:
        storage = JsonFileLedgerStorage(settings.storage.storage_path)

    store = load_ledger(storage, audit_logger, settings.budget)
    auditor = LedgerAuditor(audit_logger)
    store.subscribe(auditor)

    return AppComponents(
        store=store,
        transactions=TransactionFlow(store, storage, auditor),
        bills=BillFlow(store, storage, auditor),
        settings=SettingsFlow(
            store,
            storage,
            auditor,
            export_dir=settings.storage.export_path,
        ),
        audit_logger=audit_logger,
        storage=storage,
    )
