"""
Ledger Store

The single in-memory container for a session's transactions and bills.

DESIGN DECISION: The store is an explicit object handed to every flow and
page that needs it, never a module-level singleton. Pages that want to
react to changes subscribe to it.

The store trusts its callers: raw user input is validated by the forms
layer before it gets here, so every public operation is total. Unknown
ids are no-ops that report False/None rather than raising.

BILL PAYMENTS: a paid bill always has exactly one linked expense
transaction (Transaction.bill_id == Bill.id). Toggling the bill, removing
the payment, or removing the bill keeps that true.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, Optional
from uuid import UUID

from wisevault.ledger import metrics
from wisevault.models.ledger import (
    Bill,
    Budget,
    Currency,
    LedgerSnapshot,
    LedgerSummary,
    Preferences,
    Transaction,
    TransactionType,
)


class LedgerChange(str, Enum):
    """Names of the notifications a store sends to its listeners."""
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_REMOVED = "transaction_removed"
    BILL_ADDED = "bill_added"
    BILL_UPDATED = "bill_updated"
    BILL_REMOVED = "bill_removed"
    BILL_PAID_TOGGLED = "bill_paid_toggled"
    BUDGET_UPDATED = "budget_updated"
    PREFERENCES_UPDATED = "preferences_updated"
    CLEARED = "cleared"
    RESTORED = "restored"


Listener = Callable[[LedgerChange, dict], None]

_UPDATABLE_BILL_FIELDS = frozenset({"name", "amount", "due_day", "monthly_recurrence"})


class LedgerStore:
    """
    Ordered transactions and bills plus budget targets and preferences.

    Both collections keep insertion order. Read access returns tuples so
    callers cannot mutate the lists behind the store's back.
    """

    def __init__(
        self,
        budget: Optional[Budget] = None,
        preferences: Optional[Preferences] = None,
    ):
        self._transactions: list[Transaction] = []
        self._bills: list[Bill] = []
        self._budget = budget or Budget()
        self._preferences = preferences or Preferences()
        self._listeners: list[Listener] = []

    @classmethod
    def from_snapshot(cls, snapshot: LedgerSnapshot) -> "LedgerStore":
        store = cls()
        store._load(snapshot)
        return store

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    @property
    def bills(self) -> tuple[Bill, ...]:
        return tuple(self._bills)

    @property
    def budget(self) -> Budget:
        return self._budget

    @property
    def preferences(self) -> Preferences:
        return self._preferences

    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        return next((t for t in self._transactions if t.id == transaction_id), None)

    def get_bill(self, bill_id: UUID) -> Optional[Bill]:
        return next((b for b in self._bills if b.id == bill_id), None)

    def payment_for(self, bill_id: UUID) -> Optional[Transaction]:
        """The first transaction recorded as a payment of this bill."""
        return next((t for t in self._transactions if t.bill_id == bill_id), None)

    def bills_by_due_day(self) -> list[Bill]:
        """Bills ordered by due day; ties keep insertion order."""
        return sorted(self._bills, key=lambda b: b.due_day)

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, change: LedgerChange, **payload) -> None:
        for listener in list(self._listeners):
            listener(change, payload)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def add_transaction(
        self,
        amount: Decimal,
        description: str,
        type: TransactionType,
        date: Optional[datetime] = None,
        bill_id: Optional[UUID] = None,
    ) -> Transaction:
        fields = {
            "amount": amount,
            "description": description,
            "type": type,
            "bill_id": bill_id,
        }
        if date is not None:
            fields["date"] = date
        transaction = Transaction(**fields)
        self._transactions.append(transaction)
        self._notify(LedgerChange.TRANSACTION_ADDED, transaction=transaction)
        return transaction

    def remove_transaction(self, transaction_id: UUID) -> bool:
        for index, transaction in enumerate(self._transactions):
            if transaction.id == transaction_id:
                self._remove_transaction_at(index)
                return True
        return False

    def remove_transactions_at(self, offsets: Iterable[int]) -> list[Transaction]:
        """
        Remove transactions by list position, as a swipe-to-delete does.

        Out-of-range offsets are ignored. Returns the removed transactions
        in their original order.
        """
        size = len(self._transactions)
        valid = sorted({i for i in offsets if 0 <= i < size}, reverse=True)
        removed = [self._remove_transaction_at(i) for i in valid]
        removed.reverse()
        return removed

    def _remove_transaction_at(self, index: int) -> Transaction:
        transaction = self._transactions.pop(index)
        self._notify(LedgerChange.TRANSACTION_REMOVED, transaction=transaction)

        # Deleting a bill's payment means the bill is no longer paid
        if transaction.bill_id is not None:
            bill = self.get_bill(transaction.bill_id)
            if bill is not None and bill.is_paid and self.payment_for(bill.id) is None:
                bill.is_paid = False
                self._notify(LedgerChange.BILL_PAID_TOGGLED, bill=bill, payment=None)

        return transaction

    # ------------------------------------------------------------------
    # Bills
    # ------------------------------------------------------------------

    def add_bill(
        self,
        name: str,
        amount: Decimal,
        due_day: int = 1,
        monthly_recurrence: bool = True,
    ) -> Bill:
        bill = Bill(
            name=name,
            amount=amount,
            due_day=due_day,
            monthly_recurrence=monthly_recurrence,
        )
        self._bills.append(bill)
        self._notify(LedgerChange.BILL_ADDED, bill=bill)
        return bill

    def update_bill(self, bill_id: UUID, **changes) -> Optional[Bill]:
        """
        Update bill fields in place.

        Only name, amount, due_day and monthly_recurrence can be changed
        here; use toggle_bill_paid for is_paid. A paid bill's payment
        transaction is rewritten to match the new name and amount.
        """
        unknown = set(changes) - _UPDATABLE_BILL_FIELDS
        if unknown:
            raise TypeError(f"Cannot update bill field(s): {sorted(unknown)}")

        bill = self.get_bill(bill_id)
        if bill is None:
            return None

        # Validate the whole change set, and the rewritten payment, before
        # touching the live objects
        updated = Bill.model_validate({**bill.model_dump(), **changes})
        payment_index: Optional[int] = None
        payment: Optional[Transaction] = None
        if bill.is_paid:
            for index, transaction in enumerate(self._transactions):
                if transaction.bill_id == bill.id:
                    payment_index = index
                    payment = Transaction.model_validate({
                        **transaction.model_dump(),
                        "amount": updated.amount,
                        "description": updated.payment_description,
                    })
                    break

        for field, value in changes.items():
            setattr(bill, field, value)
        if payment_index is not None:
            self._transactions[payment_index] = payment

        self._notify(LedgerChange.BILL_UPDATED, bill=bill, changes=changes)
        return bill

    def remove_bill(self, bill_id: UUID) -> bool:
        """
        Remove a bill.

        Payments already made stay in the transaction history as plain
        expenses (their link is cleared), so the balance does not move.
        """
        for index, bill in enumerate(self._bills):
            if bill.id == bill_id:
                del self._bills[index]
                self._unlink_payments(bill_id)
                self._notify(LedgerChange.BILL_REMOVED, bill=bill)
                return True
        return False

    def _unlink_payments(self, bill_id: UUID) -> None:
        for index, transaction in enumerate(self._transactions):
            if transaction.bill_id == bill_id:
                self._transactions[index] = transaction.model_copy(
                    update={"bill_id": None}
                )

    def toggle_bill_paid(self, bill_id: UUID) -> Optional[Bill]:
        """
        Flip a bill between paid and unpaid.

        Paid: appends an expense "Bill Payment: <name>" for the bill amount.
        Unpaid: removes the first transaction linked to this bill.
        """
        bill = self.get_bill(bill_id)
        if bill is None:
            return None

        payment: Optional[Transaction] = None

        if not bill.is_paid:
            # Built before the flag flips so a failure leaves the bill unpaid
            payment = Transaction(
                amount=bill.amount,
                description=bill.payment_description,
                type=TransactionType.EXPENSE,
                bill_id=bill.id,
            )
            bill.is_paid = True
            self._transactions.append(payment)
            self._notify(LedgerChange.TRANSACTION_ADDED, transaction=payment)
        else:
            bill.is_paid = False
            for index, transaction in enumerate(self._transactions):
                if transaction.bill_id == bill.id:
                    payment = self._transactions.pop(index)
                    self._notify(LedgerChange.TRANSACTION_REMOVED, transaction=payment)
                    break

        self._notify(LedgerChange.BILL_PAID_TOGGLED, bill=bill, payment=payment)
        return bill

    # ------------------------------------------------------------------
    # Budget and preferences
    # ------------------------------------------------------------------

    def set_budget(self, monthly_limit: Decimal, savings_goal: Decimal) -> Budget:
        self._budget = Budget(monthly_limit=monthly_limit, savings_goal=savings_goal)
        self._notify(LedgerChange.BUDGET_UPDATED, budget=self._budget)
        return self._budget

    def set_preferences(self, currency: Currency, use_biometrics: bool) -> Preferences:
        self._preferences = Preferences(currency=currency, use_biometrics=use_biometrics)
        self._notify(LedgerChange.PREFERENCES_UPDATED, preferences=self._preferences)
        return self._preferences

    # ------------------------------------------------------------------
    # Whole-ledger operations
    # ------------------------------------------------------------------

    def clear(self) -> tuple[int, int]:
        """
        Drop every transaction and bill. Budget and preferences are kept.

        Returns (transactions_removed, bills_removed).
        """
        counts = (len(self._transactions), len(self._bills))
        self._transactions.clear()
        self._bills.clear()
        self._notify(LedgerChange.CLEARED, transactions=counts[0], bills=counts[1])
        return counts

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            transactions=list(self._transactions),
            bills=[bill.model_copy() for bill in self._bills],
            budget=self._budget.model_copy(),
            preferences=self._preferences.model_copy(),
        )

    def restore(self, snapshot: LedgerSnapshot) -> None:
        self._load(snapshot)
        self._notify(LedgerChange.RESTORED, snapshot=snapshot)

    def _load(self, snapshot: LedgerSnapshot) -> None:
        self._transactions = list(snapshot.transactions)
        self._bills = [bill.model_copy() for bill in snapshot.bills]
        self._budget = snapshot.budget.model_copy(
            update={"spent": Decimal("0"), "saved_amount": Decimal("0")}
        )
        self._preferences = snapshot.preferences.model_copy()

    # ------------------------------------------------------------------
    # Derived figures (recomputed on every read)
    # ------------------------------------------------------------------

    @property
    def total_income(self) -> Decimal:
        return metrics.total_income(self._transactions)

    @property
    def total_expenses(self) -> Decimal:
        return metrics.total_expenses(self._transactions, self._bills)

    @property
    def unpaid_bills_total(self) -> Decimal:
        return metrics.unpaid_bills_total(self._bills)

    @property
    def balance(self) -> Decimal:
        return metrics.balance(self._transactions, self._bills)

    @property
    def after_bills(self) -> Decimal:
        return metrics.after_bills(self._transactions, self._bills)

    def total_spent_this_month(self, today: Optional[date] = None) -> Decimal:
        return metrics.total_spent_this_month(self._transactions, today)

    def summary(self, today: Optional[date] = None) -> LedgerSummary:
        return metrics.summarize(self._transactions, self._bills, self._budget, today)
