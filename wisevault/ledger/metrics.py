"""
Derived Metrics

Every figure on the dashboard is a pure function of the current
transactions and bills. Nothing here is cached: the ledger is small and
recomputing on every read means there is nothing to invalidate.

PAID BILLS: a paid bill shows up twice in the raw data - as the bill
(is_paid=True) and as its linked payment transaction. Each figure counts
it exactly once:
- total_expenses counts it through the payment transaction
- balance counts it through the bill, and skips the linked transaction
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from wisevault.models.ledger import (
    Bill,
    Budget,
    LedgerSummary,
    Transaction,
    TransactionType,
)


ZERO = Decimal("0")


def _sum(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


def total_income(transactions: Iterable[Transaction]) -> Decimal:
    return _sum(t.amount for t in transactions if t.type == TransactionType.INCOME)


def expense_transactions_total(transactions: Iterable[Transaction]) -> Decimal:
    """All expense transactions, bill payments included."""
    return _sum(t.amount for t in transactions if t.type == TransactionType.EXPENSE)


def unlinked_expenses_total(transactions: Iterable[Transaction]) -> Decimal:
    """Expense transactions that are not payments of a bill."""
    return _sum(
        t.amount
        for t in transactions
        if t.type == TransactionType.EXPENSE and t.bill_id is None
    )


def unpaid_bills_total(bills: Iterable[Bill]) -> Decimal:
    return _sum(b.amount for b in bills if not b.is_paid)


def paid_bills_total(bills: Iterable[Bill]) -> Decimal:
    return _sum(b.amount for b in bills if b.is_paid)


def total_expenses(
    transactions: Iterable[Transaction],
    bills: Iterable[Bill],
) -> Decimal:
    """Recorded expenses plus everything still owed on unpaid bills."""
    return expense_transactions_total(transactions) + unpaid_bills_total(bills)


def balance(
    transactions: Iterable[Transaction],
    bills: Iterable[Bill],
) -> Decimal:
    """Income minus ordinary expenses minus paid bills."""
    transactions = list(transactions)
    return (
        total_income(transactions)
        - unlinked_expenses_total(transactions)
        - paid_bills_total(bills)
    )


def after_bills(
    transactions: Iterable[Transaction],
    bills: Iterable[Bill],
) -> Decimal:
    """What the balance would be once every unpaid bill is paid."""
    bills = list(bills)
    return balance(transactions, bills) - unpaid_bills_total(bills)


def total_spent_this_month(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
) -> Decimal:
    """
    Sum of expenses dated in the same calendar month and year as today.

    Uses the local calendar of each transaction's naive timestamp.
    """
    today = today or date.today()
    return _sum(
        t.amount
        for t in transactions
        if t.type == TransactionType.EXPENSE
        and t.date.year == today.year
        and t.date.month == today.month
    )


def monthly_spending(
    transactions: Iterable[Transaction],
) -> dict[tuple[int, int], Decimal]:
    """Expense totals keyed by (year, month), oldest month first."""
    totals: dict[tuple[int, int], Decimal] = defaultdict(lambda: ZERO)
    for t in transactions:
        if t.type == TransactionType.EXPENSE:
            totals[(t.date.year, t.date.month)] += t.amount
    return dict(sorted(totals.items()))


def budget_overview(
    targets: Budget,
    transactions: Iterable[Transaction],
    bills: Iterable[Bill],
    today: Optional[date] = None,
) -> Budget:
    """
    Budget as the dashboard shows it.

    Targets come from the user; spent is this month's expenses and
    saved_amount is total income minus total expenses.
    """
    transactions = list(transactions)
    bills = list(bills)
    return targets.model_copy(update={
        "spent": total_spent_this_month(transactions, today),
        "saved_amount": total_income(transactions) - total_expenses(transactions, bills),
    })


def summarize(
    transactions: Iterable[Transaction],
    bills: Iterable[Bill],
    targets: Optional[Budget] = None,
    today: Optional[date] = None,
) -> LedgerSummary:
    """Compute every dashboard figure from one consistent snapshot."""
    transactions = list(transactions)
    bills = list(bills)
    current_balance = balance(transactions, bills)
    unpaid = unpaid_bills_total(bills)

    return LedgerSummary(
        total_income=total_income(transactions),
        total_expenses=total_expenses(transactions, bills),
        unpaid_bills_total=unpaid,
        paid_bills_total=paid_bills_total(bills),
        balance=current_balance,
        after_bills=current_balance - unpaid,
        total_spent_this_month=total_spent_this_month(transactions, today),
        budget=budget_overview(targets or Budget(), transactions, bills, today),
    )
