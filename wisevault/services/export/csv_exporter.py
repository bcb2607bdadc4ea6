"""
CSV export for WiseVault

Transactions columns: id, date, type, description, amount, bill_id
Bills columns: id, name, amount, due_day, is_paid, monthly_recurrence
"""

import csv
import io
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

from wisevault.models.ledger import Bill, LedgerSnapshot, Transaction


TRANSACTION_COLUMNS = ["id", "date", "type", "description", "amount", "bill_id"]
BILL_COLUMNS = ["id", "name", "amount", "due_day", "is_paid", "monthly_recurrence"]


def write_transactions_csv(transactions: Iterable[Transaction], stream: TextIO) -> int:
    """Write transactions to an open text stream. Returns rows written."""
    writer = csv.writer(stream)
    writer.writerow(TRANSACTION_COLUMNS)
    count = 0
    for t in transactions:
        writer.writerow([
            str(t.id),
            t.date.isoformat(timespec="seconds"),
            t.type.value,
            t.description,
            str(t.amount),
            str(t.bill_id) if t.bill_id else "",
        ])
        count += 1
    return count


def write_bills_csv(bills: Iterable[Bill], stream: TextIO) -> int:
    """Write bills to an open text stream. Returns rows written."""
    writer = csv.writer(stream)
    writer.writerow(BILL_COLUMNS)
    count = 0
    for b in bills:
        writer.writerow([
            str(b.id),
            b.name,
            str(b.amount),
            b.due_day,
            b.is_paid,
            b.monthly_recurrence,
        ])
        count += 1
    return count


def transactions_to_csv(transactions: Iterable[Transaction]) -> str:
    """CSV text for a download button."""
    buffer = io.StringIO()
    write_transactions_csv(transactions, buffer)
    return buffer.getvalue()


def bills_to_csv(bills: Iterable[Bill]) -> str:
    buffer = io.StringIO()
    write_bills_csv(bills, buffer)
    return buffer.getvalue()


def export_transactions_to_csv(
    transactions: Iterable[Transaction],
    filepath: Union[str, Path],
) -> int:
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        return write_transactions_csv(transactions, f)


def export_bills_to_csv(bills: Iterable[Bill], filepath: Union[str, Path]) -> int:
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        return write_bills_csv(bills, f)


def export_ledger(
    snapshot: LedgerSnapshot,
    directory: Union[str, Path],
    stamp: Optional[datetime] = None,
) -> list[Path]:
    """
    Export a whole ledger as two timestamped CSV files.

    Creates the directory if needed. Returns the paths written.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    suffix = (stamp or datetime.now()).strftime("%Y%m%d-%H%M%S")

    transactions_path = directory / f"transactions-{suffix}.csv"
    bills_path = directory / f"bills-{suffix}.csv"
    export_transactions_to_csv(snapshot.transactions, transactions_path)
    export_bills_to_csv(snapshot.bills, bills_path)
    return [transactions_path, bills_path]
