"""
Core Data Models for WiseVault

These models define the schemas for everything the ledger holds.
They are designed to:
1. Enforce positive amounts and sane day-of-month values at runtime
2. Be serializable for the optional JSON snapshot and CSV export
3. Keep identity (ids) immutable while allowing the few mutable flags

DESIGN DECISION: Amounts are Decimal magnitudes. The sign of a
transaction is never stored; it comes from its type when aggregating.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


BILL_PAYMENT_PREFIX = "Bill Payment: "

MAX_DESCRIPTION_LENGTH = 200
# A bill name must still fit in its payment's description
MAX_BILL_NAME_LENGTH = MAX_DESCRIPTION_LENGTH - len(BILL_PAYMENT_PREFIX)

# Exclusive upper bound for any amount or budget target
MAX_AMOUNT = Decimal("1000000000000")

# Spending progress at or above this ratio is shown as a warning
NEAR_LIMIT_THRESHOLD = 0.9


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class Currency(str, Enum):
    """
    Display currencies offered on the settings page.

    Cosmetic only: amounts are never converted.
    """
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"

    @property
    def symbol(self) -> str:
        return _CURRENCY_SYMBOLS[self]

    @property
    def label(self) -> str:
        return f"{self.value} ({self.symbol})"


_CURRENCY_SYMBOLS = {
    Currency.USD: "$",
    Currency.EUR: "€",
    Currency.GBP: "£",
    Currency.JPY: "¥",
}


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense entry.

    Transactions are immutable once recorded. Bill payments carry the
    id of the bill that produced them in bill_id.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        lt=MAX_AMOUNT,
        description="Positive magnitude; sign comes from type"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=MAX_DESCRIPTION_LENGTH,
        description="Free-text label"
    )
    type: TransactionType
    date: datetime = Field(
        default_factory=datetime.now,
        description="Local time the transaction was recorded"
    )
    bill_id: Optional[UUID] = Field(
        default=None,
        description="Bill whose payment created this transaction, if any"
    )

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_bill_payment(self) -> bool:
        return self.bill_id is not None

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign its type implies."""
        return self.amount if self.is_income else -self.amount


class Bill(BaseModel):
    """
    A bill due on a given day of every month.

    due_day is not checked against the real length of any month, so a
    bill due on the 31st is simply "due on the 31st".
    """
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    id: UUID = Field(
        default_factory=uuid4,
        frozen=True,
        description="Unique bill ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=MAX_BILL_NAME_LENGTH,
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        lt=MAX_AMOUNT,
    )
    due_day: int = Field(
        default=1,
        ge=1,
        le=31,
        description="Day of month the bill is due"
    )
    is_paid: bool = False
    # Recorded for the user's benefit; there is no month rollover.
    monthly_recurrence: bool = True

    @property
    def payment_description(self) -> str:
        return f"{BILL_PAYMENT_PREFIX}{self.name}"


def _progress(value: Decimal, target: Decimal) -> float:
    if target <= 0:
        return 1.0 if value > 0 else 0.0
    return max(0.0, min(float(value / target), 1.0))


class Budget(BaseModel):
    """
    Budget targets plus the two figures shown against them.

    spent and saved_amount are overwritten from derived metrics every time
    the dashboard is built; only the targets are user-owned.
    """
    model_config = ConfigDict(validate_assignment=True)

    monthly_limit: Decimal = Field(default=Decimal("2000"), ge=0, lt=MAX_AMOUNT)
    savings_goal: Decimal = Field(default=Decimal("5000"), ge=0, lt=MAX_AMOUNT)
    spent: Decimal = Decimal("0")
    saved_amount: Decimal = Decimal("0")

    @property
    def spending_progress(self) -> float:
        return _progress(self.spent, self.monthly_limit)

    @property
    def savings_progress(self) -> float:
        return _progress(self.saved_amount, self.savings_goal)

    @property
    def is_near_limit(self) -> bool:
        return self.spending_progress >= NEAR_LIMIT_THRESHOLD


class Preferences(BaseModel):
    """User preferences from the settings page."""
    model_config = ConfigDict(validate_assignment=True)

    currency: Currency = Currency.USD
    # Stored only; nothing enforces a biometric lock.
    use_biometrics: bool = False


# =============================================================================
# SNAPSHOTS AND SUMMARIES
# =============================================================================

class LedgerSnapshot(BaseModel):
    """Everything needed to rebuild a ledger. Unit of persistence."""

    version: int = 1
    saved_at: datetime = Field(default_factory=datetime.now)
    transactions: list[Transaction] = Field(default_factory=list)
    bills: list[Bill] = Field(default_factory=list)
    budget: Budget = Field(default_factory=Budget)
    preferences: Preferences = Field(default_factory=Preferences)


class LedgerSummary(BaseModel):
    """All dashboard figures, computed together from one ledger state."""

    computed_at: datetime = Field(default_factory=datetime.now)
    total_income: Decimal
    total_expenses: Decimal
    unpaid_bills_total: Decimal
    paid_bills_total: Decimal
    balance: Decimal
    after_bills: Decimal
    total_spent_this_month: Decimal
    budget: Budget
