"""Form validation package."""

from wisevault.validation.forms import (
    BillForm,
    BudgetSettingsForm,
    TransactionForm,
    parse_amount,
    parse_form,
)

__all__ = [
    "BillForm",
    "BudgetSettingsForm",
    "TransactionForm",
    "parse_amount",
    "parse_form",
]
