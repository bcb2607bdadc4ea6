"""Display helpers shared by the UI and exports."""

from decimal import Decimal

from wisevault.models.ledger import Currency, Transaction


def format_money(amount: Decimal, currency: Currency = Currency.USD) -> str:
    """'$1,234.50' / '-$20.00'. The currency only changes the symbol."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency.symbol}{abs(amount):,.2f}"


def format_signed(transaction: Transaction, currency: Currency = Currency.USD) -> str:
    """Transaction amount as shown in the list: '+$10.00' or '-$10.00'."""
    sign = "+" if transaction.is_income else "-"
    return f"{sign}{currency.symbol}{transaction.amount:,.2f}"


def ordinal(day: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th', 23 -> '23rd'."""
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"
