"""
Form Validation

DESIGN DECISION: Raw form input is validated here and nowhere else.
Each form is a Pydantic model that accepts the strings a text field
produces and turns them into typed values.

REJECTION POLICY: a form that fails validation is silently dropped.
parse_form() returns None, the caller leaves the form open, and the user
sees no message. A DEBUG log line names the offending fields so a
developer can still see what happened.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from wisevault.audit.logger import get_logger
from wisevault.models.ledger import (
    MAX_AMOUNT,
    MAX_BILL_NAME_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    Currency,
    TransactionType,
)


logger = get_logger(__name__)

MAX_DECIMAL_PLACES = 8


def parse_amount(raw: Any) -> Decimal:
    """
    Parse a decimal amount typed by the user.

    Accepts Decimal, int, float or a string with surrounding whitespace.
    Raises ValueError for anything that is not a finite number, whose
    magnitude reaches MAX_AMOUNT, or that has more than MAX_DECIMAL_PLACES
    significant decimal places.
    """
    if isinstance(raw, bool):
        raise ValueError("Amount must be a number")
    if isinstance(raw, Decimal):
        value = raw
    else:
        text = str(raw).strip()
        try:
            value = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"Not a number: {text!r}")
    if not value.is_finite():
        raise ValueError("Amount must be finite")
    if abs(value) >= MAX_AMOUNT:
        raise ValueError(f"Amount must be below {MAX_AMOUNT}")
    if value and value.normalize().as_tuple().exponent < -MAX_DECIMAL_PLACES:
        raise ValueError(f"At most {MAX_DECIMAL_PLACES} decimal places")
    return value


class TransactionForm(BaseModel):
    """The add-transaction sheet: amount, description, type."""
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(..., gt=0)
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    type: TransactionType = TransactionType.EXPENSE

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount_text(cls, v: Any) -> Decimal:
        return parse_amount(v)


class BillForm(BaseModel):
    """The add-bill sheet: amount, name, due day, recurrence."""
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=MAX_BILL_NAME_LENGTH)
    due_day: int = Field(default=1, ge=1, le=31)
    monthly_recurrence: bool = True

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount_text(cls, v: Any) -> Decimal:
        return parse_amount(v)


class BudgetSettingsForm(BaseModel):
    """The settings sheet: budget targets and preferences."""

    monthly_limit: Decimal = Field(..., ge=0)
    savings_goal: Decimal = Field(..., ge=0)
    currency: Currency = Currency.USD
    use_biometrics: bool = False

    @field_validator('monthly_limit', 'savings_goal', mode='before')
    @classmethod
    def parse_amount_text(cls, v: Any) -> Decimal:
        return parse_amount(v)


FormT = TypeVar("FormT", bound=BaseModel)


def parse_form(form_cls: type[FormT], **raw: Any) -> Optional[FormT]:
    """
    Validate raw form values.

    Returns the parsed form, or None if anything is wrong with it.
    Never raises for bad user input.
    """
    try:
        return form_cls.model_validate(raw)
    except ValidationError as e:
        fields = sorted({
            ".".join(str(part) for part in error["loc"]) or "__root__"
            for error in e.errors()
        })
        logger.debug("form_rejected", form=form_cls.__name__, fields=fields)
        return None
