"""Input validation for loan origination.

Every check runs before anything is persisted. The first violation
raises a single ``ValidationError`` naming the offending field.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from loan_tracker.engine.clock import as_utc, start_of_day_utc
from loan_tracker.exceptions import ValidationError
from loan_tracker.models import LoanTerms

MIN_DAY_DUE = 1
MAX_DAY_DUE = 31


def as_decimal(value: Any, field: str) -> Decimal:
    """Convert a numeric input to a finite ``Decimal``."""
    if isinstance(value, bool):
        raise ValidationError(field, value, "must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValidationError(field, value, "must be a number") from exc
    else:
        raise ValidationError(field, value, "must be a number")

    if not result.is_finite():
        raise ValidationError(field, value, "must be finite")
    return result


def as_whole_number(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, value, "must be a whole number")
    return value


def validate_loan_terms(terms: LoanTerms) -> LoanTerms:
    """Validate loan parameters and return them normalized to ``Decimal``.

    Parameters
    ----------
    terms : LoanTerms
        Raw loan parameters; amounts may be int, float, str or Decimal.

    Returns
    -------
    LoanTerms
        Terms with ``principal`` and ``annual_rate`` as Decimal.

    Raises
    ------
    ValidationError
        If principal <= 0, annual_rate < 0, term_months <= 0 or
        day_due is outside 1-31.
    """
    principal = as_decimal(terms.principal, "principal")
    if principal <= 0:
        raise ValidationError("principal", terms.principal, "must be positive")

    annual_rate = as_decimal(terms.annual_rate, "annual_rate")
    if annual_rate < 0:
        raise ValidationError("annual_rate", terms.annual_rate, "cannot be negative")

    term_months = as_whole_number(terms.term_months, "term_months")
    if term_months <= 0:
        raise ValidationError("term_months", term_months, "must be positive")

    day_due = as_whole_number(terms.day_due, "day_due")
    if not MIN_DAY_DUE <= day_due <= MAX_DAY_DUE:
        raise ValidationError("day_due", day_due, f"must be between {MIN_DAY_DUE} and {MAX_DAY_DUE}")

    return LoanTerms(
        principal=principal,
        annual_rate=annual_rate,
        term_months=term_months,
        day_due=day_due,
    )


def normalize_date_taken(value: Any) -> datetime:
    """Validate ``date_taken`` and normalize it to an aware UTC datetime.

    Past, present and future dates are all accepted. ``None`` and the
    minimum representable date count as unset.
    """
    if value is None:
        raise ValidationError("date_taken", value, "cannot be unset")
    if isinstance(value, datetime):
        if value.replace(tzinfo=None) == datetime.min:
            raise ValidationError("date_taken", value, "cannot be unset")
        try:
            return as_utc(value)
        except OverflowError as exc:
            raise ValidationError("date_taken", value, "is out of range in UTC") from exc
    if isinstance(value, date):
        if value == date.min:
            raise ValidationError("date_taken", value, "cannot be unset")
        return start_of_day_utc(value)
    raise ValidationError("date_taken", value, "must be a date or datetime")
