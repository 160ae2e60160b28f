"""Installment due-date arithmetic."""

import calendar
from datetime import MAXYEAR, date, datetime

from loan_tracker.engine.clock import as_utc
from loan_tracker.engine.validation import MAX_DAY_DUE, MIN_DAY_DUE
from loan_tracker.exceptions import ValidationError


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def compute_due_date(start_date: date, installment_offset_months: int, day_of_month: int) -> date:
    """Compute the due date of an installment.

    The target month is ``installment_offset_months`` after the month of
    ``start_date``. The day is clamped to the last day of that month, so
    day 31 in February gives Feb 28 or 29, never a date in March.

    Parameters
    ----------
    start_date : date
        Loan start; aware datetimes are read on the UTC calendar.
    installment_offset_months : int
        Months after the start month (1 for the first installment).
    day_of_month : int
        Requested day of month, 1-31.

    Returns
    -------
    date
        Due date (midnight UTC).

    Raises
    ------
    ValidationError
        If the offset or day is out of range, or the due date would fall
        after the last representable year.
    """
    if installment_offset_months < 1:
        raise ValidationError(
            "installment_offset_months", installment_offset_months, "must be positive"
        )
    if not MIN_DAY_DUE <= day_of_month <= MAX_DAY_DUE:
        raise ValidationError(
            "day_of_month", day_of_month, f"must be between {MIN_DAY_DUE} and {MAX_DAY_DUE}"
        )

    if isinstance(start_date, datetime):
        start_date = as_utc(start_date).date()

    month_index = start_date.month - 1 + installment_offset_months
    year = start_date.year + month_index // 12
    month = month_index % 12 + 1
    if year > MAXYEAR:
        raise ValidationError(
            "installment_offset_months",
            installment_offset_months,
            f"puts the due date past year {MAXYEAR}",
        )

    return date(year, month, min(day_of_month, days_in_month(year, month)))
