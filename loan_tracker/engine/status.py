"""Payment state of installments.

All functions are read-only projections of an installment. The ones that
depend on the current time take ``now`` explicitly (defaulting to the
wall clock) and are recomputed on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from loan_tracker.engine.clock import as_utc, start_of_day_utc
from loan_tracker.models import Installment, Loan

ZERO = Decimal("0")


def is_fully_paid(installment: Installment) -> bool:
    return installment.amount_paid >= installment.amount_due


def remaining_balance(installment: Installment) -> Decimal:
    """Amount still owed; never negative, even when overpaid."""
    return max(ZERO, installment.amount_due - installment.amount_paid)


def is_partially_paid(installment: Installment) -> bool:
    return ZERO < installment.amount_paid < installment.amount_due


def is_paid(installment: Installment) -> bool:
    """True when any payment has been recorded."""
    return installment.amount_paid > ZERO


def is_overdue(installment: Installment, now: datetime | None = None) -> bool:
    """Past its due date and not fully paid."""
    return as_utc(now) > start_of_day_utc(installment.due_date) and not is_fully_paid(installment)


def days_overdue(installment: Installment, now: datetime | None = None) -> int:
    """Whole days since the due date, 0 when not overdue."""
    now = as_utc(now)
    if not is_overdue(installment, now):
        return 0
    return (now - start_of_day_utc(installment.due_date)).days


def was_paid_late(installment: Installment) -> bool:
    """Settled after the due date. Paying on the due date is on time."""
    return installment.paid_date is not None and installment.paid_date > installment.due_date


def days_late(installment: Installment) -> int:
    if not was_paid_late(installment):
        return 0
    return (installment.paid_date - installment.due_date).days


@dataclass(frozen=True)
class PaymentState:
    """Snapshot of every derived state of one installment."""

    installment_number: int
    is_paid: bool
    is_fully_paid: bool
    is_partially_paid: bool
    remaining_balance: Decimal
    is_overdue: bool
    days_overdue: int
    was_paid_late: bool
    days_late: int


def evaluate(installment: Installment, now: datetime | None = None) -> PaymentState:
    """Evaluate all payment states of ``installment`` at ``now``."""
    now = as_utc(now)
    return PaymentState(
        installment_number=installment.installment_number,
        is_paid=is_paid(installment),
        is_fully_paid=is_fully_paid(installment),
        is_partially_paid=is_partially_paid(installment),
        remaining_balance=remaining_balance(installment),
        is_overdue=is_overdue(installment, now),
        days_overdue=days_overdue(installment, now),
        was_paid_late=was_paid_late(installment),
        days_late=days_late(installment),
    )


@dataclass(frozen=True)
class LoanStanding:
    """Roll-up of installment states over a whole loan."""

    loan_id: int
    installments: int
    fully_paid: int
    partially_paid: int
    overdue: int
    paid_late: int
    total_due: Decimal
    total_paid: Decimal
    outstanding_balance: Decimal
    max_days_overdue: int
    next_due_date: date | None


def loan_standing(loan: Loan, now: datetime | None = None) -> LoanStanding:
    """Summarize the payment standing of a loan at ``now``.

    Parameters
    ----------
    loan : Loan
        Loan with its installments attached.
    now : datetime | None
        Reference instant; defaults to the current time.

    Returns
    -------
    LoanStanding
        Counts and totals over ``loan.installments``.
    """
    now = as_utc(now)
    installments = sorted(loan.installments, key=lambda i: i.installment_number)
    unpaid = [i for i in installments if not is_fully_paid(i)]

    return LoanStanding(
        loan_id=loan.loan_id,
        installments=len(installments),
        fully_paid=sum(1 for i in installments if is_fully_paid(i)),
        partially_paid=sum(1 for i in installments if is_partially_paid(i)),
        overdue=sum(1 for i in installments if is_overdue(i, now)),
        paid_late=sum(1 for i in installments if was_paid_late(i)),
        total_due=sum((i.amount_due for i in installments), ZERO),
        total_paid=sum((i.amount_paid for i in installments), ZERO),
        outstanding_balance=sum((remaining_balance(i) for i in installments), ZERO),
        max_days_overdue=max((days_overdue(i, now) for i in installments), default=0),
        next_due_date=unpaid[0].due_date if unpaid else None,
    )
