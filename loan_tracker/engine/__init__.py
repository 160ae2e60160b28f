"""Loan origination and payment-schedule engine."""

from loan_tracker.engine.amortization import compute_monthly_payment, total_repayment
from loan_tracker.engine.due_dates import compute_due_date, days_in_month
from loan_tracker.engine.schedule import InstallmentRequest, build_schedule, plan_schedule
from loan_tracker.engine.status import (
    LoanStanding,
    PaymentState,
    days_late,
    days_overdue,
    evaluate,
    is_fully_paid,
    is_overdue,
    is_paid,
    is_partially_paid,
    loan_standing,
    remaining_balance,
    was_paid_late,
)
from loan_tracker.engine.validation import normalize_date_taken, validate_loan_terms

__all__ = [
    "InstallmentRequest",
    "LoanStanding",
    "PaymentState",
    "build_schedule",
    "compute_due_date",
    "compute_monthly_payment",
    "days_in_month",
    "days_late",
    "days_overdue",
    "evaluate",
    "is_fully_paid",
    "is_overdue",
    "is_paid",
    "is_partially_paid",
    "loan_standing",
    "normalize_date_taken",
    "plan_schedule",
    "remaining_balance",
    "total_repayment",
    "validate_loan_terms",
    "was_paid_late",
]
