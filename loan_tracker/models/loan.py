"""Loan and installment models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from loan_tracker.models.enums import LoanStatus


@dataclass
class LoanTerms:
    """Parameters a loan is originated with."""

    principal: Decimal
    annual_rate: Decimal  # e.g. 0.05 for 5%
    term_months: int
    day_due: int  # 1-31, clamped to the month length


@dataclass
class Installment:
    """One scheduled payment within a loan."""

    installment_id: int
    loan_id: int
    installment_number: int  # 1, 2, 3, ...
    amount_due: Decimal
    amount_paid: Decimal
    due_date: date
    paid_date: date | None  # None while unpaid
    created_at: datetime


@dataclass
class Loan:
    """Borrowing agreement with its payment schedule."""

    loan_id: int
    borrower_id: int
    principal: Decimal
    annual_rate: Decimal
    term_months: int
    day_due: int
    status: LoanStatus | str
    date_taken: datetime  # UTC
    created_at: datetime
    installments: list[Installment] = field(default_factory=list)

    @property
    def terms(self) -> LoanTerms:
        """Origination parameters of this loan."""
        return LoanTerms(
            principal=self.principal,
            annual_rate=self.annual_rate,
            term_months=self.term_months,
            day_due=self.day_due,
        )
