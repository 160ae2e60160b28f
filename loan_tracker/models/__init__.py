"""Domain models for loan tracking."""

from loan_tracker.models.borrower import Borrower, BorrowerProfile
from loan_tracker.models.enums import LoanStatus
from loan_tracker.models.loan import Installment, Loan, LoanTerms

__all__ = [
    "Borrower",
    "BorrowerProfile",
    "Installment",
    "Loan",
    "LoanStatus",
    "LoanTerms",
]
