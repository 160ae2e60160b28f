"""Seed data generators."""

from loan_tracker.generators.borrower import BorrowerGenerator
from loan_tracker.generators.loan import LoanTermsGenerator

__all__ = ["BorrowerGenerator", "LoanTermsGenerator"]
