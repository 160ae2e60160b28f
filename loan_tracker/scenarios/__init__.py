"""Scenarios for seeding realistic loan books."""

from loan_tracker.scenarios.loan_book import LoanBookScenario

__all__ = ["LoanBookScenario"]
