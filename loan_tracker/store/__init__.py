"""Repositories for borrowers, loans and installments."""

from loan_tracker.store.base import LoanRepository
from loan_tracker.store.memory import InMemoryLoanStore
from loan_tracker.store.postgres import PostgresLoanStore

__all__ = ["InMemoryLoanStore", "LoanRepository", "PostgresLoanStore"]
