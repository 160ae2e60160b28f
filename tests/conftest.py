"""Pytest configuration and fixtures."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from loan_tracker.exceptions import StorageError
from loan_tracker.models import Installment, LoanTerms
from loan_tracker.store import InMemoryLoanStore


class FlakyStore(InMemoryLoanStore):
    """In-memory store whose ``fail_on`` operation fails after ``after`` successful calls."""

    def __init__(self, fail_on: str, after: int = 0, error: type[Exception] = StorageError) -> None:
        super().__init__()
        self.fail_on = fail_on
        self.after = after
        self.error = error
        self.calls = 0

    def _maybe_fail(self, operation: str) -> None:
        if operation != self.fail_on:
            return
        if self.calls >= self.after:
            raise self.error(f"{operation} unavailable")
        self.calls += 1

    def create_borrower(self, name, email, phone):
        self._maybe_fail("create_borrower")
        return super().create_borrower(name, email, phone)

    def create_loan(self, *args, **kwargs):
        self._maybe_fail("create_loan")
        return super().create_loan(*args, **kwargs)

    def create_installment(self, *args, **kwargs):
        self._maybe_fail("create_installment")
        return super().create_installment(*args, **kwargs)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant."""
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> InMemoryLoanStore:
    """Create a fresh store for each test."""
    return InMemoryLoanStore()


@pytest.fixture
def terms() -> LoanTerms:
    """$10,000 at 5% over 12 months, due on the 15th."""
    return LoanTerms(
        principal=Decimal("10000"),
        annual_rate=Decimal("0.05"),
        term_months=12,
        day_due=15,
    )


@pytest.fixture
def make_installment():
    """Factory for standalone installments."""

    def _make(
        due_date: date,
        amount_due: str = "100.00",
        amount_paid: str = "0",
        paid_date: date | None = None,
        installment_number: int = 1,
    ) -> Installment:
        return Installment(
            installment_id=installment_number,
            loan_id=1,
            installment_number=installment_number,
            amount_due=Decimal(amount_due),
            amount_paid=Decimal(amount_paid),
            due_date=due_date,
            paid_date=paid_date,
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

    return _make


@pytest.fixture
def flaky_store():
    """Factory for stores that fail a chosen operation."""
    return FlakyStore
