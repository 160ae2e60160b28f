"""Tests for InMemoryLoanStore."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from loan_tracker.exceptions import (
    DuplicateError,
    EntityNotFoundError,
    InvalidEntityStateError,
    ReferentialIntegrityError,
)
from loan_tracker.models import Borrower, Loan, LoanStatus
from loan_tracker.store import InMemoryLoanStore

DATE_TAKEN = datetime(2024, 1, 15, tzinfo=timezone.utc)


@pytest.fixture
def borrower(store: InMemoryLoanStore) -> Borrower:
    """Create a sample borrower."""
    return store.create_borrower("Ada Lovelace", "ada@example.com", "555-0100")


@pytest.fixture
def loan(store: InMemoryLoanStore, borrower: Borrower) -> Loan:
    """Create a sample loan."""
    return store.create_loan(
        borrower.borrower_id,
        Decimal("10000"),
        Decimal("0.05"),
        12,
        15,
        LoanStatus.ACTIVE,
        DATE_TAKEN,
    )


def add_installment(store: InMemoryLoanStore, loan_id: int, number: int, paid: str = "0"):
    return store.create_installment(
        loan_id,
        number,
        Decimal("100"),
        Decimal(paid),
        date(2024, 1 + number, 15),
        date(2024, 1 + number, 15) if Decimal(paid) else None,
    )


class TestBorrowers:
    """Tests for borrower operations."""

    def test_create_assigns_ids(self, store: InMemoryLoanStore) -> None:
        first = store.create_borrower("Ada Lovelace", "ada@example.com", "555-0100")
        second = store.create_borrower("Grace Hopper", "grace@example.com", "555-0101")

        assert (first.borrower_id, second.borrower_id) == (1, 2)
        assert first.created_at.tzinfo is not None
        assert first.loans == []

    def test_duplicate_email(self, store: InMemoryLoanStore, borrower: Borrower) -> None:
        with pytest.raises(DuplicateError):
            store.create_borrower("Other", "ada@example.com", "555-0199")

    def test_get(self, store: InMemoryLoanStore, borrower: Borrower) -> None:
        assert store.get_borrower(borrower.borrower_id) == borrower
        assert store.get_borrower_by_email("ada@example.com") == borrower
        assert store.get_borrower_by_phone("555-0100") == borrower

    def test_get_missing(self, store: InMemoryLoanStore) -> None:
        with pytest.raises(EntityNotFoundError, match="Borrower 9 not found"):
            store.get_borrower(9)
        with pytest.raises(EntityNotFoundError):
            store.get_borrower_by_email("nobody@example.com")
        with pytest.raises(EntityNotFoundError):
            store.get_borrower_by_phone("000")

    def test_returned_copies_are_detached(self, store: InMemoryLoanStore, borrower: Borrower) -> None:
        borrower.name = "Changed"

        assert store.get_borrower(borrower.borrower_id).name == "Ada Lovelace"

    def test_update(self, store: InMemoryLoanStore, borrower: Borrower) -> None:
        updated = store.update_borrower(borrower.borrower_id, "Ada King", "ada@king.org", "555-0102")

        assert updated.name == "Ada King"
        assert store.get_borrower_by_email("ada@king.org").borrower_id == borrower.borrower_id

    def test_update_keeping_own_email(self, store: InMemoryLoanStore, borrower: Borrower) -> None:
        updated = store.update_borrower(borrower.borrower_id, "Ada King", "ada@example.com", "555-0100")

        assert updated.email == "ada@example.com"

    def test_update_to_taken_email(self, store: InMemoryLoanStore, borrower: Borrower) -> None:
        other = store.create_borrower("Grace Hopper", "grace@example.com", "555-0101")

        with pytest.raises(DuplicateError):
            store.update_borrower(other.borrower_id, "Grace Hopper", "ada@example.com", "555-0101")

    def test_list_ordered_by_name(self, store: InMemoryLoanStore) -> None:
        store.create_borrower("Grace Hopper", "grace@example.com", "555-0101")
        store.create_borrower("Ada Lovelace", "ada@example.com", "555-0100")

        assert [b.name for b in store.list_borrowers()] == ["Ada Lovelace", "Grace Hopper"]
        assert store.count_borrowers() == 2

    def test_delete_cascades(self, store: InMemoryLoanStore, borrower: Borrower, loan: Loan) -> None:
        add_installment(store, loan.loan_id, 1)

        store.delete_borrower(borrower.borrower_id)

        assert store.summary() == {"borrowers": 0, "loans": 0, "installments": 0}
        with pytest.raises(EntityNotFoundError):
            store.delete_borrower(borrower.borrower_id)


class TestLoans:
    """Tests for loan operations."""

    def test_create(self, loan: Loan, borrower: Borrower) -> None:
        assert loan.loan_id == 1
        assert loan.borrower_id == borrower.borrower_id
        assert loan.status == LoanStatus.ACTIVE
        assert loan.date_taken == DATE_TAKEN

    def test_create_for_missing_borrower(self, store: InMemoryLoanStore) -> None:
        with pytest.raises(ReferentialIntegrityError):
            store.create_loan(99, Decimal("100"), Decimal("0"), 1, 1, LoanStatus.ACTIVE, DATE_TAKEN)

        assert store.summary()["loans"] == 0

    def test_get_by_borrower(self, store: InMemoryLoanStore, borrower: Borrower, loan: Loan) -> None:
        second = store.create_loan(
            borrower.borrower_id, Decimal("500"), Decimal("0.1"), 6, 1, LoanStatus.ACTIVE, DATE_TAKEN
        )

        loans = store.get_loans_by_borrower(borrower.borrower_id)

        assert [item.loan_id for item in loans] == [loan.loan_id, second.loan_id]
        assert store.get_loans_by_borrower(99) == []

    def test_update_status(self, store: InMemoryLoanStore, loan: Loan) -> None:
        updated = store.update_loan(loan.loan_id, status=LoanStatus.PAID_OFF)

        assert updated.status == LoanStatus.PAID_OFF
        assert store.count_loans_by_status(LoanStatus.ACTIVE) == 0
        assert store.count_loans_by_status("paid_off") == 1

    def test_get_by_status(self, store: InMemoryLoanStore, loan: Loan) -> None:
        assert [item.loan_id for item in store.get_loans_by_status("active")] == [loan.loan_id]
        assert store.get_loans_by_status(LoanStatus.DEFAULTED) == []

    def test_get_missing(self, store: InMemoryLoanStore) -> None:
        with pytest.raises(EntityNotFoundError, match="Loan 5 not found"):
            store.get_loan(5)
        with pytest.raises(EntityNotFoundError):
            store.update_loan(5, status=LoanStatus.ACTIVE)

    def test_delete_cascades(self, store: InMemoryLoanStore, borrower: Borrower, loan: Loan) -> None:
        add_installment(store, loan.loan_id, 1)

        store.delete_loan(loan.loan_id)

        assert store.list_loans() == []
        assert store.list_installments() == []
        assert store.get_loans_by_borrower(borrower.borrower_id) == []


class TestInstallments:
    """Tests for installment operations."""

    def test_ordered_by_number(self, store: InMemoryLoanStore, loan: Loan) -> None:
        for number in (3, 1, 2):
            add_installment(store, loan.loan_id, number)

        installments = store.get_installments_by_loan(loan.loan_id)

        assert [i.installment_number for i in installments] == [1, 2, 3]

    def test_duplicate_number(self, store: InMemoryLoanStore, loan: Loan) -> None:
        add_installment(store, loan.loan_id, 1)

        with pytest.raises(DuplicateError):
            add_installment(store, loan.loan_id, 1)

    def test_missing_loan(self, store: InMemoryLoanStore) -> None:
        with pytest.raises(ReferentialIntegrityError):
            add_installment(store, 42, 1)

    def test_unpaid(self, store: InMemoryLoanStore, loan: Loan) -> None:
        add_installment(store, loan.loan_id, 1, paid="100")
        add_installment(store, loan.loan_id, 2, paid="40")
        add_installment(store, loan.loan_id, 3)

        unpaid = store.get_unpaid_installments_by_loan(loan.loan_id)

        assert [i.installment_number for i in unpaid] == [2, 3]

    def test_update(self, store: InMemoryLoanStore, loan: Loan) -> None:
        installment = add_installment(store, loan.loan_id, 1)

        updated = store.update_installment(installment.installment_id, Decimal("100"), date(2024, 2, 20))

        assert updated.amount_paid == Decimal("100")
        assert store.get_installment(installment.installment_id).paid_date == date(2024, 2, 20)

    def test_update_negative_amount(self, store: InMemoryLoanStore, loan: Loan) -> None:
        installment = add_installment(store, loan.loan_id, 1)

        with pytest.raises(InvalidEntityStateError):
            store.update_installment(installment.installment_id, Decimal("-1"), None)

    def test_list_ordered_by_loan(self, store: InMemoryLoanStore, borrower: Borrower, loan: Loan) -> None:
        other = store.create_loan(
            borrower.borrower_id, Decimal("500"), Decimal("0"), 2, 1, LoanStatus.ACTIVE, DATE_TAKEN
        )
        add_installment(store, other.loan_id, 1)
        add_installment(store, loan.loan_id, 2)
        add_installment(store, loan.loan_id, 1)

        listed = [(i.loan_id, i.installment_number) for i in store.list_installments()]

        assert listed == [(loan.loan_id, 1), (loan.loan_id, 2), (other.loan_id, 1)]

    def test_delete(self, store: InMemoryLoanStore, loan: Loan) -> None:
        installment = add_installment(store, loan.loan_id, 1)

        store.delete_installment(installment.installment_id)

        assert store.get_installments_by_loan(loan.loan_id) == []
        with pytest.raises(EntityNotFoundError):
            store.get_installment(installment.installment_id)


class TestMaintenance:
    def test_summary_and_truncate(self, store: InMemoryLoanStore, loan: Loan) -> None:
        add_installment(store, loan.loan_id, 1)

        assert store.summary() == {"borrowers": 1, "loans": 1, "installments": 1}

        store.truncate()

        assert store.summary() == {"borrowers": 0, "loans": 0, "installments": 0}
