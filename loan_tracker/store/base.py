"""Repository interface for borrowers, loans and installments."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal

from loan_tracker.models import Borrower, Installment, Loan, LoanStatus


class LoanRepository(ABC):
    """Persistence collaborator used by the origination workflow.

    Implementations assign identifiers and creation timestamps. Missing
    ids raise ``EntityNotFoundError``, a duplicate borrower email raises
    ``DuplicateError`` and any other storage failure ``StorageError``.
    Lists of installments are always ordered by installment number.
    """

    # Borrowers
    @abstractmethod
    def create_borrower(self, name: str, email: str, phone: str) -> Borrower: ...

    @abstractmethod
    def get_borrower(self, borrower_id: int) -> Borrower: ...

    @abstractmethod
    def get_borrower_by_email(self, email: str) -> Borrower: ...

    @abstractmethod
    def get_borrower_by_phone(self, phone: str) -> Borrower: ...

    @abstractmethod
    def update_borrower(self, borrower_id: int, name: str, email: str, phone: str) -> Borrower: ...

    @abstractmethod
    def list_borrowers(self) -> list[Borrower]:
        """All borrowers ordered by name."""

    @abstractmethod
    def count_borrowers(self) -> int: ...

    @abstractmethod
    def delete_borrower(self, borrower_id: int) -> None:
        """Delete a borrower with all of their loans and installments."""

    # Loans
    @abstractmethod
    def create_loan(
        self,
        borrower_id: int,
        principal: Decimal,
        annual_rate: Decimal,
        term_months: int,
        day_due: int,
        status: LoanStatus | str,
        date_taken: datetime,
    ) -> Loan: ...

    @abstractmethod
    def get_loan(self, loan_id: int) -> Loan: ...

    @abstractmethod
    def get_loans_by_borrower(self, borrower_id: int) -> list[Loan]:
        """Loans of a borrower in creation order."""

    @abstractmethod
    def update_loan(self, loan_id: int, *, status: LoanStatus | str) -> Loan: ...

    @abstractmethod
    def list_loans(self) -> list[Loan]: ...

    @abstractmethod
    def get_loans_by_status(self, status: LoanStatus | str) -> list[Loan]: ...

    @abstractmethod
    def count_loans_by_status(self, status: LoanStatus | str) -> int: ...

    @abstractmethod
    def delete_loan(self, loan_id: int) -> None:
        """Delete a loan with all of its installments."""

    # Installments
    @abstractmethod
    def create_installment(
        self,
        loan_id: int,
        installment_number: int,
        amount_due: Decimal,
        amount_paid: Decimal,
        due_date: date,
        paid_date: date | None,
    ) -> Installment: ...

    @abstractmethod
    def get_installment(self, installment_id: int) -> Installment: ...

    @abstractmethod
    def get_installments_by_loan(self, loan_id: int) -> list[Installment]: ...

    @abstractmethod
    def get_unpaid_installments_by_loan(self, loan_id: int) -> list[Installment]:
        """Installments with ``amount_paid < amount_due``."""

    @abstractmethod
    def update_installment(
        self,
        installment_id: int,
        amount_paid: Decimal,
        paid_date: date | None,
    ) -> Installment:
        """Record a settlement against an installment."""

    @abstractmethod
    def list_installments(self) -> list[Installment]: ...

    @abstractmethod
    def delete_installment(self, installment_id: int) -> None: ...

    # Maintenance
    @abstractmethod
    def summary(self) -> dict[str, int]:
        """Return counts of borrowers, loans and installments."""

    @abstractmethod
    def truncate(self) -> None:
        """Delete every row, children first."""


def status_value(status: LoanStatus | str) -> str:
    """Plain string stored for a loan status."""
    return status.value if isinstance(status, LoanStatus) else status
