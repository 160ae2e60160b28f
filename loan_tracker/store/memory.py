"""In-memory repository with referential integrity."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import Decimal

from loan_tracker.exceptions import (
    DuplicateError,
    EntityNotFoundError,
    InvalidEntityStateError,
    ReferentialIntegrityError,
)
from loan_tracker.models import Borrower, Installment, Loan, LoanStatus
from loan_tracker.store.base import LoanRepository, status_value


@dataclass
class InMemoryLoanStore(LoanRepository):
    """Dictionary-backed store with relationship tracking.

    Returned entities are copies; mutating them does not change the store.
    """

    # Primary entities
    borrowers: dict[int, Borrower] = field(default_factory=dict)
    loans: dict[int, Loan] = field(default_factory=dict)
    installments: dict[int, Installment] = field(default_factory=dict)

    # Relationship indexes
    _borrower_loans: dict[int, list[int]] = field(default_factory=dict)
    _loan_installments: dict[int, list[int]] = field(default_factory=dict)

    # Id sequences
    _next_ids: dict[str, int] = field(
        default_factory=lambda: {"borrowers": 1, "loans": 1, "installments": 1}
    )

    def _next_id(self, table: str) -> int:
        value = self._next_ids[table]
        self._next_ids[table] = value + 1
        return value

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    # Borrowers
    def create_borrower(self, name: str, email: str, phone: str) -> Borrower:
        """Add a borrower to the store."""
        self._check_unique_email(email)
        borrower = Borrower(
            borrower_id=self._next_id("borrowers"),
            name=name,
            email=email,
            phone=phone,
            created_at=self._now(),
        )
        self.borrowers[borrower.borrower_id] = borrower
        self._borrower_loans[borrower.borrower_id] = []
        return replace(borrower, loans=[])

    def _check_unique_email(self, email: str, exclude_id: int | None = None) -> None:
        for borrower in self.borrowers.values():
            if borrower.email == email and borrower.borrower_id != exclude_id:
                raise DuplicateError(f"Borrower with email {email!r} already exists")

    def _borrower(self, borrower_id: int) -> Borrower:
        try:
            return self.borrowers[borrower_id]
        except KeyError:
            raise EntityNotFoundError(f"Borrower {borrower_id} not found") from None

    def get_borrower(self, borrower_id: int) -> Borrower:
        return replace(self._borrower(borrower_id), loans=[])

    def get_borrower_by_email(self, email: str) -> Borrower:
        for borrower in self.borrowers.values():
            if borrower.email == email:
                return replace(borrower, loans=[])
        raise EntityNotFoundError(f"Borrower with email {email!r} not found")

    def get_borrower_by_phone(self, phone: str) -> Borrower:
        for borrower in self.borrowers.values():
            if borrower.phone == phone:
                return replace(borrower, loans=[])
        raise EntityNotFoundError(f"Borrower with phone {phone!r} not found")

    def update_borrower(self, borrower_id: int, name: str, email: str, phone: str) -> Borrower:
        borrower = self._borrower(borrower_id)
        self._check_unique_email(email, exclude_id=borrower_id)
        borrower.name = name
        borrower.email = email
        borrower.phone = phone
        return replace(borrower, loans=[])

    def list_borrowers(self) -> list[Borrower]:
        ordered = sorted(self.borrowers.values(), key=lambda b: b.name)
        return [replace(b, loans=[]) for b in ordered]

    def count_borrowers(self) -> int:
        return len(self.borrowers)

    def delete_borrower(self, borrower_id: int) -> None:
        self._borrower(borrower_id)
        for loan_id in list(self._borrower_loans[borrower_id]):
            self.delete_loan(loan_id)
        del self.borrowers[borrower_id]
        del self._borrower_loans[borrower_id]

    # Loans
    def create_loan(
        self,
        borrower_id: int,
        principal: Decimal,
        annual_rate: Decimal,
        term_months: int,
        day_due: int,
        status: LoanStatus | str,
        date_taken: datetime,
    ) -> Loan:
        """Add a loan to the store."""
        if borrower_id not in self.borrowers:
            raise ReferentialIntegrityError(f"Borrower {borrower_id} not found")

        loan = Loan(
            loan_id=self._next_id("loans"),
            borrower_id=borrower_id,
            principal=principal,
            annual_rate=annual_rate,
            term_months=term_months,
            day_due=day_due,
            status=status,
            date_taken=date_taken,
            created_at=self._now(),
        )
        self.loans[loan.loan_id] = loan
        self._borrower_loans[borrower_id].append(loan.loan_id)
        self._loan_installments[loan.loan_id] = []
        return replace(loan, installments=[])

    def _loan(self, loan_id: int) -> Loan:
        try:
            return self.loans[loan_id]
        except KeyError:
            raise EntityNotFoundError(f"Loan {loan_id} not found") from None

    def get_loan(self, loan_id: int) -> Loan:
        return replace(self._loan(loan_id), installments=[])

    def get_loans_by_borrower(self, borrower_id: int) -> list[Loan]:
        """Get all loans for a borrower."""
        loan_ids = self._borrower_loans.get(borrower_id, [])
        return [replace(self.loans[lid], installments=[]) for lid in loan_ids]

    def update_loan(self, loan_id: int, *, status: LoanStatus | str) -> Loan:
        loan = self._loan(loan_id)
        loan.status = status
        return replace(loan, installments=[])

    def list_loans(self) -> list[Loan]:
        return [replace(loan, installments=[]) for loan in self.loans.values()]

    def get_loans_by_status(self, status: LoanStatus | str) -> list[Loan]:
        return [
            replace(loan, installments=[])
            for loan in self.loans.values()
            if status_value(loan.status) == status_value(status)
        ]

    def count_loans_by_status(self, status: LoanStatus | str) -> int:
        return len(self.get_loans_by_status(status))

    def delete_loan(self, loan_id: int) -> None:
        loan = self._loan(loan_id)
        for installment_id in self._loan_installments.pop(loan_id):
            del self.installments[installment_id]
        self._borrower_loans[loan.borrower_id].remove(loan_id)
        del self.loans[loan_id]

    # Installments
    def create_installment(
        self,
        loan_id: int,
        installment_number: int,
        amount_due: Decimal,
        amount_paid: Decimal,
        due_date: date,
        paid_date: date | None,
    ) -> Installment:
        """Add a loan installment to the store."""
        if loan_id not in self.loans:
            raise ReferentialIntegrityError(f"Loan {loan_id} not found")

        for existing in self._installments_of(loan_id):
            if existing.installment_number == installment_number:
                raise DuplicateError(
                    f"Installment {installment_number} already exists for loan {loan_id}"
                )

        installment = Installment(
            installment_id=self._next_id("installments"),
            loan_id=loan_id,
            installment_number=installment_number,
            amount_due=amount_due,
            amount_paid=amount_paid,
            due_date=due_date,
            paid_date=paid_date,
            created_at=self._now(),
        )
        self.installments[installment.installment_id] = installment
        self._loan_installments[loan_id].append(installment.installment_id)
        return replace(installment)

    def _installments_of(self, loan_id: int) -> list[Installment]:
        indices = self._loan_installments.get(loan_id, [])
        return sorted(
            (self.installments[i] for i in indices),
            key=lambda inst: inst.installment_number,
        )

    def _installment(self, installment_id: int) -> Installment:
        try:
            return self.installments[installment_id]
        except KeyError:
            raise EntityNotFoundError(f"Installment {installment_id} not found") from None

    def get_installment(self, installment_id: int) -> Installment:
        return replace(self._installment(installment_id))

    def get_installments_by_loan(self, loan_id: int) -> list[Installment]:
        """Get all installments for a loan."""
        return [replace(inst) for inst in self._installments_of(loan_id)]

    def get_unpaid_installments_by_loan(self, loan_id: int) -> list[Installment]:
        return [
            replace(inst)
            for inst in self._installments_of(loan_id)
            if inst.amount_paid < inst.amount_due
        ]

    def update_installment(
        self,
        installment_id: int,
        amount_paid: Decimal,
        paid_date: date | None,
    ) -> Installment:
        installment = self._installment(installment_id)
        if amount_paid < 0:
            raise InvalidEntityStateError(
                f"Installment {installment_id} cannot have a negative amount paid"
            )
        installment.amount_paid = amount_paid
        installment.paid_date = paid_date
        return replace(installment)

    def list_installments(self) -> list[Installment]:
        ordered = sorted(
            self.installments.values(),
            key=lambda inst: (inst.loan_id, inst.installment_number),
        )
        return [replace(inst) for inst in ordered]

    def delete_installment(self, installment_id: int) -> None:
        installment = self._installment(installment_id)
        self._loan_installments[installment.loan_id].remove(installment_id)
        del self.installments[installment_id]

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "borrowers": len(self.borrowers),
            "loans": len(self.loans),
            "installments": len(self.installments),
        }

    def truncate(self) -> None:
        self.installments.clear()
        self.loans.clear()
        self.borrowers.clear()
        self._borrower_loans.clear()
        self._loan_installments.clear()
