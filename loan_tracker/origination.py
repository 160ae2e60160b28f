"""Loan origination workflow.

Originating a loan is a pipeline of stages: validate, create (or verify)
the borrower, create the loan, create its installments. Each stage writes
through a ``LoanRepository`` and nothing is rolled back when a later stage
fails. ``OriginationError.progress`` carries whatever was persisted before
the failure so the caller can clean up, resume or accept the partial state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from loan_tracker.engine.clock import as_utc
from loan_tracker.engine.schedule import InstallmentRequest, build_schedule, plan_schedule
from loan_tracker.engine.validation import normalize_date_taken, validate_loan_terms
from loan_tracker.exceptions import (
    DuplicateError,
    EntityNotFoundError,
    LoanTrackerError,
    OriginationError,
    StorageError,
)
from loan_tracker.models import Borrower, Installment, Loan, LoanStatus, LoanTerms
from loan_tracker.store.base import LoanRepository

logger = logging.getLogger(__name__)


class OriginationStage(str, Enum):
    VALIDATE = "validate"
    CREATE_BORROWER = "create_borrower"
    VERIFY_BORROWER = "verify_borrower"
    CREATE_LOAN = "create_loan"
    CREATE_SCHEDULE = "create_schedule"
    COMPLETE = "complete"


@dataclass
class OriginationProgress:
    """Records persisted so far by one origination."""

    stage: OriginationStage = OriginationStage.VALIDATE
    borrower: Borrower | None = None
    loan: Loan | None = None
    installments: list[Installment] = field(default_factory=list)


class LoanOrigination:
    """Staged origination of a single loan.

    Stages must run in order: ``validate``, then ``create_borrower`` or
    ``verify_borrower``, then ``create_loan`` and ``create_schedule``.

    Parameters
    ----------
    repository : LoanRepository
        Persistence collaborator.
    terms : LoanTerms
        Loan parameters, validated by ``validate``.
    date_taken : datetime
        Origination date; normalized to UTC.
    auto_settle_past_due : bool
        Mark installments already due at ``now`` as paid on time.
    now : datetime | None
        Reference instant for auto-settlement; defaults to the wall clock.
    """

    def __init__(
        self,
        repository: LoanRepository,
        terms: LoanTerms,
        date_taken: datetime,
        auto_settle_past_due: bool = False,
        now: datetime | None = None,
    ) -> None:
        self.repository = repository
        self.terms = terms
        self.date_taken = date_taken
        self.auto_settle_past_due = auto_settle_past_due
        self.now = as_utc(now)
        self.progress = OriginationProgress()
        self.requests: list[InstallmentRequest] | None = None

    def log_context(self) -> dict[str, Any]:
        """Identifiers of the records persisted so far, for structured logs."""
        progress = self.progress
        return {
            "stage": progress.stage.value,
            "borrower_id": progress.borrower.borrower_id if progress.borrower else None,
            "loan_id": progress.loan.loan_id if progress.loan else None,
            "installments": len(progress.installments),
        }

    def _fail(self, message: str, exc: LoanTrackerError) -> OriginationError:
        logger.warning(
            "Origination stopped at %s: %s",
            self.progress.stage.value, exc,
            extra={"extra": self.log_context()},
        )
        return OriginationError(f"{message}: {exc}", self.progress.stage, self.progress)

    def validate(self) -> None:
        """Check every input and plan the schedule before anything is written."""
        self.progress.stage = OriginationStage.VALIDATE
        self.terms = validate_loan_terms(self.terms)
        self.date_taken = normalize_date_taken(self.date_taken)
        self.requests = plan_schedule(
            self.terms, self.date_taken, self.auto_settle_past_due, self.now
        )

    def create_borrower(self, name: str, email: str, phone: str) -> Borrower:
        self.progress.stage = OriginationStage.CREATE_BORROWER
        try:
            borrower = self.repository.create_borrower(name, email, phone)
        except DuplicateError as exc:
            raise DuplicateError(f"failed to create borrower {email!r}: {exc}") from exc
        except StorageError as exc:
            raise self._fail(f"failed to create borrower {email!r}", exc) from exc

        logger.debug("Created borrower %d", borrower.borrower_id)
        self.progress.borrower = borrower
        return borrower

    def verify_borrower(self, borrower_id: int) -> Borrower:
        self.progress.stage = OriginationStage.VERIFY_BORROWER
        try:
            borrower = self.repository.get_borrower(borrower_id)
        except EntityNotFoundError as exc:
            raise EntityNotFoundError(f"Borrower {borrower_id} not found: {exc}") from exc
        except StorageError as exc:
            raise self._fail(f"failed to look up borrower {borrower_id}", exc) from exc

        self.progress.borrower = borrower
        return borrower

    def create_loan(self) -> Loan:
        self.progress.stage = OriginationStage.CREATE_LOAN
        borrower_id = self.progress.borrower.borrower_id
        try:
            loan = self.repository.create_loan(
                borrower_id,
                self.terms.principal,
                self.terms.annual_rate,
                self.terms.term_months,
                self.terms.day_due,
                LoanStatus.ACTIVE,
                self.date_taken,
            )
        except (EntityNotFoundError, StorageError) as exc:
            raise self._fail(f"failed to create loan for borrower {borrower_id}", exc) from exc

        logger.debug("Created loan %d for borrower %d", loan.loan_id, borrower_id)
        self.progress.loan = loan
        return loan

    def create_schedule(self) -> list[Installment]:
        self.progress.stage = OriginationStage.CREATE_SCHEDULE
        loan_id = self.progress.loan.loan_id
        try:
            build_schedule(
                self.repository,
                loan_id,
                self.terms,
                self.date_taken,
                self.auto_settle_past_due,
                self.now,
                created=self.progress.installments,
                requests=self.requests,
            )
        except StorageError as exc:
            raise self._fail(f"failed to create payment schedule for loan {loan_id}", exc) from exc

        self.progress.stage = OriginationStage.COMPLETE
        return self.progress.installments

    def loan_with_installments(self) -> Loan:
        """The created loan with its schedule attached."""
        return replace(self.progress.loan, installments=list(self.progress.installments))


def originate_loan_for_new_borrower(
    repository: LoanRepository,
    name: str,
    email: str,
    phone: str,
    terms: LoanTerms,
    date_taken: datetime,
    auto_settle_past_due: bool = False,
    *,
    now: datetime | None = None,
) -> Borrower:
    """Create a borrower, one loan and its full payment schedule.

    Use a past ``date_taken`` to enter historical loans; with
    ``auto_settle_past_due`` the installments already due are recorded as
    paid on their due date.

    Returns
    -------
    Borrower
        The new borrower with the loan and its installments attached.

    Raises
    ------
    ValidationError
        Before anything is written.
    DuplicateError
        If the email is already registered.
    OriginationError
        If the loan or schedule could not be created; the borrower (and
        loan, and any installments) already created are kept.
    """
    origination = LoanOrigination(repository, terms, date_taken, auto_settle_past_due, now)
    origination.validate()
    borrower = origination.create_borrower(name, email, phone)
    origination.create_loan()
    origination.create_schedule()

    loan = origination.loan_with_installments()
    logger.info(
        "Originated loan %d (%d installments) for new borrower %d",
        loan.loan_id, len(loan.installments), borrower.borrower_id,
        extra={"extra": origination.log_context()},
    )
    return replace(borrower, loans=[loan])


def originate_loan_for_new_borrower_now(
    repository: LoanRepository,
    name: str,
    email: str,
    phone: str,
    terms: LoanTerms,
    auto_settle_past_due: bool = False,
    *,
    now: datetime | None = None,
) -> Borrower:
    """Same as ``originate_loan_for_new_borrower`` with the loan taken now.

    No installment can be due yet, so auto-settlement has nothing to settle.
    """
    now = as_utc(now)
    return originate_loan_for_new_borrower(
        repository, name, email, phone, terms, now, auto_settle_past_due, now=now
    )


def add_loan_to_borrower(
    repository: LoanRepository,
    borrower_id: int,
    terms: LoanTerms,
    date_taken: datetime,
    auto_settle_past_due: bool = False,
    *,
    now: datetime | None = None,
) -> Loan:
    """Add a loan with its payment schedule to an existing borrower.

    Raises
    ------
    ValidationError
        Before anything is written.
    EntityNotFoundError
        If the borrower does not exist; no loan is created.
    OriginationError
        If the loan or schedule could not be created.
    """
    origination = LoanOrigination(repository, terms, date_taken, auto_settle_past_due, now)
    origination.validate()
    origination.verify_borrower(borrower_id)
    origination.create_loan()
    origination.create_schedule()

    loan = origination.loan_with_installments()
    logger.info(
        "Added loan %d (%d installments) to borrower %d",
        loan.loan_id, len(loan.installments), borrower_id,
        extra={"extra": origination.log_context()},
    )
    return loan


def add_loan_to_borrower_now(
    repository: LoanRepository,
    borrower_id: int,
    terms: LoanTerms,
    auto_settle_past_due: bool = False,
    *,
    now: datetime | None = None,
) -> Loan:
    """Same as ``add_loan_to_borrower`` with the loan taken now."""
    now = as_utc(now)
    return add_loan_to_borrower(
        repository, borrower_id, terms, now, auto_settle_past_due, now=now
    )


def _installments_of(repository: LoanRepository, loan_id: int) -> list[Installment]:
    try:
        return repository.get_installments_by_loan(loan_id)
    except StorageError as exc:
        raise StorageError(f"failed to get installments for loan {loan_id}: {exc}") from exc


def get_full_loan(repository: LoanRepository, loan_id: int) -> Loan:
    """Fetch a loan with all of its installments."""
    loan = repository.get_loan(loan_id)
    return replace(loan, installments=_installments_of(repository, loan_id))


def get_full_borrower(repository: LoanRepository, borrower_id: int) -> Borrower:
    """Fetch a borrower with every loan and every installment."""
    borrower = repository.get_borrower(borrower_id)
    try:
        loans = repository.get_loans_by_borrower(borrower_id)
    except StorageError as exc:
        raise StorageError(f"failed to get loans for borrower {borrower_id}: {exc}") from exc

    return replace(
        borrower,
        loans=[replace(loan, installments=_installments_of(repository, loan.loan_id)) for loan in loans],
    )
