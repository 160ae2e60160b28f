"""Payment schedule construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from loan_tracker.engine.amortization import compute_monthly_payment
from loan_tracker.engine.clock import as_utc, start_of_day_utc
from loan_tracker.engine.due_dates import compute_due_date
from loan_tracker.exceptions import StorageError
from loan_tracker.models import Installment, LoanTerms
from loan_tracker.store.base import LoanRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallmentRequest:
    """Installment ready to be handed to a repository."""

    installment_number: int
    amount_due: Decimal
    amount_paid: Decimal
    due_date: date
    paid_date: date | None


def plan_schedule(
    terms: LoanTerms,
    date_taken: datetime,
    auto_settle_past_due: bool = False,
    now: datetime | None = None,
) -> list[InstallmentRequest]:
    """Plan every installment of a loan, in installment-number order.

    The monthly payment is computed once and used unrounded for every
    installment. With ``auto_settle_past_due``, installments due strictly
    before ``now`` are marked paid in full on their due date.

    Parameters
    ----------
    terms : LoanTerms
        Validated loan terms.
    date_taken : datetime
        Origination date (UTC).
    auto_settle_past_due : bool
        Settle installments whose due date has already passed.
    now : datetime | None
        Reference instant; defaults to the current time.

    Returns
    -------
    list[InstallmentRequest]
        ``terms.term_months`` requests numbered 1..term_months.
    """
    now = as_utc(now)
    monthly_payment = compute_monthly_payment(terms.principal, terms.annual_rate, terms.term_months)

    requests = []
    for number in range(1, terms.term_months + 1):
        due_date = compute_due_date(date_taken, number, terms.day_due)

        if auto_settle_past_due and start_of_day_utc(due_date) < now:
            amount_paid = monthly_payment
            paid_date = due_date
        else:
            amount_paid = Decimal("0")
            paid_date = None

        requests.append(
            InstallmentRequest(
                installment_number=number,
                amount_due=monthly_payment,
                amount_paid=amount_paid,
                due_date=due_date,
                paid_date=paid_date,
            )
        )

    return requests


def build_schedule(
    repository: LoanRepository,
    loan_id: int,
    terms: LoanTerms,
    date_taken: datetime,
    auto_settle_past_due: bool = False,
    now: datetime | None = None,
    created: list[Installment] | None = None,
    requests: list[InstallmentRequest] | None = None,
) -> list[Installment]:
    """Persist the full schedule of a loan, one installment at a time.

    Installments are created in ascending number order. The first failing
    create stops the build; installments already created are kept and are
    also visible through ``created`` when the caller passes a list.
    A schedule already planned with ``plan_schedule`` can be passed as
    ``requests``; otherwise it is planned here.

    Raises
    ------
    StorageError
        Naming the installment number and loan that failed.
    """
    installments = created if created is not None else []
    if requests is None:
        requests = plan_schedule(terms, date_taken, auto_settle_past_due, now)

    for request in requests:
        try:
            installment = repository.create_installment(
                loan_id,
                request.installment_number,
                request.amount_due,
                request.amount_paid,
                request.due_date,
                request.paid_date,
            )
        except StorageError as exc:
            logger.warning(
                "Installment %d of loan %d failed after %d created: %s",
                request.installment_number, loan_id, len(installments), exc,
            )
            raise StorageError(
                f"failed to create installment {request.installment_number} for loan {loan_id}: {exc}"
            ) from exc
        installments.append(installment)

    logger.debug("Created %d installments for loan %d", len(installments), loan_id)
    return installments
