"""Loan book scenario for seeding borrowers, loans and schedules."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from loan_tracker.config import SeedConfig
from loan_tracker.engine.clock import as_utc
from loan_tracker.engine.status import loan_standing
from loan_tracker.generators import BorrowerGenerator, LoanTermsGenerator
from loan_tracker.origination import (
    add_loan_to_borrower,
    get_full_borrower,
    originate_loan_for_new_borrower,
)
from loan_tracker.store import InMemoryLoanStore, LoanRepository
from loan_tracker.store.base import status_value

logger = logging.getLogger(__name__)


class LoanBookScenario:
    """Seed a loan book through the origination workflow.

    Loans are spread evenly across borrowers, the remainder going to the
    first borrowers. Every borrower is created together with a first loan,
    so each one ends up with at least one loan.
    """

    def __init__(
        self,
        num_borrowers: int = 5,
        num_loans: int = 10,
        auto_settle_past_due: bool = True,
        max_backdate_days: int = 365,
        seed: int | None = None,
        *,
        config: SeedConfig | None = None,
        repository: LoanRepository | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize loan book scenario.

        Parameters
        ----------
        num_borrowers : int
            Number of borrowers to create.
        num_loans : int
            Total number of loans to distribute.
        auto_settle_past_due : bool
            Mark installments already due as paid on time.
        max_backdate_days : int
            Loans are taken between 1 and this many days before ``now``.
        seed : int | None
            Random seed for reproducibility.
        config : SeedConfig | None
            Optional seeding configuration. If provided, overrides the
            counts, auto-settlement and backdating arguments.
        repository : LoanRepository | None
            Target repository; an in-memory store when omitted.
        now : datetime | None
            Reference instant for backdating and auto-settlement.
        """
        config = config or SeedConfig(
            num_borrowers=num_borrowers,
            num_loans=num_loans,
            auto_settle_past_due=auto_settle_past_due,
            max_backdate_days=max_backdate_days,
        )
        self.config = config
        self.seed = seed
        self.now = as_utc(now)
        self.repository = repository if repository is not None else InMemoryLoanStore()
        self.borrower_ids: list[int] = []

        self._borrower_gen = BorrowerGenerator(seed=seed)
        self._terms_gen = LoanTermsGenerator(seed=seed)

    def loans_for(self, index: int) -> int:
        """Number of loans the borrower at ``index`` receives."""
        base, remainder = divmod(self.config.num_loans, self.config.num_borrowers)
        share = base + 1 if index < remainder else base
        return max(1, share)

    def _date_taken(self) -> datetime:
        return self._terms_gen.generate_date_taken(self.now, self.config.max_backdate_days)

    def generate(self) -> LoanRepository:
        """Create every borrower, loan and installment.

        Returns
        -------
        LoanRepository
            The repository the data was written to.
        """
        logger.info(
            "Starting loan book scenario: %d borrowers, %d loans",
            self.config.num_borrowers,
            self.config.num_loans,
        )

        for index in range(self.config.num_borrowers):
            profile = self._borrower_gen.generate()
            num_loans = self.loans_for(index)
            logger.info(
                "Creating borrower %d/%d: %s (%d loan(s))",
                index + 1, self.config.num_borrowers, profile.name, num_loans,
            )

            borrower = originate_loan_for_new_borrower(
                self.repository,
                profile.name,
                profile.email,
                profile.phone,
                self._terms_gen.generate(),
                self._date_taken(),
                self.config.auto_settle_past_due,
                now=self.now,
            )
            self.borrower_ids.append(borrower.borrower_id)

            for _ in range(1, num_loans):
                add_loan_to_borrower(
                    self.repository,
                    borrower.borrower_id,
                    self._terms_gen.generate(),
                    self._date_taken(),
                    self.config.auto_settle_past_due,
                    now=self.now,
                )

        summary = self.repository.summary()
        logger.info(
            "Generated %d borrowers, %d loans, %d installments",
            summary["borrowers"], summary["loans"], summary["installments"],
        )
        return self.repository

    def get_portfolio_summary(self) -> dict[str, Any]:
        """Get summary statistics for the seeded borrowers.

        Returns
        -------
        dict[str, Any]
            Portfolio summary statistics.
        """
        loans = [
            loan
            for borrower_id in self.borrower_ids
            for loan in get_full_borrower(self.repository, borrower_id).loans
        ]
        if not loans:
            return {}

        standings = [loan_standing(loan, self.now) for loan in loans]

        status_counts: dict[str, int] = {}
        for loan in loans:
            key = status_value(loan.status)
            status_counts[key] = status_counts.get(key, 0) + 1

        return {
            "total_loans": len(loans),
            "total_principal": sum((loan.principal for loan in loans), Decimal("0")),
            "loan_status_distribution": status_counts,
            "installments": sum(s.installments for s in standings),
            "installments_paid": sum(s.fully_paid for s in standings),
            "installments_overdue": sum(s.overdue for s in standings),
            "outstanding_balance": sum((s.outstanding_balance for s in standings), Decimal("0")),
        }
