"""Loan terms generator."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from decimal import Decimal

from loan_tracker.engine.clock import as_utc
from loan_tracker.generators.base import BaseGenerator
from loan_tracker.models import LoanTerms


class LoanTermsGenerator(BaseGenerator):
    """Generate realistic consumer loan terms."""

    # Principal between $5,000 and $50,000
    LOAN_AMOUNTS = [
        5000, 7500, 10000, 12500, 15000,
        20000, 25000, 30000, 35000, 40000, 50000,
    ]

    # Annual rates between 3% and 18%
    INTEREST_RATES = [
        "0.03", "0.045", "0.06", "0.075", "0.09",
        "0.105", "0.12", "0.135", "0.15", "0.165", "0.18",
    ]

    # 1 to 5 years
    TERM_MONTHS = [12, 24, 36, 48, 60]

    # Days present in every month
    MAX_DAY_DUE = 28

    def generate(self) -> LoanTerms:
        """Generate loan terms.

        Returns
        -------
        LoanTerms
            Terms with a due day between 1 and 28.
        """
        return LoanTerms(
            principal=Decimal(random.choice(self.LOAN_AMOUNTS)),
            annual_rate=Decimal(random.choice(self.INTEREST_RATES)),
            term_months=random.choice(self.TERM_MONTHS),
            day_due=random.randint(1, self.MAX_DAY_DUE),
        )

    def generate_date_taken(
        self,
        now: datetime | None = None,
        max_backdate_days: int = 365,
    ) -> datetime:
        """Random origination date between 1 and ``max_backdate_days`` days ago."""
        days_ago = random.randint(1, max_backdate_days)
        return as_utc(now) - timedelta(days=days_ago)
