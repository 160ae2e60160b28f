"""Borrower identity generator."""

from __future__ import annotations

from typing import Iterator

from loan_tracker.generators.base import BaseGenerator
from loan_tracker.models import BorrowerProfile


class BorrowerGenerator(BaseGenerator):
    """Generate synthetic borrower identities.

    Emails are unique per generator instance, matching the unique email
    constraint of the repositories.
    """

    def generate(self) -> BorrowerProfile:
        """Generate a single borrower identity.

        Returns
        -------
        BorrowerProfile
            Name, unique email and phone number.
        """
        return BorrowerProfile(
            name=self.fake.name(),
            email=self.fake.unique.email(),
            phone=self.fake.phone_number(),
        )

    def generate_batch(self, count: int) -> Iterator[BorrowerProfile]:
        """Generate multiple borrower identities.

        Parameters
        ----------
        count : int
            Number of identities to generate.

        Yields
        ------
        BorrowerProfile
            Generated identities.
        """
        for _ in range(count):
            yield self.generate()
