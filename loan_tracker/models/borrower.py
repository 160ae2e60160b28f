"""Borrower model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from loan_tracker.models.loan import Loan


@dataclass
class Borrower:
    """Person owning zero or more loans."""

    borrower_id: int
    name: str
    email: str
    phone: str
    created_at: datetime
    loans: list[Loan] = field(default_factory=list)


@dataclass
class BorrowerProfile:
    """Identity fields used to create a borrower."""

    name: str
    email: str
    phone: str
