"""Custom exception hierarchy for loan-tracker."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from loan_tracker.origination import OriginationProgress, OriginationStage


class LoanTrackerError(Exception):
    """Base exception for all loan-tracker errors."""


class ValidationError(LoanTrackerError):
    """Raised when an input parameter violates a stated constraint."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} {reason}, got {value!r}")


class EntityNotFoundError(LoanTrackerError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class InvalidEntityStateError(LoanTrackerError):
    """Raised when an entity is in an invalid state for the operation."""


class StorageError(LoanTrackerError):
    """Raised when the persistence layer fails."""


class DuplicateError(StorageError):
    """Raised when a uniqueness constraint is violated."""


class OriginationError(StorageError):
    """Raised when a multi-step origination stops partway.

    Nothing already written is rolled back; ``progress`` holds the
    records that were persisted before the failing stage.
    """

    def __init__(
        self,
        message: str,
        stage: OriginationStage,
        progress: OriginationProgress,
    ) -> None:
        self.stage = stage
        self.progress = progress
        super().__init__(message)


class ConfigurationError(LoanTrackerError):
    """Raised when configuration is invalid or missing."""
