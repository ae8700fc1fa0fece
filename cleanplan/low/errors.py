"""
Error taxonomy. Every failure of the core maps to exactly one of these
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cleanplan.low.core import Task


class CleanplanError(Exception):
    """Base of all errors raised by cleanplan."""


class OutOfRangeError(CleanplanError, ValueError):
    """Raised when a time value falls outside the valid day bounds."""


class InvalidDurationError(CleanplanError, ValueError):
    """Raised when an item has zero or negative duration."""


class InvalidPolicyError(CleanplanError, ValueError):
    """Raised when a distribution policy is malformed, eg round robin without workers."""

    def __init__(self, field: str, detail: str) -> None:
        super().__init__(f"invalid distribution policy, field '{field}': {detail}")
        self.field = field


class ConflictError(CleanplanError):
    """Raised when the assignment target is occupied by an intersecting task, or cannot take tasks."""

    def __init__(self, detail: str, blocking: "list[Task] | None" = None) -> None:
        super().__init__(detail)
        self.blocking = blocking or []


class StaleProposalError(CleanplanError):
    """Raised when a proposal has been superseded, cancelled or already resolved."""


class AssignmentInFlightError(CleanplanError):
    """Raised when a committed mutation still awaits acknowledgement."""


class PersistenceError(CleanplanError):
    """Raised when the persistence collaborator reports a failure without an exception of its own."""


class EmptyBatchError(CleanplanError, ValueError):
    """Raised when a batch is built from no items at all."""


class BatchTooLargeError(CleanplanError, ValueError):
    """Raised when a batch exceeds the maximum number of tasks created at once."""
