"""Custom exceptions for Cronograma."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .scheduler.core import ResolutionResult


class CronogramaError(Exception):
    """Base exception for all Cronograma errors."""

    pass


class ValidationError(CronogramaError):
    """Raised when schedule input fails validation."""

    pass


class InvalidCalendarError(ValidationError):
    """Raised when a working calendar cannot be used for date arithmetic.

    Zero working days or non-positive hours per day would make any walk over
    the calendar loop forever, so the whole resolution pass is aborted.
    """

    pass


class CircularDependencyError(ValidationError):
    """Raised when a circular dependency is detected."""

    pass


class DanglingReferenceError(ValidationError):
    """A dependency references a task that is not part of the snapshot.

    The engine does not raise this; it records it as a diagnostic and skips
    the edge.
    """

    def __init__(self, dependency_id: str, missing_task_id: str) -> None:
        self.dependency_id = dependency_id
        self.missing_task_id = missing_task_id
        super().__init__(
            f"Dependency {dependency_id} ignored: references unknown task {missing_task_id}"
        )


class ParseError(CronogramaError):
    """Raised when YAML parsing fails."""

    pass


class ResolutionCancelledError(CronogramaError):
    """Raised when a cancellation signal is observed mid-resolution.

    The partially resolved result (diagnostics collected so far) is attached
    as ``partial``.
    """

    def __init__(self, partial: ResolutionResult) -> None:
        self.partial = partial
        super().__init__(f"Resolution cancelled after {partial.iterations} iteration(s)")
