"""Single-edge date resolution."""

from datetime import datetime
from typing import TYPE_CHECKING

from cronograma.models import DependencyType

if TYPE_CHECKING:
    from cronograma.calendar import WorkingCalendar
    from cronograma.models import Dependency, Task


class DateResolver:
    """Apply one dependency constraint to its dependent task.

    Dependencies are lower bounds only: a task is pushed later when it
    violates a constraint and is never pulled earlier. Shifts preserve the
    task's wall-clock duration (``end - start``).
    """

    def __init__(self, calendar: "WorkingCalendar") -> None:
        self.calendar = calendar

    def bound(
        self,
        origin_start: datetime,
        origin_end: datetime,
        dependency_type: DependencyType,
        lag_minutes: int,
    ) -> datetime:
        """Compute the earliest allowed date the constraint imposes.

        For FS/SS this bounds the dependent's start, for FF/SF its end. The
        lag is measured in working time from the origin's end (FS, FF) or
        start (SS, SF).
        """
        anchor = origin_end if dependency_type.anchors_on_origin_end else origin_start
        return self.calendar.add_duration(anchor, lag_minutes)

    def minimum_dates(  # noqa: PLR0913 - mirrors the two tasks' intervals plus the edge
        self,
        origin_start: datetime,
        origin_end: datetime,
        dependency_type: DependencyType,
        lag_minutes: int,
        dependent_start: datetime,
        dependent_end: datetime,
    ) -> tuple[datetime, datetime]:
        """Compute the dependent's minimum feasible (start, end).

        Returns the dependent's current dates unchanged when it already
        satisfies the constraint.
        """
        limit = self.bound(origin_start, origin_end, dependency_type, lag_minutes)

        if dependency_type.constrains_dependent_end:
            if dependent_end >= limit:
                return (dependent_start, dependent_end)
            delta = limit - dependent_end
        else:
            if dependent_start >= limit:
                return (dependent_start, dependent_end)
            delta = limit - dependent_start

        return (dependent_start + delta, dependent_end + delta)

    def resolve(
        self, origin: "Task", dependent: "Task", dependency: "Dependency"
    ) -> tuple[datetime, datetime] | None:
        """Compute new dates for ``dependent``, or None if it is already compliant."""
        new_start, new_end = self.minimum_dates(
            origin.start,
            origin.end,
            dependency.type,
            dependency.lag_minutes,
            dependent.start,
            dependent.end,
        )
        if (new_start, new_end) == (dependent.start, dependent.end):
            return None
        return (new_start, new_end)
