"""Data models for Cronograma."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from .calendar import WorkingCalendarConfig


class DependencyType(str, Enum):
    """How the dependent task is constrained by its origin task."""

    FINISH_TO_START = "finish_to_start"
    START_TO_START = "start_to_start"
    FINISH_TO_FINISH = "finish_to_finish"
    START_TO_FINISH = "start_to_finish"

    @property
    def anchors_on_origin_end(self) -> bool:
        """True if the constraint is measured from the origin's end date."""
        return self in (DependencyType.FINISH_TO_START, DependencyType.FINISH_TO_FINISH)

    @property
    def constrains_dependent_end(self) -> bool:
        """True if the constraint bounds the dependent's end rather than its start."""
        return self in (DependencyType.FINISH_TO_FINISH, DependencyType.START_TO_FINISH)

    @property
    def short_name(self) -> str:
        """Two-letter abbreviation (FS, SS, FF, SF)."""
        return _SHORT_NAMES[self]


_SHORT_NAMES = {
    DependencyType.FINISH_TO_START: "FS",
    DependencyType.START_TO_START: "SS",
    DependencyType.FINISH_TO_FINISH: "FF",
    DependencyType.START_TO_FINISH: "SF",
}


class ContainerKind(str, Enum):
    """Levels of the containment hierarchy above tasks."""

    ACTIVITY = "activity"
    EDT = "edt"
    PHASE = "phase"

    @property
    def label(self) -> str:
        """Display label used in roll-up messages."""
        return _CONTAINER_LABELS[self]


_CONTAINER_LABELS = {
    ContainerKind.ACTIVITY: "Actividad",
    ContainerKind.EDT: "EDT",
    ContainerKind.PHASE: "Fase",
}


def _default_dict() -> dict[str, Any]:
    return {}


@dataclass
class Task:
    """A schedulable unit of work."""

    id: str
    name: str
    start: datetime
    end: datetime
    parent_id: str | None = None  # Activity / EDT / phase containing this task
    is_milestone: bool = False  # Derived by MilestoneIdentifier, never authoritative
    meta: dict[str, Any] = field(default_factory=_default_dict)

    @property
    def duration(self) -> timedelta:
        """Wall-clock span between start and end."""
        return self.end - self.start


@dataclass(frozen=True)
class Dependency:
    """A directed edge: ``dependent_id`` is constrained by ``origin_id``.

    The lag is a signed number of working minutes; negative values express lead time.
    """

    id: str
    origin_id: str
    dependent_id: str
    type: DependencyType = DependencyType.FINISH_TO_START
    lag_minutes: int = 0

    def __str__(self) -> str:
        lag = f" {self.lag_minutes:+d}m" if self.lag_minutes else ""
        return f"{self.origin_id} -[{self.type.short_name}{lag}]-> {self.dependent_id}"


@dataclass
class Container:
    """A non-leaf node of the hierarchy (activity, EDT or phase)."""

    id: str
    name: str
    kind: ContainerKind = ContainerKind.ACTIVITY
    start: datetime | None = None
    end: datetime | None = None
    parent_id: str | None = None


@dataclass(frozen=True)
class CorrectionRecord:
    """One date adjustment produced by the engine."""

    task_id: str
    description: str
    dependency_id: str | None = None
    old_start: datetime | None = None
    old_end: datetime | None = None
    new_start: datetime | None = None
    new_end: datetime | None = None

    def __str__(self) -> str:
        return self.description


def _default_tasks() -> list[Task]:
    return []


def _default_dependencies() -> list[Dependency]:
    return []


def _default_containers() -> list[Container]:
    return []


@dataclass
class ScheduleSnapshot:
    """Everything the engine needs for one schedule, loaded up front.

    The engine never re-fetches anything while resolving; one snapshot per
    schedule keeps concurrent resolutions of different schedules independent.
    """

    tasks: list[Task] = field(default_factory=_default_tasks)
    dependencies: list[Dependency] = field(default_factory=_default_dependencies)
    containers: list[Container] = field(default_factory=_default_containers)
    calendar: WorkingCalendarConfig = field(default_factory=WorkingCalendarConfig)
