"""Pytest configuration and fixtures for cronograma tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime

import pytest

from cronograma.calendar import WorkingCalendar, WorkingCalendarConfig
from cronograma.logger import reset_logger
from cronograma.models import Dependency, DependencyType, ScheduleSnapshot, Task


def dt(text: str) -> datetime:
    """Parse a compact ISO datetime ("2025-01-06T08:00")."""
    return datetime.fromisoformat(text)


@pytest.fixture(autouse=True)
def silent_logger() -> Iterator[None]:
    """Keep the cronograma logger silent between tests."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def calendar() -> WorkingCalendar:
    """Standard calendar: Monday-Friday, 08:00-12:00 and 13:00-17:00."""
    return WorkingCalendar(WorkingCalendarConfig())


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Factory for tasks; the name defaults to the ID."""

    def _make(
        task_id: str, start: str, end: str, *, name: str | None = None, parent: str | None = None
    ) -> Task:
        return Task(
            id=task_id, name=name or task_id, start=dt(start), end=dt(end), parent_id=parent
        )

    return _make


@pytest.fixture
def make_dep() -> Callable[..., Dependency]:
    """Factory for dependencies with auto-numbered IDs."""
    counter = iter(range(1, 1000))

    def _make(
        origin: str,
        dependent: str,
        dep_type: DependencyType = DependencyType.FINISH_TO_START,
        lag: int = 0,
        *,
        dep_id: str | None = None,
    ) -> Dependency:
        return Dependency(
            id=dep_id or f"d{next(counter)}",
            origin_id=origin,
            dependent_id=dependent,
            type=dep_type,
            lag_minutes=lag,
        )

    return _make


@pytest.fixture
def make_snapshot() -> Callable[..., ScheduleSnapshot]:
    """Factory for snapshots with the standard calendar unless one is given."""

    def _make(
        tasks: list[Task],
        dependencies: list[Dependency] | None = None,
        *,
        calendar: WorkingCalendarConfig | None = None,
    ) -> ScheduleSnapshot:
        return ScheduleSnapshot(
            tasks=tasks,
            dependencies=dependencies or [],
            calendar=calendar or WorkingCalendarConfig(),
        )

    return _make
