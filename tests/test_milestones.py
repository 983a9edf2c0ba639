"""Tests for milestone identification."""

from collections.abc import Callable

from cronograma.models import Task
from cronograma.scheduler import MilestoneIdentifier

MakeTask = Callable[..., Task]


class TestMilestoneIdentifier:
    """Test the same-calendar-day milestone rule."""

    def test_zero_duration_task_is_milestone(self, make_task: MakeTask) -> None:
        task = make_task("m", "2025-01-03T08:00", "2025-01-03T08:00", name="Entrega")
        scan = MilestoneIdentifier().scan([task])

        assert scan.milestones == ["Hito identificado: Entrega"]
        assert scan.tasks[0].is_milestone

    def test_same_day_task_is_milestone(self, make_task: MakeTask) -> None:
        """Time of day is ignored."""
        task = make_task("t", "2025-01-03T08:00", "2025-01-03T17:00")
        assert MilestoneIdentifier.is_milestone(task)

    def test_multi_day_task_is_not_milestone(self, make_task: MakeTask) -> None:
        task = make_task("t", "2025-01-03T08:00", "2025-01-06T08:00", name="Montaje")
        scan = MilestoneIdentifier().scan([task])

        assert scan.milestones == []
        assert not scan.tasks[0].is_milestone

    def test_stale_flag_is_cleared(self, make_task: MakeTask) -> None:
        """The flag is derived, so a stale True is recomputed."""
        task = make_task("t", "2025-01-03T08:00", "2025-01-04T08:00")
        task.is_milestone = True

        scan = MilestoneIdentifier().scan([task])

        assert not scan.tasks[0].is_milestone
        assert task.is_milestone  # input untouched

    def test_dates_are_not_changed(self, make_task: MakeTask) -> None:
        tasks = [
            make_task("a", "2025-01-03T08:00", "2025-01-03T10:00", name="A"),
            make_task("b", "2025-01-03T08:00", "2025-01-07T10:00", name="B"),
            make_task("c", "2025-01-08T16:00", "2025-01-08T16:00", name="C"),
        ]
        scan = MilestoneIdentifier().scan(tasks)

        assert scan.milestones == ["Hito identificado: A", "Hito identificado: C"]
        assert [(t.start, t.end) for t in scan.tasks] == [(t.start, t.end) for t in tasks]
