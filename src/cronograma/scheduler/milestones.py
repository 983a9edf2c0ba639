"""Automatic milestone identification."""

from dataclasses import replace

from cronograma.logger import get_logger
from cronograma.models import Task

from .core import MilestoneScan

logger = get_logger()


class MilestoneIdentifier:
    """Flag tasks whose start and end fall on the same calendar day.

    The time of day is ignored, so a task running 08:00-17:00 on one day is a
    milestone while one ending at 08:00 the next day is not.
    """

    @staticmethod
    def is_milestone(task: Task) -> bool:
        return task.start.date() == task.end.date()

    def scan(self, tasks: list[Task]) -> MilestoneScan:
        """Recompute the milestone flag of every task.

        Args:
            tasks: Resolved tasks (not mutated)

        Returns:
            MilestoneScan with flagged copies and one message per milestone
        """
        flagged: list[Task] = []
        milestones: list[str] = []
        for task in tasks:
            is_milestone = self.is_milestone(task)
            flagged.append(replace(task, is_milestone=is_milestone, meta=dict(task.meta)))
            if is_milestone:
                milestones.append(f"Hito identificado: {task.name}")
                logger.changes(f"Milestone: {task.name} ({task.start.date().isoformat()})")
        return MilestoneScan(tasks=flagged, milestones=milestones)
