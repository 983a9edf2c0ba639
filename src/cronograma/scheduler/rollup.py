"""Roll task dates up the containment hierarchy."""

from dataclasses import replace
from datetime import datetime

from cronograma.logger import get_logger
from cronograma.models import Container, Task

from .core import RollupResult

logger = get_logger()


class HierarchyRollup:
    """Keep every container's interval equal to the span of its children.

    Children of a container are the tasks and sub-containers whose
    ``parent_id`` names it. Containers are processed bottom-up (by height in
    the tree), so a phase sees the already rolled-up dates of its EDTs and
    activities.

    A ``parent_id`` that names no container is reported and the child is
    treated as a root. Containers that are their own ancestor are reported
    and left untouched.
    """

    def __init__(self, containers: list[Container], tasks: list[Task]) -> None:
        self.containers = containers
        self.tasks = tasks

    def propagate(self) -> RollupResult:
        """Recompute container dates from their children.

        Containers without children keep their dates.

        Returns:
            RollupResult with container copies, change messages and diagnostics
        """
        containers = {c.id: replace(c) for c in self.containers}
        diagnostics = self._check_references(containers)
        looped = self._find_loops(containers)
        for container_id in (cid for cid in containers if cid in looped):
            diagnostics.append(
                f"Container {containers[container_id].name} is part of a containment loop; skipped"
            )
            logger.warning(diagnostics[-1])

        child_tasks, child_containers = self._children(containers, looped)
        heights = self._heights(containers, child_containers, looped)
        order = sorted(
            (cid for cid in containers if cid not in looped),
            key=lambda cid: heights[cid],
        )

        changes: list[str] = []
        for container_id in order:
            container = containers[container_id]
            spans: list[tuple[datetime, datetime]] = [
                (task.start, task.end) for task in child_tasks[container_id]
            ]
            spans.extend(
                (child.start, child.end)
                for child in (containers[cid] for cid in child_containers[container_id])
                if child.start is not None and child.end is not None
            )
            if not spans:
                continue

            new_start = min(start for start, _ in spans)
            new_end = max(end for _, end in spans)
            label = f"{container.kind.label} {container.name}"
            if container.start != new_start:
                changes.append(f"{label}: inicio ajustado a {new_start.isoformat()}")
                logger.changes(changes[-1])
                container.start = new_start
            if container.end != new_end:
                changes.append(f"{label}: fin ajustado a {new_end.isoformat()}")
                logger.changes(changes[-1])
                container.end = new_end

        return RollupResult(
            containers=list(containers.values()),
            changes=changes,
            diagnostics=diagnostics,
        )

    def find_violations(self) -> list[str]:
        """List containment problems without changing anything.

        Returns:
            One message per child whose interval is not enclosed by its container
        """
        by_id = {c.id: c for c in self.containers}
        violations: list[str] = []

        children: list[tuple[str, str | None, datetime | None, datetime | None]] = [
            (task.name, task.parent_id, task.start, task.end) for task in self.tasks
        ]
        children.extend((c.name, c.parent_id, c.start, c.end) for c in self.containers)

        for name, parent_id, start, end in children:
            parent = by_id.get(parent_id) if parent_id is not None else None
            if parent is None or start is None or end is None:
                continue
            label = f"{parent.kind.label} {parent.name}"
            if parent.start is None or parent.end is None:
                violations.append(f"{label} has no dates but contains {name}")
            elif start < parent.start or end > parent.end:
                violations.append(
                    f"{label} [{parent.start.isoformat()}, {parent.end.isoformat()}] "
                    f"does not enclose {name} [{start.isoformat()}, {end.isoformat()}]"
                )
        return violations

    def _check_references(self, containers: dict[str, Container]) -> list[str]:
        diagnostics: list[str] = []
        for task in self.tasks:
            if task.parent_id is not None and task.parent_id not in containers:
                diagnostics.append(
                    f"Task {task.name} references unknown container {task.parent_id}"
                )
                logger.warning(diagnostics[-1])
        for container in containers.values():
            if container.parent_id is not None and container.parent_id not in containers:
                diagnostics.append(
                    f"Container {container.name} references unknown container "
                    f"{container.parent_id}"
                )
                logger.warning(diagnostics[-1])
        return diagnostics

    @staticmethod
    def _find_loops(containers: dict[str, Container]) -> set[str]:
        """IDs of containers that appear in their own ancestor chain."""
        looped: set[str] = set()
        for container_id in containers:
            seen = {container_id}
            parent_id = containers[container_id].parent_id
            while parent_id is not None and parent_id in containers:
                if parent_id == container_id:
                    looped.add(container_id)
                    break
                if parent_id in seen:
                    break
                seen.add(parent_id)
                parent_id = containers[parent_id].parent_id
        return looped

    def _children(
        self, containers: dict[str, Container], looped: set[str]
    ) -> tuple[dict[str, list[Task]], dict[str, list[str]]]:
        child_tasks: dict[str, list[Task]] = {cid: [] for cid in containers}
        child_containers: dict[str, list[str]] = {cid: [] for cid in containers}
        for task in self.tasks:
            if task.parent_id in child_tasks:
                child_tasks[task.parent_id].append(task)
        for container in containers.values():
            if container.id in looped:
                continue
            if container.parent_id in child_containers:
                child_containers[container.parent_id].append(container.id)
        return child_tasks, child_containers

    @staticmethod
    def _heights(
        containers: dict[str, Container],
        child_containers: dict[str, list[str]],
        looped: set[str],
    ) -> dict[str, int]:
        """Distance from each container down to its deepest descendant container."""
        heights: dict[str, int] = {}

        def height(container_id: str) -> int:
            if container_id not in heights:
                heights[container_id] = 1 + max(
                    (height(child) for child in child_containers[container_id]), default=-1
                )
            return heights[container_id]

        for container_id in containers:
            if container_id not in looped:
                height(container_id)
        return heights
