"""YAML reader and writer for schedule snapshots."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import Container, Dependency, ScheduleSnapshot, Task
from .schemas import SnapshotSchema

if TYPE_CHECKING:
    from .scheduler.core import ScheduleOutcome
    from .unified_config import UnifiedConfig


def load_snapshot(file_path: Path | str, config: UnifiedConfig | None = None) -> ScheduleSnapshot:
    """Parse a snapshot YAML file.

    The configured calendar is used when the file has no ``calendar`` section.

    Raises:
        ParseError: If the file is missing or is not valid YAML
        ValidationError: If the YAML does not describe a valid snapshot
    """
    path = Path(file_path)
    if not path.exists():
        raise ParseError(f"File not found: {file_path}")

    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse YAML: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("YAML must contain a dictionary at the root level")

    return parse_snapshot(data, config)  # type: ignore[arg-type]


def parse_snapshot(data: dict[str, Any], config: UnifiedConfig | None = None) -> ScheduleSnapshot:
    """Convert loaded YAML data into a ScheduleSnapshot.

    Dependencies without an ``id`` get ``dep-<n>`` from their position.
    References to unknown tasks are kept; the engine reports them.
    """
    try:
        schema = SnapshotSchema(**data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid snapshot structure: {e}") from e

    tasks = [
        Task(
            id=task_id,
            name=task_data.name or task_id,
            start=task_data.start,
            end=task_data.end,
            parent_id=task_data.parent,
            meta=task_data.meta.copy(),
        )
        for task_id, task_data in schema.tasks.items()
    ]

    dependencies: list[Dependency] = []
    seen_ids: set[str] = set()
    for index, dep_data in enumerate(schema.dependencies, start=1):
        dep_id = dep_data.id or f"dep-{index}"
        if dep_id in seen_ids:
            raise ValidationError(f"Duplicate dependency id: '{dep_id}'")
        seen_ids.add(dep_id)
        dependencies.append(
            Dependency(
                id=dep_id,
                origin_id=dep_data.origin,
                dependent_id=dep_data.dependent,
                type=dep_data.type,
                lag_minutes=dep_data.lag_minutes,
            )
        )

    calendar = schema.calendar
    if "calendar" not in data and config is not None:
        calendar = config.calendar

    containers = [
        Container(
            id=container_id,
            name=container_data.name or container_id,
            kind=container_data.kind,
            start=container_data.start,
            end=container_data.end,
            parent_id=container_data.parent,
        )
        for container_id, container_data in schema.containers.items()
    ]

    return ScheduleSnapshot(
        tasks=tasks,
        dependencies=dependencies,
        containers=containers,
        calendar=calendar,
    )


def snapshot_to_dict(
    snapshot: ScheduleSnapshot, outcome: ScheduleOutcome | None = None
) -> dict[str, Any]:
    """Build the YAML document for a snapshot.

    When an outcome with corrected entities is given, its tasks and
    containers replace the snapshot's and the milestone flags are written.
    """
    tasks = snapshot.tasks
    containers = snapshot.containers
    if outcome is not None and outcome.updated_tasks:
        tasks = outcome.updated_tasks
        containers = outcome.updated_containers

    tasks_data: dict[str, dict[str, Any]] = {}
    for task in tasks:
        task_data: dict[str, Any] = {
            "name": task.name,
            "start": task.start.isoformat(),
            "end": task.end.isoformat(),
        }
        if task.parent_id is not None:
            task_data["parent"] = task.parent_id
        if outcome is not None and outcome.updated_tasks:
            task_data["milestone"] = task.is_milestone
        if task.meta:
            task_data["meta"] = task.meta
        tasks_data[task.id] = task_data

    dependencies_data = [
        {
            "id": dep.id,
            "origin": dep.origin_id,
            "dependent": dep.dependent_id,
            "type": dep.type.value,
            "lag_minutes": dep.lag_minutes,
        }
        for dep in snapshot.dependencies
    ]

    containers_data: dict[str, dict[str, Any]] = {}
    for container in containers:
        container_data: dict[str, Any] = {"name": container.name, "kind": container.kind.value}
        if container.parent_id is not None:
            container_data["parent"] = container.parent_id
        if container.start is not None:
            container_data["start"] = container.start.isoformat()
        if container.end is not None:
            container_data["end"] = container.end.isoformat()
        containers_data[container.id] = container_data

    output: dict[str, Any] = {
        "calendar": snapshot.calendar.model_dump(mode="json"),
        "tasks": tasks_data,
        "dependencies": dependencies_data,
    }
    if containers_data:
        output["containers"] = containers_data
    return output


def write_snapshot(
    path: Path, snapshot: ScheduleSnapshot, outcome: ScheduleOutcome | None = None
) -> None:
    """Write a snapshot (with the outcome's corrected entities, if any) to YAML."""
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(
            snapshot_to_dict(snapshot, outcome),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
