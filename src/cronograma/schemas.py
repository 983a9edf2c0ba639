"""Pydantic schemas for schedule snapshot YAML data."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .calendar import WorkingCalendarConfig
from .models import ContainerKind, DependencyType

_TYPE_ALIASES = {
    "fs": DependencyType.FINISH_TO_START,
    "ss": DependencyType.START_TO_START,
    "ff": DependencyType.FINISH_TO_FINISH,
    "sf": DependencyType.START_TO_FINISH,
}


class TaskSchema(BaseModel):
    """Schema for one task, keyed by its ID in the ``tasks`` section."""

    name: str | None = None  # Defaults to the task ID
    start: datetime
    end: datetime
    parent: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)


class DependencySchema(BaseModel):
    """Schema for one entry of the ``dependencies`` section."""

    id: str | None = None  # Generated from the position when omitted
    origin: str
    dependent: str
    type: DependencyType = DependencyType.FINISH_TO_START
    lag_minutes: int = 0

    @field_validator("origin", "dependent", "id", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> Any:
        """YAML reads numeric IDs as ints."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("type", mode="before")
    @classmethod
    def accept_short_names(cls, v: Any) -> Any:
        """Accept FS/SS/FF/SF in any case."""
        if isinstance(v, str):
            return _TYPE_ALIASES.get(v.strip().lower(), v.strip().lower())
        return v


class ContainerSchema(BaseModel):
    """Schema for one container, keyed by its ID in the ``containers`` section."""

    name: str | None = None
    kind: ContainerKind = ContainerKind.ACTIVITY
    parent: str | None = None
    start: datetime | None = None
    end: datetime | None = None


class SnapshotSchema(BaseModel):
    """Schema for the entire snapshot YAML data."""

    calendar: WorkingCalendarConfig = Field(default_factory=WorkingCalendarConfig)
    tasks: dict[str, TaskSchema] = Field(default_factory=dict)
    dependencies: list[DependencySchema] = Field(default_factory=list)
    containers: dict[str, ContainerSchema] = Field(default_factory=dict)

    @field_validator("tasks", "containers", mode="before")
    @classmethod
    def ensure_mapping(cls, v: Any) -> Any:
        """Treat an empty section as empty and coerce numeric keys to strings."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(key): value for key, value in v.items()}  # type: ignore[misc]
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> Any:
        """Treat an empty section as empty."""
        if v is None:
            return []
        return v

    @model_validator(mode="after")
    def check_unique_ids(self) -> SnapshotSchema:
        """Task and container IDs share one namespace."""
        shared = set(self.tasks) & set(self.containers)
        if shared:
            joined = ", ".join(sorted(shared))
            raise ValueError(f"IDs used for both a task and a container: {joined}")
        return self

    @model_validator(mode="after")
    def check_consistent_timezones(self) -> SnapshotSchema:
        """Naive and timezone-aware datetimes cannot be compared."""
        moments = [moment for task in self.tasks.values() for moment in (task.start, task.end)]
        moments.extend(
            moment
            for container in self.containers.values()
            for moment in (container.start, container.end)
            if moment is not None
        )
        if len({moment.utcoffset() is None for moment in moments}) > 1:
            raise ValueError("Dates mix timezone-aware and naive datetimes")
        return self
