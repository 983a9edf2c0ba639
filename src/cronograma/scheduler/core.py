"""Core dataclasses for the resolution pipeline."""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum

from cronograma.models import Container, CorrectionRecord, Task


class EngineState(str, Enum):
    """Stages of one resolution pass, in order."""

    LOADED = "loaded"
    GRAPH_BUILT = "graph_built"
    CYCLES_RESOLVED = "cycles_resolved"
    PROPAGATING = "propagating"
    FIXPOINT = "fixpoint"


class ResolutionStatus(str, Enum):
    """How a resolution pass ended."""

    RESOLVED = "resolved"
    FIXPOINT_NOT_REACHED = "fixpoint_not_reached"
    CANCELLED = "cancelled"
    FAILED = "failed"


class CancellationToken:
    """Cancellation signal checked by the engine between iterations.

    ``cancel()`` is safe to call from another thread. An optional deadline (in
    seconds from creation) cancels the token automatically once it passes.
    """

    def __init__(self, deadline_seconds: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = (
            time.monotonic() + deadline_seconds if deadline_seconds is not None else None
        )

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline


def _default_str_list() -> list[str]:
    return []


def _default_tasks() -> list[Task]:
    return []


def _default_containers() -> list[Container]:
    return []


def _default_corrections() -> list[CorrectionRecord]:
    return []


@dataclass
class ResolutionResult:
    """Output of ``ScheduleEngine.resolve()``."""

    status: ResolutionStatus
    tasks: list[Task]  # Copies of the input tasks with corrected dates
    corrections: list[CorrectionRecord] = field(default_factory=_default_corrections)
    cycle_warnings: list[str] = field(default_factory=_default_str_list)
    diagnostics: list[str] = field(default_factory=_default_str_list)
    iterations: int = 0
    fixpoint_reached: bool = False

    @property
    def correction_messages(self) -> list[str]:
        return [record.description for record in self.corrections]


@dataclass
class MilestoneScan:
    """Output of ``MilestoneIdentifier.scan()``."""

    tasks: list[Task]  # Copies with is_milestone recomputed
    milestones: list[str] = field(default_factory=_default_str_list)


@dataclass
class RollupResult:
    """Output of ``HierarchyRollup.propagate()``."""

    containers: list[Container]  # Copies with rolled-up dates
    changes: list[str] = field(default_factory=_default_str_list)
    diagnostics: list[str] = field(default_factory=_default_str_list)


@dataclass
class ScheduleOutcome:
    """Complete result of resolving one schedule, ready to persist or display."""

    status: ResolutionStatus
    corrections: list[str] = field(default_factory=_default_str_list)
    cycle_warnings: list[str] = field(default_factory=_default_str_list)
    diagnostics: list[str] = field(default_factory=_default_str_list)
    milestones: list[str] = field(default_factory=_default_str_list)
    rollup_changes: list[str] = field(default_factory=_default_str_list)
    updated_tasks: list[Task] = field(default_factory=_default_tasks)
    updated_containers: list[Container] = field(default_factory=_default_containers)
    correction_records: list[CorrectionRecord] = field(default_factory=_default_corrections)
    error: str | None = None  # Set when status is FAILED or CANCELLED

    @property
    def ok(self) -> bool:
        """True unless the pass failed or was cancelled."""
        return self.status in (ResolutionStatus.RESOLVED, ResolutionStatus.FIXPOINT_NOT_REACHED)
