"""Scheduler package - dependency resolution over a working calendar.

Main entry points:
- ScheduleService: Full pipeline (resolve, milestones, hierarchy roll-up)
- ScheduleEngine: Dependency resolution to a fixpoint
- DateResolver: One dependency constraint applied to one task

Configuration:
- EngineConfig: Iteration bound and timeout
"""

from .config import EngineConfig
from .core import (
    CancellationToken,
    EngineState,
    MilestoneScan,
    ResolutionResult,
    ResolutionStatus,
    RollupResult,
    ScheduleOutcome,
)
from .engine import ScheduleEngine
from .milestones import MilestoneIdentifier
from .resolver import DateResolver
from .rollup import HierarchyRollup
from .service import ScheduleService

__all__ = [
    "CancellationToken",
    "DateResolver",
    "EngineConfig",
    "EngineState",
    "HierarchyRollup",
    "MilestoneIdentifier",
    "MilestoneScan",
    "ResolutionResult",
    "ResolutionStatus",
    "RollupResult",
    "ScheduleEngine",
    "ScheduleOutcome",
    "ScheduleService",
]
