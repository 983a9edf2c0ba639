"""Dependency resolution engine."""

from dataclasses import replace
from typing import TYPE_CHECKING

from cronograma.calendar import WorkingCalendar
from cronograma.exceptions import ResolutionCancelledError
from cronograma.graph import CycleDetector, DependencyGraph
from cronograma.logger import get_logger
from cronograma.models import CorrectionRecord, Dependency, Task

from .config import EngineConfig
from .core import CancellationToken, EngineState, ResolutionResult, ResolutionStatus
from .resolver import DateResolver

logger = get_logger()

if TYPE_CHECKING:
    from cronograma.models import ScheduleSnapshot


class ScheduleEngine:
    """Resolve every dependency of one schedule snapshot.

    A pass goes through ``EngineState`` in order:

    1. LOADED -> GRAPH_BUILT: build the graph, dropping dangling edges
    2. GRAPH_BUILT -> CYCLES_RESOLVED: detect cycles and strip their edges
    3. CYCLES_RESOLVED -> PROPAGATING: sweep the remaining edges in topological order
    4. PROPAGATING -> FIXPOINT: repeat sweeps until nothing moves or the bound is hit

    Only an invalid calendar or a cancellation stops the pass; everything
    else is recorded as a diagnostic and the rest of the schedule is still
    resolved. The snapshot is never mutated.
    """

    def __init__(
        self,
        snapshot: "ScheduleSnapshot",
        config: EngineConfig | None = None,
        cancel_token: CancellationToken | None = None,
    ):
        """Initialize the engine.

        Args:
            snapshot: Tasks, dependencies and calendar of one schedule
            config: Optional engine configuration (iteration bound)
            cancel_token: Optional cancellation signal, checked between sweeps
        """
        self.snapshot = snapshot
        self.config = config or EngineConfig()
        self.cancel_token = cancel_token
        self.state = EngineState.LOADED

    def resolve(self) -> ResolutionResult:
        """Run a full resolution pass.

        Returns:
            ResolutionResult with corrected task copies and all diagnostics

        Raises:
            InvalidCalendarError: If the snapshot's calendar is unusable
            ResolutionCancelledError: If the cancel token fired between sweeps
        """
        self.state = EngineState.LOADED
        calendar = WorkingCalendar(self.snapshot.calendar)
        resolver = DateResolver(calendar)

        tasks = {task.id: replace(task, meta=dict(task.meta)) for task in self.snapshot.tasks}
        diagnostics: list[str] = []
        for task in tasks.values():
            if task.end < task.start:
                diagnostics.append(f"Task {task.name} ends before it starts")
                logger.warning(diagnostics[-1])

        # Build graph
        graph = DependencyGraph(list(tasks.values()), self.snapshot.dependencies)
        for error in graph.dangling:
            diagnostics.append(str(error))
            logger.warning(str(error))
        self.state = EngineState.GRAPH_BUILT

        # Exclude cycles
        detector = CycleDetector(graph)
        cycles = detector.find_cycles()
        cycle_warnings = [detector.format_cycle(cycle) for cycle in cycles]
        for warning in cycle_warnings:
            logger.warning(f"Cycle detected: {warning}")
        for dep in graph.remove_edges(detector.cycle_edges(cycles)):
            diagnostics.append(
                f"Dependency ignored: cycle detected "
                f"({graph.task_name(dep.origin_id)} -> {graph.task_name(dep.dependent_id)})"
            )
            logger.changes(diagnostics[-1])
        self.state = EngineState.CYCLES_RESOLVED

        # Propagate to fixpoint
        edges = graph.ordered_edges()
        bound = self.config.iteration_bound(len(tasks))
        corrections: list[CorrectionRecord] = []
        iterations = 0
        fixpoint_reached = False
        self.state = EngineState.PROPAGATING

        while iterations < bound:
            if self.cancel_token is not None and self.cancel_token.cancelled:
                diagnostics.append(f"Resolution cancelled after {iterations} iteration(s)")
                logger.warning(diagnostics[-1])
                raise ResolutionCancelledError(
                    ResolutionResult(
                        status=ResolutionStatus.CANCELLED,
                        tasks=list(tasks.values()),
                        corrections=corrections,
                        cycle_warnings=cycle_warnings,
                        diagnostics=diagnostics,
                        iterations=iterations,
                    )
                )

            iterations += 1
            logger.checks(f"Iteration {iterations}/{bound}: {len(edges)} dependencies")
            if not self._sweep(edges, tasks, resolver, corrections):
                fixpoint_reached = True
                break

        if fixpoint_reached:
            self.state = EngineState.FIXPOINT
            status = ResolutionStatus.RESOLVED
        else:
            diagnostics.append(
                f"Fixpoint not reached after {iterations} iteration(s): "
                "possible residual inconsistency"
            )
            logger.warning(diagnostics[-1])
            status = ResolutionStatus.FIXPOINT_NOT_REACHED

        logger.changes(f"Resolution finished: {len(corrections)} correction(s)")
        return ResolutionResult(
            status=status,
            tasks=list(tasks.values()),
            corrections=corrections,
            cycle_warnings=cycle_warnings,
            diagnostics=diagnostics,
            iterations=iterations,
            fixpoint_reached=fixpoint_reached,
        )

    def _sweep(
        self,
        edges: list[Dependency],
        tasks: dict[str, Task],
        resolver: DateResolver,
        corrections: list[CorrectionRecord],
    ) -> bool:
        """Apply every edge once; return True if any task moved."""
        changed = False
        for dep in edges:
            origin = tasks[dep.origin_id]
            dependent = tasks[dep.dependent_id]
            logger.checks(f"  Checking {dep} ({origin.name} -> {dependent.name})")

            new_dates = resolver.resolve(origin, dependent, dep)
            if new_dates is None:
                continue

            new_start, new_end = new_dates
            corrections.append(
                CorrectionRecord(
                    task_id=dependent.id,
                    description=f"Tarea {dependent.name} ajustada por dependencia {dep.type.value}",
                    dependency_id=dep.id,
                    old_start=dependent.start,
                    old_end=dependent.end,
                    new_start=new_start,
                    new_end=new_end,
                )
            )
            logger.changes(
                f"  {dependent.name}: {dependent.start.isoformat()} -> {new_start.isoformat()} "
                f"({dep.type.short_name} on {origin.name})"
            )
            dependent.start = new_start
            dependent.end = new_end
            changed = True
        return changed
