"""High-level schedule resolution service."""

from typing import TYPE_CHECKING

from cronograma.exceptions import InvalidCalendarError, ResolutionCancelledError
from cronograma.logger import get_logger

from .config import EngineConfig
from .core import CancellationToken, ResolutionStatus, ScheduleOutcome
from .engine import ScheduleEngine
from .milestones import MilestoneIdentifier
from .rollup import HierarchyRollup

if TYPE_CHECKING:
    from cronograma.models import ScheduleSnapshot

logger = get_logger()


class ScheduleService:
    """Run the full pipeline over one schedule snapshot.

    This service coordinates:
    - ScheduleEngine (dependency resolution to a fixpoint)
    - MilestoneIdentifier (milestone flags on the resolved tasks)
    - HierarchyRollup (container dates from the resolved tasks)

    Fatal engine errors are turned into a failed or cancelled outcome instead
    of propagating to the caller.
    """

    def __init__(
        self,
        snapshot: "ScheduleSnapshot",
        config: EngineConfig | None = None,
        cancel_token: CancellationToken | None = None,
    ):
        """Initialize the service.

        Args:
            snapshot: Schedule to resolve
            config: Optional engine configuration
            cancel_token: Optional cancellation signal; when omitted and the
                config sets ``timeout_seconds``, a deadline token is created per run
        """
        self.snapshot = snapshot
        self.config = config or EngineConfig()
        self.cancel_token = cancel_token

    def run(self) -> ScheduleOutcome:
        """Resolve, scan milestones and roll up the hierarchy.

        Returns:
            ScheduleOutcome ready to persist or display
        """
        token = self.cancel_token
        if token is None and self.config.timeout_seconds is not None:
            token = CancellationToken(self.config.timeout_seconds)

        engine = ScheduleEngine(self.snapshot, self.config, token)
        try:
            resolution = engine.resolve()
        except InvalidCalendarError as e:
            logger.error(f"Resolution failed: {e}")
            return ScheduleOutcome(
                status=ResolutionStatus.FAILED,
                diagnostics=[f"Resolution failed: {e}"],
                error=str(e),
            )
        except ResolutionCancelledError as e:
            # Partial diagnostics only; no corrected entities are handed back
            return ScheduleOutcome(
                status=ResolutionStatus.CANCELLED,
                corrections=e.partial.correction_messages,
                cycle_warnings=e.partial.cycle_warnings,
                diagnostics=e.partial.diagnostics,
                error=str(e),
            )

        scan = MilestoneIdentifier().scan(resolution.tasks)
        rollup = HierarchyRollup(self.snapshot.containers, scan.tasks).propagate()

        return ScheduleOutcome(
            status=resolution.status,
            corrections=resolution.correction_messages,
            cycle_warnings=resolution.cycle_warnings,
            diagnostics=resolution.diagnostics + rollup.diagnostics,
            milestones=scan.milestones,
            rollup_changes=rollup.changes,
            updated_tasks=scan.tasks,
            updated_containers=rollup.containers,
            correction_records=resolution.corrections,
        )
