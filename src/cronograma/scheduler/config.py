"""Configuration classes for the resolution engine."""

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Configuration for dependency resolution."""

    # Upper bound on propagation sweeps; None means number of tasks + 1
    max_iterations: int | None = Field(default=None, ge=1)
    # Cancel the pass once this many seconds have elapsed (checked between sweeps)
    timeout_seconds: float | None = Field(default=None, gt=0)

    def iteration_bound(self, task_count: int) -> int:
        """Effective number of sweeps allowed for a schedule of ``task_count`` tasks."""
        if self.max_iterations is not None:
            return self.max_iterations
        return task_count + 1
