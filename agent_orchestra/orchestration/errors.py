from typing import Optional


class OrchestratorConfigError(ValueError):
    """Missing or invalid orchestrator/worker configuration. Always fatal."""


class WorkerError(RuntimeError):
    """A worker failed to produce a result for its unit of work."""

    def __init__(self, message: str, role: Optional[str] = None):
        super().__init__(message)
        self.role = role


class PlanCycleError(ValueError):
    """Raised in strict mode when the dependency graph contains a cycle."""


class UnresolvedDependencyError(ValueError):
    """Raised in strict mode when a subtask depends on an id missing from the plan."""
