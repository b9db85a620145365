from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Optional

import loguru

from agent_orchestra.logger import component_logger

from ..errors import WorkerError

TaskFormatter = Callable[[str, "Worker"], str]


def template_formatter(template: str) -> TaskFormatter:
    """Build a formatter that fills ``{{task}}``, ``{{role}}`` and ``{{objective}}``."""

    def _format(task: str, worker: "Worker") -> str:
        return (
            template.replace("{{task}}", task)
            .replace("{{role}}", worker.role)
            .replace("{{objective}}", worker.objective)
        )

    return _format


def quote_task(task: str, worker: "Worker") -> str:
    return f'"{task}"'


class Worker(ABC):
    """
    An agent that carries out one unit of work.

    Workers are built either from a roster entry (linear chains, fan-out) or
    from a plan node. ``execute`` returns the worker's output text and raises
    on failure; isolating failures is the caller's job.
    """

    kind: ClassVar[str] = "base"
    use_augmented_capability: ClassVar[bool] = False

    def __init__(
        self,
        role: str,
        objective: str = "",
        context: str = "",
        instructions: str = "",
        task_formatter: Optional[TaskFormatter] = None,
        logger: Optional["loguru.Logger"] = None,
    ):
        self.role = role
        self.objective = objective
        self.context = context
        self.instructions = instructions
        self.task_formatter = task_formatter
        self.logger = component_logger(f"worker:{role}", logger)

    def format_task(self, task: str) -> str:
        if self.task_formatter is not None:
            return self.task_formatter(task, self)
        return task

    def describe(self) -> str:
        return f"- Role: {self.role}, Objective: {self.objective}"

    def execute(self, instructions: Optional[str] = None) -> Any:
        """Run the worker on ``instructions`` (defaults to the ones it was built with)."""
        instructions = self.instructions if instructions is None else instructions
        try:
            output = self._run(instructions)
        except WorkerError:
            raise
        except Exception as e:
            raise WorkerError(str(e), role=self.role) from e
        return output

    @abstractmethod
    def _run(self, instructions: str) -> Any:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(role={self.role!r})"
