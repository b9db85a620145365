import asyncio
import concurrent.futures
import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Coroutine, Optional, TypeVar

import loguru

from agent_orchestra.logger import component_logger

from ..run_result import OrchestrationRun

T = TypeVar("T")


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` to completion from sync code, even inside a running event loop."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    # already in async context, drive the coroutine on its own loop in a thread
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
        return executor.submit(asyncio.run, coro).result()


class Orchestrator(ABC):
    """
    Shared contract of every orchestration variant: ``orchestrate(task)``
    always returns a result string, whatever happened underneath. Only
    configuration errors raised at construction time escape.
    """

    variant_tag: ClassVar[str]

    def __init__(self, name: Optional[str] = None, logger: Optional["loguru.Logger"] = None):
        self.name = name
        self.logger = component_logger(f"orchestrator:{name or self.variant_tag}", logger)
        self.last_run: Optional[OrchestrationRun] = None

    def _new_run(self, task: str) -> OrchestrationRun:
        return OrchestrationRun(task=task, variant=self.variant_tag, orchestrator=self.name)

    @classmethod
    @abstractmethod
    def from_config(
        cls,
        config: Any,
        name: Optional[str] = None,
        logger: Optional["loguru.Logger"] = None,
    ) -> "Orchestrator":
        pass

    @abstractmethod
    def _orchestrate(self, task: str, run: OrchestrationRun) -> str:
        pass

    async def _aorchestrate(self, task: str, run: OrchestrationRun) -> str:
        return await asyncio.to_thread(self._orchestrate, task, run)

    def run(self, task: str) -> OrchestrationRun:
        """Orchestrate ``task`` and return the full run record."""
        run = self._new_run(task)
        start = time.time()
        self.logger.info(f"Starting {self.variant_tag} orchestration")
        run.final_answer = self._orchestrate(task, run)
        run.elapsed_seconds = time.time() - start
        self.logger.info(f"Finished {self.variant_tag} orchestration in {run.elapsed_seconds:.2f}s")
        self.last_run = run
        return run

    async def arun(self, task: str) -> OrchestrationRun:
        run = self._new_run(task)
        start = time.time()
        self.logger.info(f"Starting {self.variant_tag} orchestration (async)")
        run.final_answer = await self._aorchestrate(task, run)
        run.elapsed_seconds = time.time() - start
        self.logger.info(f"Finished {self.variant_tag} orchestration in {run.elapsed_seconds:.2f}s")
        self.last_run = run
        return run

    def orchestrate(self, task: str) -> str:
        return self.run(task).final_answer

    async def aorchestrate(self, task: str) -> str:
        return (await self.arun(task)).final_answer
