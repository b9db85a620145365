import asyncio
from typing import List, Optional

import loguru

from agent_orchestra.config.orchestrators import DependencyGraphConfig
from agent_orchestra.llm.completion import Collaborator

from ..errors import PlanCycleError, UnresolvedDependencyError
from ..executor import ExecutionEngine
from ..plan import ExecutionResult, Plan, SubtaskNode
from ..planner import PlanAcquirer
from ..run_result import OrchestrationRun
from ..scheduler import Scheduler
from ..synthesizer import Synthesizer
from ..workers import PlanWorkerFactory, WorkerFactory
from .base import Orchestrator, run_sync
from .registry import register_orchestrator

NO_PLAN_RESULT = "Unable to produce an actionable plan for the task."


@register_orchestrator("DependencyGraph")
class DependencyGraphOrchestrator(Orchestrator):
    """
    Plan, schedule, execute, synthesize.

    The collaborator decomposes the task into a plan of subtasks with declared
    dependencies; subtasks run in dependency order (sequentially, or wave by
    wave when ``parallel`` is set) with each one's upstream results appended
    to its instructions, and the collaborator then merges everything into one
    answer.
    """

    variant_tag = "DependencyGraph"

    def __init__(
        self,
        collaborator: Collaborator,
        worker_factory: WorkerFactory,
        strict: bool = False,
        parallel: bool = False,
        worker_timeout: Optional[float] = None,
        reasoning_output: bool = False,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.planner = PlanAcquirer(
            collaborator, logger=self.logger, reasoning_output=reasoning_output
        )
        self.scheduler = Scheduler(strict=strict, logger=self.logger)
        self.engine = ExecutionEngine(worker_factory, logger=self.logger)
        self.synthesizer = Synthesizer(
            collaborator, logger=self.logger, reasoning_output=reasoning_output
        )
        self.parallel = parallel
        self.worker_timeout = worker_timeout

    @classmethod
    def from_config(
        cls,
        config: DependencyGraphConfig,
        name: Optional[str] = None,
        logger: Optional["loguru.Logger"] = None,
    ) -> "DependencyGraphOrchestrator":
        worker_factory = PlanWorkerFactory.from_config(
            config.worker_llm or config.llm,
            max_searches=config.max_searches,
            search_tool=config.search_tool,
            logger=logger,
        )
        return cls(
            collaborator=config.llm.get_collaborator(),
            worker_factory=worker_factory,
            strict=config.strict,
            parallel=config.parallel,
            worker_timeout=config.worker_timeout,
            reasoning_output=config.reasoning_output,
            name=name,
            logger=logger,
        )

    def _plan(self, task: str, run: OrchestrationRun) -> Plan:
        plan = self.planner.acquire(task)
        run.plan = plan
        return plan

    def _finish(
        self,
        task: str,
        run: OrchestrationRun,
        plan: Plan,
        ordered: List[SubtaskNode],
        results: ExecutionResult,
    ) -> str:
        run.record_results(results)
        if results.failed_ids:
            self.logger.warning(f"Subtasks failed: {results.failed_ids}")
        return self.synthesizer.synthesize(task, plan, results, ordered=ordered)

    def _schedule(self, plan: Plan) -> List[List[SubtaskNode]]:
        if self.parallel:
            return self.scheduler.waves(plan)
        return [[node] for node in self.scheduler.order(plan)]

    def _orchestrate(self, task: str, run: OrchestrationRun) -> str:
        # the async path is the one that enforces worker timeouts
        if self.parallel or self.worker_timeout is not None:
            return run_sync(self._aorchestrate(task, run))
        plan = self._plan(task, run)
        if plan.is_empty:
            return NO_PLAN_RESULT
        try:
            ordered = self.scheduler.order(plan)
        except (PlanCycleError, UnresolvedDependencyError) as e:
            self.logger.error(f"Plan rejected: {e}")
            return f"Plan rejected: {e}"
        run.execution_order = [n.id for n in ordered]
        results = self.engine.run(ordered)
        return self._finish(task, run, plan, ordered, results)

    async def _aorchestrate(self, task: str, run: OrchestrationRun) -> str:
        plan = await asyncio.to_thread(self._plan, task, run)
        if plan.is_empty:
            return NO_PLAN_RESULT
        try:
            waves = self._schedule(plan)
        except (PlanCycleError, UnresolvedDependencyError) as e:
            self.logger.error(f"Plan rejected: {e}")
            return f"Plan rejected: {e}"
        ordered = [node for wave in waves for node in wave]
        run.execution_order = [n.id for n in ordered]
        results = await self.engine.arun(waves, timeout=self.worker_timeout)
        return await asyncio.to_thread(self._finish, task, run, plan, ordered, results)
