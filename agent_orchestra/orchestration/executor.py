import asyncio
from typing import List, Optional

import loguru

from agent_orchestra.config.prompts import NamedPrompt, load_orchestration_prompts
from agent_orchestra.logger import component_logger
from agent_orchestra.utils import truncate

from .errors import WorkerError
from .plan import ExecutionResult, SubtaskNode
from .workers import Worker, WorkerFactory


class ExecutionEngine:
    """
    Runs scheduled subtasks and records exactly one outcome per node.

    A worker failure is recorded as that node's error outcome and the run
    continues. Only a failure to construct a worker propagates.
    """

    def __init__(
        self,
        worker_factory: WorkerFactory,
        logger: Optional["loguru.Logger"] = None,
        context_prompt: Optional[NamedPrompt] = None,
    ):
        self.worker_factory = worker_factory
        self.logger = component_logger("executor", logger)
        self.context_prompt = context_prompt or load_orchestration_prompts().get_template(
            "dependency_context", with_base=False
        )

    def build_instructions(self, node: SubtaskNode, results: ExecutionResult) -> str:
        """Append the results of ``node``'s dependencies to its instructions."""
        if not node.depends_on:
            return node.instructions
        sections = []
        for dep_id in node.depends_on:
            outcome = results.get(dep_id)
            if outcome is None:
                self.logger.warning(
                    f"Result of dependency {dep_id} not available for subtask {node.id}, omitting it"
                )
                continue
            sections.append(f"--- Result of task {dep_id} ---\n{outcome.as_text()}")
        if not sections:
            return node.instructions
        context = self.context_prompt.compile_text(sections="\n\n".join(sections))
        return f"{node.instructions}\n\n{context}"

    def _record(
        self,
        node: SubtaskNode,
        results: ExecutionResult,
        payload=None,
        error: Optional[BaseException] = None,
    ) -> None:
        if error is None:
            self.logger.info(
                f"Subtask {node.id} completed: {truncate(str(payload), 120)!r}"
            )
            results.record_success(node.id, payload)
        else:
            self.logger.warning(f"Subtask {node.id} ({node.assigned_role}) failed: {error}")
            results.record_failure(node.id, str(error) or type(error).__name__)

    def _execute(self, node: SubtaskNode, worker: Worker, results: ExecutionResult) -> None:
        instructions = self.build_instructions(node, results)
        try:
            payload = worker.execute(instructions)
        except Exception as e:
            self._record(node, results, error=e)
        else:
            self._record(node, results, payload=payload)

    def run(self, ordered: List[SubtaskNode]) -> ExecutionResult:
        """Execute nodes one at a time in the given order."""
        results = ExecutionResult()
        for i, node in enumerate(ordered):
            self.logger.info(
                f"Executing subtask {i + 1}/{len(ordered)}: {node.id} ({node.assigned_role})"
            )
            worker = self.worker_factory(node)
            self._execute(node, worker, results)
        return results

    async def _arun_node(
        self,
        node: SubtaskNode,
        results: ExecutionResult,
        timeout: Optional[float],
    ) -> None:
        worker = self.worker_factory(node)
        instructions = self.build_instructions(node, results)
        call = asyncio.to_thread(worker.execute, instructions)
        try:
            if timeout is not None:
                # the worker thread is abandoned, not interrupted
                payload = await asyncio.wait_for(call, timeout)
            else:
                payload = await call
        except asyncio.TimeoutError as e:
            if timeout is None:
                # raised by the worker itself
                self._record(node, results, error=e)
                return
            self._record(
                node,
                results,
                error=WorkerError(
                    f"{node.assigned_role} timed out after {timeout}s",
                    role=node.assigned_role,
                ),
            )
        except Exception as e:
            self._record(node, results, error=e)
        else:
            self._record(node, results, payload=payload)

    async def arun(
        self,
        waves: List[List[SubtaskNode]],
        timeout: Optional[float] = None,
    ) -> ExecutionResult:
        """
        Execute wave by wave. Nodes of one wave run concurrently in worker
        threads; the next wave starts only once every node of the current one
        has an outcome, so dependency results are always complete.
        """
        results = ExecutionResult()
        for i, wave in enumerate(waves):
            self.logger.info(
                f"Executing wave {i + 1}/{len(waves)}: {', '.join(n.id for n in wave)}"
            )
            returned = await asyncio.gather(
                *(self._arun_node(node, results, timeout) for node in wave),
                return_exceptions=True,
            )
            for node, ret in zip(wave, returned):
                if isinstance(ret, BaseException):
                    self.logger.error(f"Could not construct a worker for subtask {node.id}")
                    raise ret
        return results
