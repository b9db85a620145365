from typing import List, Optional

import loguru

from agent_orchestra.config.orchestrators import LinearChainConfig
from agent_orchestra.utils import to_json_str, truncate

from ..errors import OrchestratorConfigError
from ..run_result import OrchestrationRun, StepRecord
from ..workers import Worker, build_worker
from .base import Orchestrator
from .registry import register_orchestrator


@register_orchestrator("LinearChain")
class LinearChainOrchestrator(Orchestrator):
    """
    Fixed pipeline: the output of worker ``i`` is the input of worker ``i + 1``.
    The first failure stops the chain and is reported as the result.
    """

    variant_tag = "LinearChain"

    def __init__(self, workers: List[Worker], **kwargs):
        super().__init__(**kwargs)
        if not workers:
            raise OrchestratorConfigError("LinearChain needs a non-empty list of workers")
        self.workers = list(workers)

    @classmethod
    def from_config(
        cls,
        config: LinearChainConfig,
        name: Optional[str] = None,
        logger: Optional["loguru.Logger"] = None,
    ) -> "LinearChainOrchestrator":
        workers = [build_worker(w, default_llm=config.llm, logger=logger) for w in config.workers]
        return cls(workers=workers, name=name, logger=logger)

    def _orchestrate(self, task: str, run: OrchestrationRun) -> str:
        current = task
        for i, worker in enumerate(self.workers):
            self.logger.info(f"Step {i + 1}/{len(self.workers)}: {worker.role}")
            try:
                output = worker.execute(worker.format_task(current))
            except Exception as e:
                self.logger.error(f"Chain failed at step {i + 1} ({worker.role}): {e}")
                run.steps.append(StepRecord(role=worker.role, input=current, error=str(e)))
                return f"Error in agent chain at step {i + 1} ({worker.role}): {e}"
            output = output if isinstance(output, str) else to_json_str(output)
            self.logger.debug(f"Step {i + 1} output: {truncate(output)}")
            run.steps.append(StepRecord(role=worker.role, input=current, output=output))
            current = output
        return current
