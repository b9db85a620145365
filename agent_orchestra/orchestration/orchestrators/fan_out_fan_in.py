import asyncio
import re
from typing import Dict, List, Optional

import loguru

from agent_orchestra.config.orchestrators import FanOutFanInConfig
from agent_orchestra.config.prompts import load_orchestration_prompts
from agent_orchestra.llm.completion import Collaborator
from agent_orchestra.utils import join_with_leading_dash, to_json_str

from ..errors import OrchestratorConfigError
from ..run_result import OrchestrationRun
from ..synthesizer import SYNTHESIS_ERROR
from ..workers import Worker, build_worker
from .base import Orchestrator, run_sync
from .registry import register_orchestrator

NO_AGENTS_SENTINEL = "NO RELEVANT AGENTS"
NO_SUITABLE_AGENTS = "No suitable specialist agents found for the task."
LIST_MARKER = re.compile(r"^\s*(?:[-*•]+|\d+[.)])\s*")


def parse_selection(response: str, roster: List[Worker], logger=None) -> List[Worker]:
    """
    Map a one-role-per-line selection answer onto roster workers.

    Bullets, numbering, quotes and a leading "Role:" label are stripped and
    roles are matched case-insensitively. The result keeps roster order and
    has no duplicates.
    """
    if NO_AGENTS_SENTINEL.lower() in response.lower():
        return []
    by_role: Dict[str, Worker] = {w.role.lower(): w for w in roster}
    chosen = set()
    for line in response.splitlines():
        role = LIST_MARKER.sub("", line).strip().strip("\"'`*").strip()
        if role.lower().startswith("role:"):
            role = role[len("role:") :].strip()
        if not role:
            continue
        if role.lower() in by_role:
            chosen.add(role.lower())
        elif logger is not None:
            logger.warning(f"Selected role {role!r} is not in the roster, ignoring it")
    return [w for w in roster if w.role.lower() in chosen]


@register_orchestrator("FanOutFanIn")
class FanOutFanInOrchestrator(Orchestrator):
    """
    Selects the relevant workers of a fixed roster, runs them independently
    on the task and synthesizes their answers.
    """

    variant_tag = "FanOutFanIn"

    def __init__(
        self,
        workers: List[Worker],
        collaborator: Collaborator,
        parallel: bool = True,
        **kwargs,
    ):
        super().__init__(**kwargs)
        if not workers:
            raise OrchestratorConfigError("FanOutFanIn needs a non-empty list of workers")
        if collaborator is None:
            raise OrchestratorConfigError("FanOutFanIn needs a collaborator for selection and synthesis")
        self.workers = list(workers)
        self.collaborator = collaborator
        self.parallel = parallel
        prompts = load_orchestration_prompts()
        self.selection_prompt = prompts.get_template("selection")
        self.specialist_prompt = prompts.get_template("specialist", with_base=False)
        self.synthesis_prompt = prompts.get_template("fan_in_synthesis")

    @classmethod
    def from_config(
        cls,
        config: FanOutFanInConfig,
        name: Optional[str] = None,
        logger: Optional["loguru.Logger"] = None,
    ) -> "FanOutFanInOrchestrator":
        workers = [build_worker(w, default_llm=config.llm, logger=logger) for w in config.workers]
        return cls(
            workers=workers,
            collaborator=config.llm.get_collaborator(),
            parallel=config.parallel,
            name=name,
            logger=logger,
        )

    def select(self, task: str) -> List[Worker]:
        """Ask the collaborator which roster workers should take part. Failure selects none."""
        agent_descriptions = "\n".join(w.describe() for w in self.workers)
        messages = self.selection_prompt.compile(
            task=task,
            agent_descriptions=agent_descriptions,
            no_agents_sentinel=NO_AGENTS_SENTINEL,
        )
        try:
            response = self.collaborator.submit(messages)
        except Exception as e:
            self.logger.error(f"Agent selection failed: {e}")
            return []
        selected = parse_selection(response, self.workers, logger=self.logger)
        self.logger.info(f"Selected agents: {[w.role for w in selected]}")
        return selected

    def worker_task(self, worker: Worker, task: str) -> str:
        if worker.task_formatter is not None:
            return worker.format_task(task)
        return self.specialist_prompt.compile_text(
            role=worker.role, objective=worker.objective, task=task
        )

    def _execute(self, worker: Worker, task: str) -> str:
        try:
            output = worker.execute(self.worker_task(worker, task))
        except Exception as e:
            self.logger.warning(f"Specialist {worker.role} failed: {e}")
            return f"Error executing task: {e}"
        return output if isinstance(output, str) else to_json_str(output)

    def synthesize(self, task: str, responses: Dict[str, str]) -> str:
        responses_text = join_with_leading_dash(
            [f"Agent {role}: {response}" for role, response in responses.items()]
        )
        messages = self.synthesis_prompt.compile(task=task, responses=responses_text)
        try:
            return self.collaborator.submit(messages)
        except Exception as e:
            self.logger.error(f"Fan-in synthesis failed: {e}")
            return SYNTHESIS_ERROR

    def _finish(self, task: str, run: OrchestrationRun, selected: List[Worker], outputs: List[str]) -> str:
        responses = {w.role: out for w, out in zip(selected, outputs)}
        run.results = dict(responses)
        return self.synthesize(task, responses)

    def _orchestrate(self, task: str, run: OrchestrationRun) -> str:
        if self.parallel:
            return run_sync(self._aorchestrate(task, run))
        selected = self.select(task)
        run.selected_roles = [w.role for w in selected]
        if not selected:
            return NO_SUITABLE_AGENTS
        outputs = [self._execute(w, task) for w in selected]
        return self._finish(task, run, selected, outputs)

    async def _aorchestrate(self, task: str, run: OrchestrationRun) -> str:
        selected = await asyncio.to_thread(self.select, task)
        run.selected_roles = [w.role for w in selected]
        if not selected:
            return NO_SUITABLE_AGENTS
        if self.parallel:
            outputs = await asyncio.gather(
                *(asyncio.to_thread(self._execute, w, task) for w in selected)
            )
        else:
            outputs = [await asyncio.to_thread(self._execute, w, task) for w in selected]
        return await asyncio.to_thread(self._finish, task, run, selected, list(outputs))
