from typing import Optional

import loguru

from agent_orchestra.config.prompts import NamedPrompt, load_orchestration_prompts
from agent_orchestra.llm.completion import Collaborator
from agent_orchestra.llm.response_parser import extract_final_answer
from agent_orchestra.logger import PLAN_LEVEL_NAME, component_logger

from .plan import Plan
from .plan_parser import parse_plan


class PlanAcquirer:
    """Asks the collaborator to decompose a task and parses its answer into a Plan."""

    def __init__(
        self,
        collaborator: Collaborator,
        logger: Optional["loguru.Logger"] = None,
        prompt: Optional[NamedPrompt] = None,
        reasoning_output: bool = False,
    ):
        self.collaborator = collaborator
        self.logger = component_logger("planner", logger)
        self.prompt = prompt or load_orchestration_prompts().get_template("planning")
        self.reasoning_output = reasoning_output

    def build_request(self, task: str):
        return self.prompt.compile(task=task)

    def acquire(self, task: str) -> Plan:
        """Never raises: a failed request or unparseable answer gives an empty Plan."""
        try:
            raw = self.collaborator.submit(self.build_request(task))
        except Exception as e:
            self.logger.error(f"Plan request failed: {e}")
            return Plan()

        plan = parse_plan(raw)
        if plan.is_empty and self.reasoning_output:
            plan = parse_plan(extract_final_answer(raw))
        self.logger.bind(plan=plan.to_wire()).log(
            PLAN_LEVEL_NAME, f"Acquired plan with {len(plan)} subtasks"
        )
        return plan
