from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from agent_orchestra.utils import write_yaml

from .plan import ExecutionResult, Plan


class StepRecord(BaseModel):
    """One link of a linear chain."""

    role: str
    input: str
    output: Optional[str] = None
    error: Optional[str] = None


class OrchestrationRun(BaseModel):
    """Everything one ``orchestrate`` call produced, for inspection and persistence."""

    task: str
    variant: str
    orchestrator: Optional[str] = None
    plan: Optional[Plan] = None
    execution_order: List[str] = Field(default_factory=list)
    selected_roles: List[str] = Field(default_factory=list)
    steps: List[StepRecord] = Field(default_factory=list)
    results: Dict[str, str] = Field(default_factory=dict)
    final_answer: str = ""
    elapsed_seconds: float = 0.0

    def record_results(self, results: ExecutionResult) -> None:
        self.results = results.as_texts()

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(exclude={"plan"})
        if self.plan is not None:
            data["plan"] = self.plan.to_wire()
        return data

    def save(self, path: str) -> None:
        write_yaml(self.to_dict(), path, use_long_str_representer=True)
