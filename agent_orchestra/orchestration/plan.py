import threading
from typing import Any, Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
    model_validator,
)

from agent_orchestra.logger import logger
from agent_orchestra.utils import to_json_str

DEFAULT_ROLE = "Specialist Agent"
DEFAULT_OBJECTIVE = "Carry out the assigned subtask"
DEFAULT_INSTRUCTIONS = "Carry out the subtask as needed"
AUTO_ID_PREFIX = "task"


def auto_id(index: int) -> str:
    return f"{AUTO_ID_PREFIX}{index + 1}"


def coerce_depends_on(value: Any) -> List[str]:
    """Turn whatever the planner emitted for ``dependsOn`` into an ordered set of ids."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [part for part in value.replace(",", " ").split() if part]
    elif not isinstance(value, (list, tuple)):
        return []
    ret: List[str] = []
    for dep in value:
        if dep is None or isinstance(dep, (dict, list)):
            continue
        dep = str(dep).strip().strip("\"'")
        if dep and dep not in ret:
            ret.append(dep)
    return ret


def coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


class SubtaskNode(BaseModel):
    """One unit of decomposed work. Field aliases follow the planner's JSON shape."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    description: str = Field(
        default="",
        validation_alias=AliasChoices("description", "taskDescription"),
        serialization_alias="taskDescription",
    )
    assigned_role: str = Field(
        default=DEFAULT_ROLE,
        validation_alias=AliasChoices("assigned_role", "agentRole"),
        serialization_alias="agentRole",
    )
    objective: str = Field(
        default=DEFAULT_OBJECTIVE,
        validation_alias=AliasChoices("objective", "agentObjective"),
        serialization_alias="agentObjective",
    )
    instructions: str = Field(
        default=DEFAULT_INSTRUCTIONS,
        validation_alias=AliasChoices("instructions", "agentTaskPrompt"),
        serialization_alias="agentTaskPrompt",
    )
    use_augmented_capability: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "use_augmented_capability",
            "enableAugmentedCapability",
            "enableGoogleSearch",
        ),
        serialization_alias="enableAugmentedCapability",
    )
    depends_on: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("depends_on", "dependsOn"),
        serialization_alias="dependsOn",
    )

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("description", "assigned_role", "objective", "instructions", mode="before")
    @classmethod
    def _text_field(cls, value: Any, info) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        if not isinstance(value, str):
            return to_json_str(value, indent=False)
        return value

    @field_validator("use_augmented_capability", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        return coerce_flag(value)

    @field_validator("depends_on", mode="before")
    @classmethod
    def _depends_on(cls, value: Any) -> List[str]:
        return coerce_depends_on(value)


class Plan(BaseModel):
    """Ordered subtasks for one orchestration call. An empty plan is valid."""

    nodes: List[SubtaskNode] = Field(default_factory=list)

    @model_validator(mode="after")
    def _assign_ids(self) -> "Plan":
        seen = set()
        for i, node in enumerate(self.nodes):
            if not node.id:
                candidate = auto_id(i)
                while candidate in seen:
                    candidate = f"{candidate}_{i + 1}"
                logger.debug(f"Assigned id {candidate} to subtask at position {i}")
                node.id = candidate
            elif node.id in seen:
                candidate = f"{node.id}_{i + 1}"
                while candidate in seen:
                    candidate = f"{candidate}_{i + 1}"
                logger.warning(f"Duplicate subtask id {node.id!r}, renamed to {candidate!r}")
                node.id = candidate
            seen.add(node.id)
        return self

    @classmethod
    def from_subtasks(cls, subtasks: List[Dict[str, Any]]) -> "Plan":
        return cls(nodes=[SubtaskNode.model_validate(s) for s in subtasks])

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def is_empty(self) -> bool:
        return len(self.nodes) == 0

    def ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def get(self, node_id: str) -> Optional[SubtaskNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_wire(self) -> Dict[str, Any]:
        return {"subTasks": [n.model_dump(by_alias=True) for n in self.nodes]}

    def to_json(self) -> str:
        return to_json_str(self.to_wire())


class SubtaskOutcome(BaseModel):
    node_id: str
    output: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_text(self) -> str:
        if not self.ok:
            return f"Error executing subtask: {self.error}"
        if isinstance(self.output, str):
            return self.output
        return to_json_str(self.output)


class ExecutionResult(BaseModel):
    """Per-node outcomes. Every scheduled node ends up with exactly one entry."""

    outcomes: Dict[str, SubtaskOutcome] = Field(default_factory=dict)
    _lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    def record_success(self, node_id: str, payload: Any) -> None:
        with self._lock:
            self.outcomes[node_id] = SubtaskOutcome(node_id=node_id, output=payload)

    def record_failure(self, node_id: str, error: str) -> None:
        with self._lock:
            self.outcomes[node_id] = SubtaskOutcome(node_id=node_id, error=error)

    def get(self, node_id: str) -> Optional[SubtaskOutcome]:
        with self._lock:
            return self.outcomes.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.outcomes

    def __len__(self) -> int:
        return len(self.outcomes)

    def as_texts(self) -> Dict[str, str]:
        return {k: v.as_text() for k, v in self.outcomes.items()}

    @property
    def failed_ids(self) -> List[str]:
        return [k for k, v in self.outcomes.items() if not v.ok]
