from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Discriminator, Field, Tag, field_validator

from .llm import LLMConfig


class BaseWorkerConfig(BaseModel):
    """
    A configured agent in an orchestrator's roster.

    ``task_template`` may contain ``{{task}}``, ``{{role}}`` and ``{{objective}}``
    placeholders; when set it replaces the worker's default task formatting.
    """

    role: str
    objective: str = ""
    context: str = ""
    task_template: Optional[str] = None
    llm: Optional[LLMConfig] = None

    @field_validator("role")
    @classmethod
    def _role_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("worker role must not be empty")
        return value.strip()


class LLMWorkerConfig(BaseWorkerConfig):
    kind: Literal["llm"] = "llm"


class SearchWorkerConfig(BaseWorkerConfig):
    kind: Literal["search"] = "search"
    max_searches: int = Field(default=3, ge=0)
    search_tool: str = "web_search"


def _worker_kind(value: Any) -> str:
    if isinstance(value, dict):
        return value.get("kind", "llm")
    return getattr(value, "kind", "llm")


WorkerConfig = Annotated[
    Union[
        Annotated[LLMWorkerConfig, Tag("llm")],
        Annotated[SearchWorkerConfig, Tag("search")],
    ],
    Discriminator(_worker_kind),
]
