from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .llm import LLMConfig
from .workers import WorkerConfig


class BaseOrchestratorConfig(BaseModel):
    """Registry entry: a variant tag plus whatever that variant needs to run."""

    description: str = ""


class LinearChainConfig(BaseOrchestratorConfig):
    variant_tag: Literal["LinearChain"]
    workers: List[WorkerConfig] = Field(min_length=1)
    llm: Optional[LLMConfig] = None


class FanOutFanInConfig(BaseOrchestratorConfig):
    variant_tag: Literal["FanOutFanIn"]
    workers: List[WorkerConfig] = Field(min_length=1)
    llm: LLMConfig
    parallel: bool = True


class DependencyGraphConfig(BaseOrchestratorConfig):
    variant_tag: Literal["DependencyGraph"]
    llm: LLMConfig
    worker_llm: Optional[LLMConfig] = None
    strict: bool = False
    parallel: bool = False
    worker_timeout: Optional[float] = Field(default=None, gt=0)
    max_searches: int = Field(default=3, ge=0)
    search_tool: str = "web_search"
    reasoning_output: bool = False


OrchestratorConfig = Annotated[
    Union[LinearChainConfig, FanOutFanInConfig, DependencyGraphConfig],
    Field(discriminator="variant_tag"),
]
