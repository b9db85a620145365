"""
Worker construction.

Two seams build workers: ``build_worker`` turns a validated roster entry
(``WorkerConfig``) into a long-lived worker, and ``PlanWorkerFactory`` builds a
fresh single-use worker for each plan node. Both look the worker class up by
its capability kind in the registry below.
"""

from typing import Any, Callable, Dict, Optional, Type

import loguru
from langchain_core.language_models import BaseChatModel
from langchain_core.tools import BaseTool

from agent_orchestra.config.llm import LLMConfig
from agent_orchestra.config.workers import (
    BaseWorkerConfig,
    SearchWorkerConfig,
    WorkerConfig,
)
from agent_orchestra.tools import get_tool

from ..errors import OrchestratorConfigError
from ..plan import SubtaskNode
from .base import Worker, template_formatter
from .llm_worker import LLMWorker
from .search_worker import SearchAugmentedWorker

_worker_registry: Dict[str, Type[Worker]] = {}

WorkerFactory = Callable[[SubtaskNode], Worker]


def register_worker(kind: str):
    """Decorator to register a worker class under a capability kind."""

    def decorator(cls: Type[Worker]) -> Type[Worker]:
        _worker_registry[kind] = cls
        return cls

    return decorator


def list_worker_kinds() -> list[str]:
    return list(_worker_registry.keys())


def get_worker_cls(kind: str) -> Type[Worker]:
    if kind not in _worker_registry:
        raise ValueError(f"Worker kind '{kind}' not found in registry")
    return _worker_registry[kind]


register_worker("llm")(LLMWorker)
register_worker("search")(SearchAugmentedWorker)


def _kind_kwargs(config: BaseWorkerConfig) -> Dict[str, Any]:
    if isinstance(config, SearchWorkerConfig):
        return {
            "max_searches": config.max_searches,
            "search_tool": config.search_tool,
        }
    return {}


def build_worker(
    config: WorkerConfig,
    default_llm: Optional[LLMConfig] = None,
    logger: Optional["loguru.Logger"] = None,
) -> Worker:
    """Build a roster worker; its ``llm`` falls back to ``default_llm``."""
    llm_config = config.llm or default_llm
    if llm_config is None:
        raise OrchestratorConfigError(
            f"Worker '{config.role}' has no llm config and no default was given"
        )
    kwargs: Dict[str, Any] = {}
    if config.task_template:
        kwargs["task_formatter"] = template_formatter(config.task_template)
    try:
        return get_worker_cls(config.kind)(
            role=config.role,
            objective=config.objective,
            context=config.context,
            llm=llm_config.get_llm(),
            llm_params=llm_config.invoke_params(),
            logger=logger,
            **_kind_kwargs(config),
            **kwargs,
        )
    except ValueError as e:
        raise OrchestratorConfigError(f"Cannot build worker '{config.role}': {e}") from e


class PlanWorkerFactory:
    """
    Builds one worker per plan node: a search-augmented worker when the node
    asks for the augmented capability, a plain LLM worker otherwise.
    """

    def __init__(
        self,
        llm: BaseChatModel,
        llm_params: Optional[Dict[str, Any]] = None,
        max_searches: int = 3,
        search_tool: str | BaseTool = "web_search",
        logger: Optional["loguru.Logger"] = None,
    ):
        self.llm = llm
        self.llm_params = llm_params or {}
        self.max_searches = max_searches
        # unknown tool names fail here rather than mid-run
        if isinstance(search_tool, str):
            try:
                search_tool = get_tool(search_tool)
            except ValueError as e:
                raise OrchestratorConfigError(f"Cannot build plan workers: {e}") from e
        self.search_tool = search_tool
        self.logger = logger

    @classmethod
    def from_config(cls, llm_config: LLMConfig, **kwargs) -> "PlanWorkerFactory":
        return cls(
            llm=llm_config.get_llm(), llm_params=llm_config.invoke_params(), **kwargs
        )

    def __call__(self, node: SubtaskNode) -> Worker:
        kind = "search" if node.use_augmented_capability else "llm"
        kwargs: Dict[str, Any] = {}
        if kind == "search":
            kwargs = {"max_searches": self.max_searches, "search_tool": self.search_tool}
            # plan instructions are already phrased for the agent
            kwargs["task_formatter"] = None
        return get_worker_cls(kind)(
            role=node.assigned_role,
            objective=node.objective,
            instructions=node.instructions,
            llm=self.llm,
            llm_params=self.llm_params,
            logger=self.logger,
            **kwargs,
        )
