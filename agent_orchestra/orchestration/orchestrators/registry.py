from typing import Any, Dict, Mapping, Optional, Type

import loguru
from pydantic import TypeAdapter, ValidationError

from agent_orchestra.config.orchestrators import OrchestratorConfig
from agent_orchestra.logger import component_logger
from agent_orchestra.utils import read_yaml

from ..errors import OrchestratorConfigError
from .base import Orchestrator

_orchestrator_registry: Dict[str, Type[Orchestrator]] = {}

_config_adapter: TypeAdapter = TypeAdapter(OrchestratorConfig)


def register_orchestrator(variant_tag: str):
    """Decorator to register an orchestrator class under its variant tag."""

    def decorator(cls: Type[Orchestrator]) -> Type[Orchestrator]:
        _orchestrator_registry[variant_tag] = cls
        return cls

    return decorator


def list_variants() -> list[str]:
    return list(_orchestrator_registry.keys())


def get_orchestrator_cls(variant_tag: str) -> Type[Orchestrator]:
    if variant_tag not in _orchestrator_registry:
        raise OrchestratorConfigError(f"Orchestrator variant '{variant_tag}' not found in registry")
    return _orchestrator_registry[variant_tag]


# accepted spellings of the registry table keys
KEY_ALIASES = {"type": "variant_tag", "agents": "workers", "llmConfig": "llm"}


def _normalize_keys(config: Any) -> Any:
    if not isinstance(config, Mapping):
        return config
    ret = dict(config)
    for alias, key in KEY_ALIASES.items():
        if alias in ret and key not in ret:
            ret[key] = ret.pop(alias)
    return ret


def validate_config(name: str, config: Any) -> OrchestratorConfig:
    config = _normalize_keys(config)
    try:
        return _config_adapter.validate_python(config)
    except ValidationError as e:
        raise OrchestratorConfigError(f"Invalid configuration for orchestrator '{name}': {e}") from e


class OrchestratorRegistry:
    """
    Name -> configuration table. ``resolve`` builds a fresh orchestrator on
    every call, so resolving the same name twice gives equivalent but
    independent instances.
    """

    def __init__(
        self,
        configs: Optional[Mapping[str, Any]] = None,
        logger: Optional["loguru.Logger"] = None,
    ):
        self.logger = component_logger("registry", logger)
        self._configs: Dict[str, OrchestratorConfig] = {}
        for name, config in (configs or {}).items():
            self.register(name, config)

    @classmethod
    def from_yaml(cls, path: str, logger: Optional["loguru.Logger"] = None) -> "OrchestratorRegistry":
        data = read_yaml(path) or {}
        if "orchestrators" in data:
            data = data["orchestrators"]
        return cls(data, logger=logger)

    def register(self, name: str, config: Any) -> OrchestratorConfig:
        """Validate and store ``config`` under ``name``, replacing any previous entry."""
        if not name:
            raise OrchestratorConfigError("Orchestrator name must not be empty")
        validated = validate_config(name, config)
        if name in self._configs:
            self.logger.warning(f"Replacing configuration of orchestrator '{name}'")
        self._configs[name] = validated
        return validated

    def unregister(self, name: str) -> None:
        if self._configs.pop(name, None) is None:
            raise OrchestratorConfigError(f"Orchestrator '{name}' is not registered")

    def names(self) -> list[str]:
        return list(self._configs.keys())

    def get_config(self, name: str) -> OrchestratorConfig:
        if name not in self._configs:
            raise OrchestratorConfigError(
                f"Orchestrator '{name}' not found. Available: {', '.join(self.names()) or 'none'}"
            )
        return self._configs[name]

    def __contains__(self, name: object) -> bool:
        return name in self._configs

    def resolve(self, name: str, logger: Optional["loguru.Logger"] = None) -> Orchestrator:
        config = self.get_config(name)
        cls = get_orchestrator_cls(config.variant_tag)
        self.logger.debug(f"Resolving orchestrator '{name}' ({config.variant_tag})")
        return cls.from_config(config, name=name, logger=logger)  # type: ignore
