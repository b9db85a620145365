from typing import Any, Dict, List, Optional

from litellm import _logging as litellm_logging
from pydantic import BaseModel, Field, field_validator, model_validator

from agent_orchestra.orchestration.orchestrators import OrchestratorRegistry
from agent_orchestra.orchestration.orchestrators.registry import validate_config
from agent_orchestra.utils import (
    disable_local_cache,
    enable_local_cache,
    enable_local_logging,
    read_yaml,
)

from .orchestrators import OrchestratorConfig


class RunConfig(BaseModel):
    """Settings for one run of the entry script: the registry table and the tasks to run."""

    orchestrators: Dict[str, OrchestratorConfig]
    orchestrator: str
    tasks: List[str] = Field(min_length=1)
    run_name: str = "orchestration"
    save_dir: Optional[str] = None
    log_level: str = "INFO"
    log_llm_calls: bool = False
    use_disk_cache: bool = False

    @field_validator("orchestrators", mode="before")
    @classmethod
    def _validate_entries(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {name: validate_config(name, config) for name, config in value.items()}

    @model_validator(mode="after")
    def _check_orchestrator(self) -> "RunConfig":
        if self.orchestrator not in self.orchestrators:
            raise ValueError(
                f"orchestrator '{self.orchestrator}' is not one of {list(self.orchestrators)}"
            )
        return self

    def model_post_init(self, context: Any) -> None:
        litellm_logging._disable_debugging()  # type: ignore
        if self.log_llm_calls:
            enable_local_logging(prompt_only=False)
        if self.use_disk_cache:
            enable_local_cache()
        else:
            disable_local_cache()

    @classmethod
    def from_yaml(cls, path: str, **overrides: Any) -> "RunConfig":
        data = read_yaml(path) or {}
        data.update(overrides)
        return cls(**data)

    def get_registry(self) -> OrchestratorRegistry:
        return OrchestratorRegistry(self.orchestrators)

    def get_run_metadata(self) -> Dict[str, Any]:
        ret: Dict[str, Any] = {
            "run_name": self.run_name,
            "orchestrator": self.orchestrator,
            "orchestrators": {
                name: config.model_dump(exclude_none=True)
                for name, config in self.orchestrators.items()
            },
            "tasks": self.tasks,
        }
        if self.save_dir is not None:
            ret["save_dir"] = self.save_dir
        return ret
