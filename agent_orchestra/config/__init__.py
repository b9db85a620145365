from .llm import LLMConfig, LLMParams
from .orchestrators import (
    DependencyGraphConfig,
    FanOutFanInConfig,
    LinearChainConfig,
    OrchestratorConfig,
)
from .prompts import NamedPrompt, Prompt, load_orchestration_prompts
from .workers import LLMWorkerConfig, SearchWorkerConfig, WorkerConfig
