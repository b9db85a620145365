from .registry import (
    OrchestratorRegistry,
    get_orchestrator_cls,
    list_variants,
    register_orchestrator,
    validate_config,
)
from .base import Orchestrator
from .dependency_graph import NO_PLAN_RESULT, DependencyGraphOrchestrator
from .fan_out_fan_in import (
    NO_AGENTS_SENTINEL,
    NO_SUITABLE_AGENTS,
    FanOutFanInOrchestrator,
    parse_selection,
)
from .linear_chain import LinearChainOrchestrator
