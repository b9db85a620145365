from agent_orchestra.logger import configure_logger, get_logger, logger
from agent_orchestra.orchestration import (
    DependencyGraphOrchestrator,
    ExecutionEngine,
    ExecutionResult,
    FanOutFanInOrchestrator,
    LinearChainOrchestrator,
    OrchestrationRun,
    Orchestrator,
    OrchestratorConfigError,
    OrchestratorRegistry,
    Plan,
    PlanAcquirer,
    Scheduler,
    SubtaskNode,
    Synthesizer,
    WorkerError,
    create_orchestrator_tool,
    parse_plan,
)
