from .errors import (
    OrchestratorConfigError,
    PlanCycleError,
    UnresolvedDependencyError,
    WorkerError,
)
from .executor import ExecutionEngine
from .orchestrators import (
    DependencyGraphOrchestrator,
    FanOutFanInOrchestrator,
    LinearChainOrchestrator,
    Orchestrator,
    OrchestratorRegistry,
)
from .plan import ExecutionResult, Plan, SubtaskNode, SubtaskOutcome
from .plan_parser import parse_plan
from .planner import PlanAcquirer
from .run_result import OrchestrationRun, StepRecord
from .scheduler import Scheduler
from .synthesizer import Synthesizer
from .tool import create_orchestrator_tool
from .workers import LLMWorker, SearchAugmentedWorker, Worker, build_worker
