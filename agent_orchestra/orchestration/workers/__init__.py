from .base import TaskFormatter, Worker, quote_task, template_formatter
from .factory import (
    PlanWorkerFactory,
    WorkerFactory,
    build_worker,
    get_worker_cls,
    list_worker_kinds,
    register_worker,
)
from .llm_worker import LLMWorker
from .search_worker import SearchAugmentedWorker
