"""
Expose a registered orchestrator as a langchain tool, so an outer agent can
delegate a whole task to it with a single tool call.
"""

from typing import Any, Optional

import loguru
from langchain_core.tools import StructuredTool
from pydantic import Field, create_model

from agent_orchestra.logger import component_logger
from agent_orchestra.utils import to_json_str

from .orchestrators import OrchestratorRegistry


def serialize_result(result: Any) -> str:
    if isinstance(result, str):
        return result
    if hasattr(result, "model_dump"):
        result = result.model_dump()
    return to_json_str(result)


def create_orchestrator_tool(
    registry: OrchestratorRegistry,
    orchestrator_name: str,
    tool_name: str,
    description: str,
    input_field: str = "task",
    input_description: str = "The task to hand to the orchestrator",
    logger: Optional["loguru.Logger"] = None,
) -> StructuredTool:
    """
    Build a tool whose only argument is ``input_field``.

    The orchestrator is resolved on every call. Any failure, including a
    missing registry entry, is returned to the caller as an error string.
    """
    logger = component_logger(f"tool:{tool_name}", logger)
    if orchestrator_name not in registry:
        logger.warning(
            f"Orchestrator '{orchestrator_name}' is not registered yet, tool '{tool_name}' may fail when called"
        )

    args_schema = create_model(
        f"{tool_name}_input",
        **{input_field: (str, Field(min_length=1, description=input_description))},  # type: ignore
    )

    def _error(e: Exception) -> str:
        logger.error(f"Orchestrator '{orchestrator_name}' failed via tool '{tool_name}': {e}")
        return f"Error running orchestrator '{orchestrator_name}': {e}"

    def run_orchestrator(**kwargs: Any) -> str:
        logger.info(f"Running orchestrator '{orchestrator_name}' with {kwargs}")
        try:
            orchestrator = registry.resolve(orchestrator_name)
            return serialize_result(orchestrator.orchestrate(kwargs[input_field]))
        except Exception as e:
            return _error(e)

    async def arun_orchestrator(**kwargs: Any) -> str:
        logger.info(f"Running orchestrator '{orchestrator_name}' with {kwargs}")
        try:
            orchestrator = registry.resolve(orchestrator_name)
            return serialize_result(await orchestrator.aorchestrate(kwargs[input_field]))
        except Exception as e:
            return _error(e)

    return StructuredTool.from_function(
        func=run_orchestrator,
        coroutine=arun_orchestrator,
        name=tool_name,
        description=description,
        args_schema=args_schema,
    )
