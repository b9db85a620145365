from typing import Callable, Dict

from langchain_core.tools import BaseTool

_tool_registry: Dict[str, BaseTool] = {}
# tools whose construction needs credentials are built on first lookup
_tool_factories: Dict[str, Callable[[], BaseTool]] = {}


def register_tool(tool: BaseTool) -> BaseTool:
    """Decorator to register a tool instance."""
    _tool_registry[tool.name] = tool
    return tool


def register_tool_factory(name: str):
    """Decorator to register a zero-argument tool factory under ``name``."""

    def decorator(factory: Callable[[], BaseTool]) -> Callable[[], BaseTool]:
        _tool_factories[name] = factory
        return factory

    return decorator


def unregister_tool(tool_name: str) -> None:
    _tool_registry.pop(tool_name, None)
    _tool_factories.pop(tool_name, None)


def list_registered_tools() -> list[str]:
    """List all registered tool names."""
    return list(dict.fromkeys([*_tool_registry, *_tool_factories]))


def get_tool(tool_name: str) -> BaseTool:
    if tool_name in _tool_registry:
        return _tool_registry[tool_name]
    if tool_name in _tool_factories:
        return register_tool(_tool_factories[tool_name]())
    raise ValueError(f"Tool '{tool_name}' not found in registry")
