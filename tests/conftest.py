"""Shared fakes: nothing in the suite talks to a model provider or to Tavily."""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

# Use litellm's bundled model cost map instead of fetching it over the network on import.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

import pytest
from langchain_core.language_models import GenericFakeChatModel
from langchain_core.messages import AIMessage

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from agent_orchestra.orchestration.plan import SubtaskNode  # noqa: E402
from agent_orchestra.orchestration.workers import Worker  # noqa: E402

Behavior = Union[str, Exception, Callable[[str], Any]]


def prompt_text(prompt: Any) -> str:
    if isinstance(prompt, str):
        return prompt
    return "\n".join(str(m.get("content", "")) for m in prompt)


class ScriptedCollaborator:
    """Returns queued responses in order; a queued exception is raised instead."""

    def __init__(self, *responses: Union[str, Exception], rule: Optional[Callable[[str], str]] = None):
        self.responses: List[Union[str, Exception]] = list(responses)
        self.rule = rule
        self.prompts: List[str] = []

    def submit(self, prompt) -> str:
        text = prompt_text(prompt)
        self.prompts.append(text)
        if self.rule is not None:
            return self.rule(text)
        if not self.responses:
            raise AssertionError("ScriptedCollaborator ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class RecordingWorker(Worker):
    kind = "recording"

    def __init__(self, role: str, behavior: Behavior = "ok", calls: Optional[list] = None, **kwargs):
        super().__init__(role, **kwargs)
        self.behavior = behavior
        self.received: List[str] = []
        self.calls = calls if calls is not None else []

    def _run(self, instructions: str) -> Any:
        self.received.append(instructions)
        self.calls.append((self.role, instructions))
        if isinstance(self.behavior, Exception):
            raise self.behavior
        if callable(self.behavior):
            return self.behavior(instructions)
        return self.behavior


class NodeWorkerFactory:
    """Plan worker factory keyed by node id; unknown ids answer ``result of <id>``."""

    def __init__(self, behaviors: Optional[Dict[str, Behavior]] = None):
        self.behaviors = behaviors or {}
        self.calls: List[tuple] = []
        self.workers: Dict[str, RecordingWorker] = {}

    def __call__(self, node: SubtaskNode) -> Worker:
        worker = RecordingWorker(
            node.assigned_role,
            behavior=self.behaviors.get(node.id, f"result of {node.id}"),
            calls=self.calls,
            objective=node.objective,
            instructions=node.instructions,
        )
        self.workers[node.id] = worker
        return worker

    @property
    def order(self) -> List[str]:
        return [node_id for node_id, w in self.workers.items() if w.received]


class ToolCallingFakeChatModel(GenericFakeChatModel):
    """Fake chat model that accepts ``bind_tools`` and replays scripted messages."""

    def bind_tools(self, tools, **kwargs):
        return self


@pytest.fixture
def fake_llm() -> Callable[..., GenericFakeChatModel]:
    def _make(*messages: Union[str, AIMessage]) -> GenericFakeChatModel:
        return ToolCallingFakeChatModel(messages=iter(list(messages)))

    return _make


@pytest.fixture
def node_factory() -> Callable[..., NodeWorkerFactory]:
    return NodeWorkerFactory
