"""
Completion collaborators.

A collaborator is the black box the orchestration engine consults for
planning, agent selection and synthesis: it takes prompt text (or a list of
chat messages compiled from a prompt template) and returns response text.
"""

from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage

PromptInput = Union[str, List[Dict[str, Any]]]


@runtime_checkable
class Collaborator(Protocol):
    def submit(self, prompt: PromptInput) -> str: ...


def message_text(message: BaseMessage) -> str:
    """Flatten a chat message's content into plain text."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)


def as_messages(prompt: PromptInput) -> List[Dict[str, Any]]:
    if isinstance(prompt, str):
        return [{"role": "user", "content": prompt}]
    return list(prompt)


class LLMCollaborator:
    """Collaborator backed by a langchain chat model (usually ``ChatLiteLLMLC``)."""

    def __init__(
        self,
        llm: BaseChatModel,
        llm_params: Optional[Dict[str, Any]] = None,
    ):
        self.llm = llm
        self.llm_params = llm_params or {}

    def submit(self, prompt: PromptInput) -> str:
        response = self.llm.invoke(as_messages(prompt), **self.llm_params)
        return message_text(response)

    def __repr__(self) -> str:
        model = getattr(self.llm, "model", type(self.llm).__name__)
        return f"LLMCollaborator(model={model!r})"
