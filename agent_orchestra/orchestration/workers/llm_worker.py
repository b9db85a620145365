from typing import Any, Dict, List, Optional, cast

from langchain_core.language_models import BaseChatModel

from agent_orchestra.config.prompts import NamedPrompt, load_orchestration_prompts
from agent_orchestra.llm.completion import message_text

from .base import Worker


class LLMWorker(Worker):
    """Worker backed by a single chat completion."""

    kind = "llm"

    def __init__(
        self,
        *args,
        llm: BaseChatModel,
        llm_params: Optional[Dict[str, Any]] = None,
        prompt: Optional[NamedPrompt] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.llm = llm
        self.llm_params = llm_params or {}
        self.prompt = prompt or load_orchestration_prompts().get_template(
            "worker", with_base=False
        )

    def build_messages(self, instructions: str) -> List[dict]:
        return cast(
            list,
            self.prompt.compile(
                role=self.role,
                objective=self.objective,
                context=self.context,
                instructions=instructions,
            ),
        )

    def _run(self, instructions: str) -> str:
        response = self.llm.invoke(self.build_messages(instructions), **self.llm_params)
        return message_text(response)
