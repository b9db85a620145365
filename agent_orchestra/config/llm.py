from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel

from agent_orchestra.llm.completion import LLMCollaborator
from agent_orchestra.llm.litellm_lc import ChatLiteLLMLC


class LLMParams(BaseModel):
    """
    see litellm.completion() for parameter details
    """

    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    stop: Optional[list[str]] = None
    reasoning_effort: Optional[Literal["low", "medium", "high"]] = None


class LLMConfig(BaseModel):
    """
    use litellm.get_valid_models() to see model names
    """

    model: str = "gemini/gemini-2.0-flash"
    params: LLMParams = LLMParams()
    num_retries: int = 2

    def get_llm(self) -> ChatLiteLLMLC:
        return ChatLiteLLMLC(
            model=self.model, **self.params.model_dump(exclude_none=True)
        )

    def invoke_params(self) -> Dict[str, Any]:
        return {"num_retries": self.num_retries}

    def get_collaborator(self) -> LLMCollaborator:
        return LLMCollaborator(self.get_llm(), llm_params=self.invoke_params())
