from typing import cast

from langchain_core.messages import AIMessage
from langchain_litellm.chat_models.litellm import ChatLiteLLM


class ChatLiteLLMLC(ChatLiteLLM):
    """ChatLiteLLM whose ``invoke`` is typed as returning an ``AIMessage``."""

    def invoke(self, *args, **kwargs) -> AIMessage:
        return cast(AIMessage, super().invoke(*args, **kwargs))
