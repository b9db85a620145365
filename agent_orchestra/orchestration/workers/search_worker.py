from typing import List, cast

from langchain_core.messages import AIMessage, ToolMessage
from langchain_core.messages.utils import convert_to_openai_messages  # type: ignore
from langchain_core.tools import BaseTool

from agent_orchestra.llm.completion import message_text
from agent_orchestra.tools import get_tool

from .base import quote_task
from .llm_worker import LLMWorker


class SearchAugmentedWorker(LLMWorker):
    """
    LLM worker that may consult web search before answering.

    The model is bound to a single search tool and may issue up to
    ``max_searches`` calls; once the budget is spent it is asked to answer
    with what it has gathered.
    """

    kind = "search"
    use_augmented_capability = True

    def __init__(
        self,
        *args,
        max_searches: int = 3,
        search_tool: str | BaseTool = "web_search",
        **kwargs,
    ):
        kwargs.setdefault("task_formatter", quote_task)
        super().__init__(*args, **kwargs)
        self.max_searches = max_searches
        self.search_tool = (
            get_tool(search_tool) if isinstance(search_tool, str) else search_tool
        )
        self.llm_w_tools = self.llm.bind_tools([self.search_tool])

    def _run(self, instructions: str) -> str:
        messages: List[dict] = self.build_messages(instructions)
        for _ in range(self.max_searches):
            response = cast(
                AIMessage, self.llm_w_tools.invoke(messages, **self.llm_params)
            )
            if not response.tool_calls:
                return message_text(response)
            tool_call = response.tool_calls[0]
            response.tool_calls = [tool_call]
            messages.append(convert_to_openai_messages(response))
            try:
                observation = self.search_tool.invoke({**tool_call, "type": "tool_call"})
            except Exception as e:
                self.logger.warning(f"Search call {tool_call['args']} failed: {e}")
                observation = f"ERROR: search failed with error: {e}"
            if not isinstance(observation, ToolMessage):
                observation = ToolMessage(
                    content=str(observation), tool_call_id=tool_call.get("id") or ""
                )
            messages.append(convert_to_openai_messages(observation))

        self.logger.debug(f"{self.role} used its search budget, answering without tools")
        messages.append(
            {
                "role": "user",
                "content": "You have used all available searches. Give your final answer now.",
            }
        )
        return message_text(self.llm.invoke(messages, **self.llm_params))
