import json
import threading
import time
from collections import deque
from typing import Any, Dict

from langchain_core.tools import BaseTool, tool
from langchain_tavily import TavilySearch
from tavily import TavilyClient

from agent_orchestra.logger import logger

from .registry import register_tool, register_tool_factory


class RateLimiter:
    """Process-wide sliding-window rate limiter for search calls"""

    def __init__(self, max_calls: int = 40, time_window: int = 60):
        self.max_calls = max_calls
        self.time_window = time_window
        self.calls: deque = deque()
        self.lock = threading.Lock()

    def wait_if_needed(self):
        with self.lock:
            now = time.time()
            while self.calls and self.calls[0] < now - self.time_window:
                self.calls.popleft()

            if len(self.calls) >= self.max_calls:
                sleep_time = self.calls[0] + self.time_window - now + 0.1
                if sleep_time > 0:
                    logger.info(f"Search rate limit reached, sleeping for {sleep_time:.1f}s")
                    time.sleep(sleep_time)
                while self.calls and self.calls[0] < time.time() - self.time_window:
                    self.calls.popleft()

            self.calls.append(time.time())


TAVILY_RATE_LIMITER = RateLimiter(max_calls=20, time_window=60)


def format_search_response(query: str, response: Dict[str, Any]) -> str:
    results = [
        {
            "title": result.get("title", ""),
            "snippet": result.get("content", ""),
            "url": result.get("url", ""),
        }
        for result in response.get("results", [])
    ]
    return json.dumps(
        {
            "query": query,
            "results": results,
            "summary": response.get("answer")
            or f"Found {len(results)} results for '{query}'.",
        },
        indent=2,
    )


@register_tool
@tool
def web_search(query: str) -> str:
    """
    Search the web for up-to-date information related to the query.

    Args:
        query: The search query to look up.

    Returns:
        A JSON string with the matching pages and a short summary.
    """
    TAVILY_RATE_LIMITER.wait_if_needed()
    try:
        response = TavilyClient().search(query, include_answer=True)
        return format_search_response(query, response)
    except Exception as e:
        logger.error(f"Tool execution error for web_search: {e}")
        return json.dumps(
            {
                "query": query,
                "results": [],
                "error": str(e),
                "summary": f"Error searching for '{query}': {e}",
            },
            indent=2,
        )


@register_tool_factory("tavily_search")
def tavily_search_tool() -> BaseTool:
    return TavilySearch(
        max_results=5,
        topic="general",
        include_answer=True,
        search_depth="basic",
    )
