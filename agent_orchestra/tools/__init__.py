from .registry import get_tool, list_registered_tools, register_tool, unregister_tool
from .search import web_search
