"""Agent tools and the registry that dispatches them."""

from .base import BaseTool, ToolContext, ToolResult
from .filesystem import default_tools
from .registry import ToolRegistry

__all__ = ["BaseTool", "ToolContext", "ToolRegistry", "ToolResult", "default_tools"]
