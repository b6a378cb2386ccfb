"""Name to tool lookup used by the agent runtime."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping

from ...errors import UnknownToolError
from .base import BaseTool, ToolContext, ToolResult

__all__ = ["ToolRegistry"]

LOGGER = logging.getLogger(__name__)


class ToolRegistry:
    """Registry of agent tools keyed by their exact, case-sensitive name.

    Registering a tool under a name that is already taken replaces the
    previous tool.

    Example:
        registry = ToolRegistry()
        registry.register(ReadTextTool())
        result = registry.call(context, "fs_read_text", {"path": "notes.md"})
    """

    def __init__(self, tools: Iterable[BaseTool] = ()) -> None:
        self._tools: dict[str, BaseTool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: BaseTool, *, name: str | None = None) -> None:
        tool_name = name or tool.name
        if not tool_name:
            raise ValueError(f"{type(tool).__name__} has no name")
        if tool_name in self._tools:
            LOGGER.debug("Replacing tool registration: %s", tool_name)
        self._tools[tool_name] = tool
        LOGGER.debug("Registered tool: %s", tool_name)

    def get(self, name: str) -> BaseTool | None:
        return self._tools.get(name)

    def list(self) -> list[str]:
        """Return the registered names in alphabetical order."""

        return sorted(self._tools)

    def call(self, context: ToolContext, name: str, args: Mapping[str, Any] | None) -> ToolResult:
        """Run the tool called ``name``; unknown names yield a failed result."""

        tool = self._tools.get(name)
        if tool is None:
            return ToolResult.failed(UnknownToolError.for_name(name))
        return tool.run(context, args)

    def describe(self) -> list[tuple[str, str]]:
        """Return ``(name, description)`` pairs in name order for the prompt catalogue."""

        return [(name, self._tools[name].description) for name in self.list()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[str]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._tools)
