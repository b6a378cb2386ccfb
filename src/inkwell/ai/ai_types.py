"""Shared typing contracts for AI infrastructure."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Sequence

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .orchestration.types import Message

__all__ = ["AgentConfig", "ModelInvoker"]

ModelInvoker = Callable[[Sequence["Message"]], Awaitable[str]]
"""Async capability mapping a message history to the model's reply text."""


@dataclass(slots=True)
class AgentConfig:
    """Tunable parameters of the ReAct loop."""

    max_steps: int = 6
    memory_render_limit: int = 50
    memory_search_limit: int = 10

    def clamp(self) -> AgentConfig:
        """Clamp values into safe operating ranges and return ``self``."""

        self.max_steps = max(1, min(int(self.max_steps or 1), 50))
        self.memory_render_limit = max(0, int(self.memory_render_limit or 0))
        self.memory_search_limit = max(1, int(self.memory_search_limit or 1))
        return self
