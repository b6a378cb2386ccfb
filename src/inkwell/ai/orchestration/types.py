"""Core type definitions for the ReAct loop."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Mapping

from openai.types.chat import ChatCompletionMessageParam

__all__ = [
    "AgentPerf",
    "AgentRunResult",
    "AgentState",
    "Message",
    "MessageRole",
    "ParsedToolCall",
    "RunOutcome",
]


# -----------------------------------------------------------------------------
# Message Type
# -----------------------------------------------------------------------------

MessageRole = Literal["system", "user", "assistant"]


@dataclass(slots=True, frozen=True)
class Message:
    """Immutable chat message.

    Attributes:
        role: The role of the message sender.
        content: The text content of the message.
    """

    role: MessageRole
    content: str

    def to_chat_param(self) -> ChatCompletionMessageParam:
        """Convert to OpenAI's ChatCompletionMessageParam format."""
        return {"role": self.role, "content": self.content}  # type: ignore[return-value]

    @classmethod
    def from_chat_param(cls, param: Mapping[str, Any]) -> Message:
        role = str(param.get("role", "user"))
        if role not in ("system", "user", "assistant"):
            role = "user"
        return cls(role=role, content=str(param.get("content") or ""))  # type: ignore[arg-type]

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> Message:
        return cls(role="assistant", content=content)


# -----------------------------------------------------------------------------
# Loop Types
# -----------------------------------------------------------------------------

@dataclass(slots=True, frozen=True)
class ParsedToolCall:
    """A single tool request extracted from one assistant turn."""

    tool: str
    args: Any = field(default_factory=dict)


class AgentState(Enum):
    THINKING = "thinking"
    ACTION_PARSED = "action_parsed"
    OBSERVING = "observing"
    DONE = "done"


RunOutcome = Literal["answered", "budget_exhausted", "model_error"]


@dataclass(slots=True)
class AgentPerf:
    """Counters accumulated over one run; times are in seconds."""

    steps: int = 0
    model_time: float = 0.0
    tool_time: float = 0.0

    def to_dict(self) -> dict[str, int]:
        return {
            "steps": self.steps,
            "model_ms": int(self.model_time * 1000),
            "tool_ms": int(self.tool_time * 1000),
        }


@dataclass(slots=True)
class AgentRunResult:
    """Final answer plus observability data for one run."""

    text: str
    perf: AgentPerf
    outcome: RunOutcome = "answered"
    messages: tuple[Message, ...] = ()
