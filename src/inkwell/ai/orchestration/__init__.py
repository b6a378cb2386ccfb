"""ReAct orchestration: message types, tool call parsing and the agent loop."""

from .runtime import AgentRuntime
from .tool_call_parser import parse_tool_call
from .types import AgentPerf, AgentRunResult, AgentState, Message, ParsedToolCall

__all__ = [
    "AgentPerf",
    "AgentRunResult",
    "AgentRuntime",
    "AgentState",
    "Message",
    "ParsedToolCall",
    "parse_tool_call",
]
