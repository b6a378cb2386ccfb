"""Parsing of the two-line ``ACTION:`` / ``INPUT:`` tool call protocol."""

from __future__ import annotations

import json

from .types import ParsedToolCall

__all__ = ["ACTION_PREFIX", "INPUT_PREFIX", "parse_tool_call"]

ACTION_PREFIX = "ACTION:"
INPUT_PREFIX = "INPUT:"


def parse_tool_call(text: str) -> ParsedToolCall | None:
    """Extract the tool call from one assistant turn.

    The last ``ACTION:`` line names the tool and the last ``INPUT:`` line holds
    its arguments; both are matched case-insensitively after trimming. Without
    both markers the text is a final answer and ``None`` is returned. An input
    that is not valid JSON is passed through as ``{"raw": <input>}``.
    """

    tool: str | None = None
    raw_input: str | None = None
    # Only "\n" and "\r\n" end a line; U+2028 inside a JSON string stays put.
    for line in text.split("\n"):
        stripped = line.removesuffix("\r").strip()
        upper = stripped.upper()
        if upper.startswith(ACTION_PREFIX):
            tool = _after_colon(stripped)
        elif upper.startswith(INPUT_PREFIX):
            raw_input = _after_colon(stripped)
    if tool is None or raw_input is None:
        return None
    try:
        args = json.loads(raw_input)
    except json.JSONDecodeError:
        args = {"raw": raw_input}
    return ParsedToolCall(tool=tool, args=args)


def _after_colon(line: str) -> str:
    return line.split(":", 1)[1].strip()
