"""Tests for the ACTION/INPUT tool call protocol parser."""

from __future__ import annotations

import json

import pytest

from inkwell.ai.orchestration.tool_call_parser import parse_tool_call


def test_prose_only_returns_none() -> None:
    assert parse_tool_call("Here is the chapter you asked for.\nIt is done.") is None


def test_both_markers_required() -> None:
    assert parse_tool_call("ACTION: fs_read_text") is None
    assert parse_tool_call('INPUT: {"path": "a.md"}') is None


def test_parses_tool_and_json_args() -> None:
    text = 'I will read the file.\nACTION: fs_read_text\nINPUT: {"path": "concept/world.md"}'

    call = parse_tool_call(text)

    assert call is not None
    assert call.tool == "fs_read_text"
    assert call.args == {"path": "concept/world.md"}


def test_markers_are_case_insensitive_and_trimmed() -> None:
    call = parse_tool_call('   action:   fs_exists  \n\tInput: {"path": "x"}  ')

    assert call is not None
    assert call.tool == "fs_exists"
    assert call.args == {"path": "x"}


def test_invalid_json_is_wrapped_as_raw() -> None:
    call = parse_tool_call("ACTION: memory_search\nINPUT: hero name")

    assert call is not None
    assert call.args == {"raw": "hero name"}


def test_last_marker_lines_win() -> None:
    text = "\n".join(
        [
            "ACTION: fs_read_text",
            'INPUT: {"path": "a.md"}',
            "ACTION: fs_exists",
            'INPUT: {"path": "b.md"}',
        ]
    )

    call = parse_tool_call(text)

    assert call is not None
    assert call.tool == "fs_exists"
    assert call.args == {"path": "b.md"}


def test_only_first_colon_splits() -> None:
    call = parse_tool_call('ACTION: fs_write_text\nINPUT: {"path": "a.md", "text": "Time: noon"}')

    assert call is not None
    assert call.args == {"path": "a.md", "text": "Time: noon"}


@pytest.mark.parametrize("separator", ["\u2028", "\u2029", "\x85", "\x0c"])
def test_unicode_line_separators_stay_inside_json(separator: str) -> None:
    text = f"one{separator}two"

    call = parse_tool_call("ACTION: fs_write_text\nINPUT: " + json.dumps({"path": "a.md", "text": text}, ensure_ascii=False))

    assert call is not None
    assert call.args == {"path": "a.md", "text": text}


def test_crlf_line_endings() -> None:
    call = parse_tool_call('ACTION: fs_exists\r\nINPUT: {"path": "a.md"}\r\n')

    assert call is not None
    assert call.tool == "fs_exists"
    assert call.args == {"path": "a.md"}
