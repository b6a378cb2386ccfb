"""Tests for the agent prompt helpers."""

from __future__ import annotations

from inkwell.ai import prompts

CATALOGUE = [
    ("fs_exists", 'Check whether a path exists. INPUT: {"path": "relative/path"}'),
    ("memory_search", ""),
]


def test_system_prompt_sections_in_order() -> None:
    content = prompts.build_system_prompt("  You are a novelist.  ", CATALOGUE, "- hero: Bob")

    assert content.startswith("You are a novelist.\n\n")
    assert "Available tools: fs_exists, memory_search" in content
    assert content.index("ACTION: tool_name") < content.index("File system rules:")
    assert content.endswith("Long-term memory:\n- hero: Bob")


def test_catalogue_lists_descriptions() -> None:
    content = prompts.react_instructions(CATALOGUE)

    assert '- fs_exists: Check whether a path exists. INPUT: {"path": "relative/path"}' in content
    assert "\n- memory_search\n" in content


def test_blank_sections_are_omitted() -> None:
    content = prompts.build_system_prompt("", [("fs_exists", "")], "   ")

    assert content.startswith("Available tools: fs_exists")
    assert "Long-term memory" not in content


def test_sandbox_rules_mention_parent_and_markdown() -> None:
    rules = prompts.sandbox_rules()

    assert "fs_create_dir" in rules
    assert ".md" in rules


def test_format_observation() -> None:
    assert prompts.format_observation('{"ok": true}') == 'OBSERVATION:\n{"ok": true}'
