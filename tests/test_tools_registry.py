"""Tests for the tool registry and the base tool contract."""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar

import pytest

from inkwell.ai.tools import BaseTool, ToolContext, ToolRegistry, default_tools
from inkwell.errors import ErrorCode, InvalidPathError


class _EchoTool(BaseTool):
    name: ClassVar[str] = "echo"
    description: ClassVar[str] = "Echo the arguments."

    def __init__(self, label: str = "first") -> None:
        self.label = label

    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        return {"label": self.label, "params": params}


class _BrokenTool(BaseTool):
    name: ClassVar[str] = "broken"

    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        raise RuntimeError("boom")


class _SandboxTool(BaseTool):
    name: ClassVar[str] = "sandboxed"

    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        context.resolve(params["path"])
        return {}


@pytest.fixture
def context(tmp_path: Path) -> ToolContext:
    return ToolContext(workspace_root=tmp_path)


def test_list_is_sorted_and_unique() -> None:
    registry = ToolRegistry()
    for tool in reversed(default_tools()):
        registry.register(tool)
    registry.register(_EchoTool())
    registry.register(_EchoTool("second"))

    names = registry.list()

    assert names == sorted(names)
    assert len(names) == len(set(names))
    assert names == ["echo", "fs_create_dir", "fs_exists", "fs_list_dir", "fs_read_text", "fs_write_text"]


def test_last_registration_wins(context: ToolContext) -> None:
    registry = ToolRegistry([_EchoTool("first"), _EchoTool("second")])

    result = registry.call(context, "echo", {"x": 1})

    assert result.success
    assert result.data == {"label": "second", "params": {"x": 1}}


def test_unknown_tool_is_an_error_result(context: ToolContext) -> None:
    result = ToolRegistry().call(context, "nope", {})

    assert not result.success
    assert result.observation() == {"error": "unknown tool: nope"}


def test_lookup_is_case_sensitive(context: ToolContext) -> None:
    registry = ToolRegistry([_EchoTool()])

    assert registry.get("ECHO") is None
    assert not registry.call(context, "Echo", {}).success


def test_unexpected_exception_becomes_internal_error(context: ToolContext) -> None:
    result = _BrokenTool().run(context, {})

    assert not result.success
    assert result.error is not None
    assert result.error.error_code == ErrorCode.INTERNAL_ERROR
    assert "boom" in result.error.message


def test_tool_errors_are_captured(context: ToolContext) -> None:
    result = _SandboxTool().run(context, {"path": "../outside"})

    assert not result.success
    assert isinstance(result.error, InvalidPathError)
    assert result.duration_ms >= 0.0


def test_non_mapping_params_become_empty(context: ToolContext) -> None:
    result = _EchoTool().run(context, None)

    assert result.data == {"label": "first", "params": {}}


def test_register_requires_a_name() -> None:
    class _Nameless(_EchoTool):
        name: ClassVar[str] = ""

    with pytest.raises(ValueError):
        ToolRegistry().register(_Nameless())
