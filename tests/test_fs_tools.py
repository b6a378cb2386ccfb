"""Tests for the sandboxed file-system tools."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from inkwell.ai.tools import ToolContext, ToolRegistry, default_tools
from inkwell.errors import ErrorCode
from inkwell.workspace.layout import CONCEPT_INDEX_PATH, OUTLINE_PATH


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry(default_tools())


@pytest.fixture
def context(tmp_path: Path) -> ToolContext:
    return ToolContext(workspace_root=tmp_path)


def test_read_text(registry: ToolRegistry, context: ToolContext, tmp_path: Path) -> None:
    (tmp_path / "notes.md").write_text("hello", encoding="utf-8")

    result = registry.call(context, "fs_read_text", {"path": "notes.md"})

    assert result.observation() == {"text": "hello"}


def test_read_text_argument_errors(registry: ToolRegistry, context: ToolContext) -> None:
    missing = registry.call(context, "fs_read_text", {})
    blank = registry.call(context, "fs_read_text", {"path": "  "})
    absent = registry.call(context, "fs_read_text", {"path": "missing.md"})

    assert missing.observation() == {"error": "missing args.path"}
    assert blank.observation() == {"error": "empty args.path"}
    assert absent.error is not None and absent.error.error_code == ErrorCode.IO_FAILURE


def test_read_text_rejects_escape(registry: ToolRegistry, context: ToolContext) -> None:
    result = registry.call(context, "fs_read_text", {"path": "../secret.txt"})

    assert result.error is not None
    assert result.error.error_code == ErrorCode.INVALID_PATH


def test_list_dir_defaults_to_root(registry: ToolRegistry, context: ToolContext, tmp_path: Path) -> None:
    (tmp_path / "b.md").write_text("", encoding="utf-8")
    (tmp_path / "a").mkdir()

    result = registry.call(context, "fs_list_dir", {})

    assert result.observation() == {"items": [{"name": "a", "kind": "dir"}, {"name": "b.md", "kind": "file"}]}
    assert registry.call(context, "fs_list_dir", {"path": ""}).observation() == result.observation()


def test_exists(registry: ToolRegistry, context: ToolContext, tmp_path: Path) -> None:
    (tmp_path / "dir").mkdir()
    (tmp_path / "dir" / "f.md").write_text("x", encoding="utf-8")

    assert registry.call(context, "fs_exists", {"path": "dir"}).data == {"exists": True, "kind": "dir"}
    assert registry.call(context, "fs_exists", {"path": "dir/f.md"}).data == {"exists": True, "kind": "file"}
    assert registry.call(context, "fs_exists", {"path": "nope"}).data == {"exists": False}


def test_create_dir_creates_parents(registry: ToolRegistry, context: ToolContext, tmp_path: Path) -> None:
    result = registry.call(context, "fs_create_dir", {"path": "stories/arc1"})

    assert result.data == {"ok": True}
    assert (tmp_path / "stories" / "arc1").is_dir()


def test_write_requires_existing_parent(registry: ToolRegistry, context: ToolContext, tmp_path: Path) -> None:
    result = registry.call(context, "fs_write_text", {"path": "drafts/a.txt", "text": "x"})

    assert result.observation() == {"error": "parent directory does not exist; create it first"}
    assert not (tmp_path / "drafts").exists()


def test_write_enforces_markdown_policy_before_io(
    registry: ToolRegistry, context: ToolContext, tmp_path: Path
) -> None:
    (tmp_path / "concept").mkdir()

    result = registry.call(context, "fs_write_text", {"path": "concept/world.txt", "text": "x"})

    assert result.error is not None
    assert result.error.error_code == ErrorCode.POLICY_VIOLATION
    assert list((tmp_path / "concept").iterdir()) == []


def test_write_text_defaults_to_empty(registry: ToolRegistry, context: ToolContext, tmp_path: Path) -> None:
    result = registry.call(context, "fs_write_text", {"path": "empty.md"})

    assert result.data == {"ok": True}
    assert (tmp_path / "empty.md").read_text(encoding="utf-8") == ""


def test_write_rejects_non_string_text(registry: ToolRegistry, context: ToolContext) -> None:
    result = registry.call(context, "fs_write_text", {"path": "a.md", "text": 5})

    assert result.error is not None
    assert result.error.error_code == ErrorCode.INVALID_ARGUMENT


def test_concept_write_updates_index(registry: ToolRegistry, context: ToolContext, tmp_path: Path) -> None:
    (tmp_path / "concept").mkdir()

    registry.call(context, "fs_write_text", {"path": "concept/world.md", "text": "v1"})
    registry.call(context, "fs_write_text", {"path": "concept/world.md", "text": "v1"})
    registry.call(context, "fs_write_text", {"path": "concept/world.md", "text": "v2"})

    index = json.loads((tmp_path / CONCEPT_INDEX_PATH).read_text(encoding="utf-8"))
    assert index["revision"] == 2
    assert (tmp_path / "concept" / "world.md").read_text(encoding="utf-8") == "v2"


def test_outline_write_is_validated(registry: ToolRegistry, context: ToolContext, tmp_path: Path) -> None:
    (tmp_path / ".novel" / ".cache").mkdir(parents=True)
    first = json.dumps({"events": [{"id": "e1", "time": "T1", "location": "X", "characters": ["Bob"]}]})
    clash = json.dumps({"events": [{"id": "e2", "time": "T1", "location": "Y", "characters": ["Bob"]}]})

    assert registry.call(context, "fs_write_text", {"path": OUTLINE_PATH, "text": first}).success
    result = registry.call(context, "fs_write_text", {"path": OUTLINE_PATH, "text": clash})

    assert result.error is not None
    assert result.error.error_code == ErrorCode.TIMELINE_CONFLICT
    assert "Bob" in result.observation()["error"]
    assert (tmp_path / OUTLINE_PATH).read_text(encoding="utf-8") == first


def test_malformed_outline_write_is_rejected(registry: ToolRegistry, context: ToolContext, tmp_path: Path) -> None:
    (tmp_path / ".novel" / ".cache").mkdir(parents=True)

    result = registry.call(context, "fs_write_text", {"path": OUTLINE_PATH, "text": "{oops"})

    assert result.error is not None
    assert result.error.error_code == ErrorCode.MALFORMED_OUTLINE
    assert not (tmp_path / OUTLINE_PATH).exists()


@pytest.mark.parametrize("path", [".", "./", "./."])
def test_write_to_workspace_root_is_rejected(registry: ToolRegistry, tmp_path: Path, path: str) -> None:
    workspace = tmp_path / "novel"
    workspace.mkdir()

    result = registry.call(ToolContext(workspace_root=workspace), "fs_write_text", {"path": path, "text": "x"})

    assert result.error is not None
    assert result.error.error_code == ErrorCode.INVALID_PATH
    assert [child.name for child in tmp_path.iterdir()] == ["novel"]
    assert list(workspace.iterdir()) == []
