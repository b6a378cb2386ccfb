"""Sandboxed file-system tools exposed to the model."""

from __future__ import annotations

from typing import Any, ClassVar

from ...errors import IOFailureError
from ...utils import file_io
from ...workspace.service import write_document
from .base import BaseTool, ToolContext, optional_string, require_string

__all__ = [
    "CreateDirTool",
    "ExistsTool",
    "ListDirTool",
    "ReadTextTool",
    "WriteTextTool",
    "default_tools",
]


class ReadTextTool(BaseTool):
    name: ClassVar[str] = "fs_read_text"
    description: ClassVar[str] = "Read a UTF-8 text file. INPUT: {\"path\": \"relative/path\"}"

    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        target = context.resolve(require_string(params, "path"))
        try:
            return {"text": file_io.read_text(target)}
        except (OSError, UnicodeDecodeError) as exc:
            raise IOFailureError.wrap("read", exc) from exc


class ListDirTool(BaseTool):
    name: ClassVar[str] = "fs_list_dir"
    description: ClassVar[str] = "List a directory (default: workspace root). INPUT: {\"path\": \"dir\"}"

    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        path = optional_string(params, "path")
        target = context.resolve(path) if path.strip() else context.workspace_root
        try:
            children = sorted(target.iterdir(), key=lambda child: child.name)
        except OSError as exc:
            raise IOFailureError.wrap("read dir", exc) from exc
        items = [{"name": child.name, "kind": "dir" if child.is_dir() else "file"} for child in children]
        return {"items": items}


class ExistsTool(BaseTool):
    name: ClassVar[str] = "fs_exists"
    description: ClassVar[str] = "Check whether a path exists. INPUT: {\"path\": \"relative/path\"}"

    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        target = context.resolve(require_string(params, "path"))
        try:
            is_dir = target.is_dir()
            exists = is_dir or target.exists()
        except OSError as exc:
            raise IOFailureError.wrap("stat", exc) from exc
        if not exists:
            return {"exists": False}
        return {"exists": True, "kind": "dir" if is_dir else "file"}


class CreateDirTool(BaseTool):
    name: ClassVar[str] = "fs_create_dir"
    description: ClassVar[str] = "Create a directory and any missing parents. INPUT: {\"path\": \"dir\"}"

    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        target = context.resolve(require_string(params, "path"))
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IOFailureError.wrap("create dir", exc) from exc
        return {"ok": True}


class WriteTextTool(BaseTool):
    name: ClassVar[str] = "fs_write_text"
    description: ClassVar[str] = (
        "Write a text file; the parent directory must already exist. "
        "INPUT: {\"path\": \"relative/path.md\", \"text\": \"...\"}"
    )

    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        path = require_string(params, "path")
        text = optional_string(params, "text")
        write_document(context.workspace_root, path, text, enforce_extension_policy=True)
        return {"ok": True}


def default_tools() -> list[BaseTool]:
    """Return one instance of every built-in file-system tool."""

    return [ReadTextTool(), ListDirTool(), ExistsTool(), CreateDirTool(), WriteTextTool()]
