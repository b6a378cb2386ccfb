"""Direct workspace API shared by the CLI and the agent's file tools."""

from __future__ import annotations

import logging
import os
import shutil
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable

from ..errors import (
    EmptyArgumentError,
    IOFailureError,
    InvalidPathError,
    MalformedOutlineError,
    TimelineConflictError,
    WorkspaceNotSetError,
)
from ..utils import file_io
from .concept_index import ConceptIndexStore
from .layout import (
    CACHE_DIR,
    CHARACTERS_PATH,
    CONCEPT_INDEX_PATH,
    OUTLINE_PATH,
    PROJECT_SETTINGS_PATH,
    RELATIONS_PATH,
    SETTINGS_DIR,
)
from .outline import Outline, OutlineConflictChecker, parse_outline
from .sandbox import (
    ToolContext,
    check_write_policy,
    is_concept_document,
    normalize_relative_path,
    validate_relative_path,
)

__all__ = [
    "FsEntry",
    "ValidationIssue",
    "WorkspaceInfo",
    "WorkspaceService",
    "normalize_plaintext",
    "write_document",
]

LOGGER = logging.getLogger(__name__)

PARENT_MISSING_MESSAGE = "parent directory does not exist; create it first"

_DEFAULT_DOCUMENTS: tuple[tuple[str, Callable[[], dict[str, Any]]], ...] = (
    (CONCEPT_INDEX_PATH, lambda: {"revision": 0, "updated_at": "", "files": {}}),
    (OUTLINE_PATH, lambda: {"events": []}),
    (PROJECT_SETTINGS_PATH, lambda: {"chapter_word_target": 2000}),
    (CHARACTERS_PATH, lambda: {"characters": []}),
    (RELATIONS_PATH, lambda: {"relations": []}),
)


# ------------------------------------------------------------------
# Data types
# ------------------------------------------------------------------
@dataclass(slots=True)
class FsEntry:
    """Node of the workspace tree returned by :meth:`WorkspaceService.list_tree`."""

    name: str
    path: str
    kind: str
    children: list["FsEntry"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "kind": self.kind,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(slots=True, frozen=True)
class ValidationIssue:
    """Problem found while checking a structured workspace document."""

    severity: str
    code: str
    message: str
    path: str


@dataclass(slots=True, frozen=True)
class WorkspaceInfo:
    root: Path
    name: str


# ------------------------------------------------------------------
# Shared write pipeline
# ------------------------------------------------------------------
def write_document(
    root: Path,
    relative_path: str,
    text: str,
    *,
    enforce_extension_policy: bool,
) -> Path:
    """Validate and write one workspace document, then refresh derived indexes.

    Checks run before any mutation in this order: reserved-folder extension
    policy (when enforced), sandbox validation (the root itself is not a
    writable path), outline conflict validation for the outline file, and
    the parent-directory rule. Concept documents update the concept index
    after the write.
    """

    if enforce_extension_policy and isinstance(relative_path, str):
        check_write_policy(relative_path)
    validated = validate_relative_path(relative_path)
    normalized = normalize_relative_path(validated)
    if not normalized:
        raise InvalidPathError(message="path must name a file inside the workspace", path=relative_path)
    target = root / normalized

    if normalized == OUTLINE_PATH:
        OutlineConflictChecker().validate(_read_existing(target), text)

    if not target.parent.is_dir():
        raise IOFailureError(message=PARENT_MISSING_MESSAGE, details={"path": normalized})
    try:
        file_io.write_text(target, text)
    except OSError as exc:
        raise IOFailureError.wrap("write", exc) from exc

    if is_concept_document(normalized):
        ConceptIndexStore(root).update(normalized, text)
    LOGGER.debug("Wrote %s (%s chars)", normalized, len(text))
    return target


def _read_existing(target: Path) -> str:
    try:
        return file_io.read_text(target)
    except (OSError, UnicodeDecodeError):
        return ""


def normalize_plaintext(text: str) -> str:
    """Drop blank lines and leading indentation, then trim the whole text."""

    lines = [line.lstrip(" \t") for line in text.splitlines()]
    return "\n".join(line for line in lines if line).strip()


# ------------------------------------------------------------------
# Service
# ------------------------------------------------------------------
class WorkspaceService:
    """Owns the current workspace root and exposes sandboxed file operations."""

    def __init__(self, root: Path | str | None = None) -> None:
        self._lock = threading.Lock()
        self._root: Path | None = None
        if root is not None:
            self.set_workspace(root)

    # ------------------------------------------------------------------
    # Root management
    # ------------------------------------------------------------------
    def set_workspace(self, path: Path | str) -> WorkspaceInfo:
        candidate = Path(path).expanduser()
        if not candidate.is_dir():
            raise InvalidPathError(message="workspace is not a directory", path=str(path))
        resolved = candidate.resolve()
        with self._lock:
            self._root = resolved
        LOGGER.info("Workspace set to %s", resolved)
        return WorkspaceInfo(root=resolved, name=resolved.name or str(resolved))

    @property
    def root(self) -> Path:
        with self._lock:
            root = self._root
        if root is None:
            raise WorkspaceNotSetError()
        return root

    def tool_context(self) -> ToolContext:
        """Return an immutable snapshot of the current root for one request."""

        return ToolContext(workspace_root=self.root)

    def init_novel(self) -> list[str]:
        """Create the ``.novel`` folders and seed missing default documents.

        Returns the relative paths of the files that were created.
        """

        root = self.root
        created: list[str] = []
        try:
            for folder in (SETTINGS_DIR, CACHE_DIR):
                (root / folder).mkdir(parents=True, exist_ok=True)
            for relative, factory in _DEFAULT_DOCUMENTS:
                target = root / relative
                if target.exists():
                    continue
                file_io.write_json(target, factory())
                created.append(relative)
        except OSError as exc:
            raise IOFailureError.wrap("init workspace", exc) from exc
        if created:
            LOGGER.info("Initialised workspace %s (%s)", root, ", ".join(created))
        return created

    # ------------------------------------------------------------------
    # File operations
    # ------------------------------------------------------------------
    def read_text(self, relative_path: str) -> str:
        target = self._resolve(relative_path)
        try:
            return file_io.read_text(target)
        except (OSError, UnicodeDecodeError) as exc:
            raise IOFailureError.wrap("read", exc) from exc

    def write_text(self, relative_path: str, content: str) -> None:
        write_document(self.root, relative_path, content, enforce_extension_policy=False)

    def create_file(self, relative_path: str) -> None:
        target = self._resolve(relative_path)
        if target == self.root:
            raise InvalidPathError(message="path must name a file inside the workspace", path=relative_path)
        if not target.parent.is_dir():
            raise IOFailureError(message=PARENT_MISSING_MESSAGE, details={"path": relative_path})
        try:
            file_io.write_text(target, "")
        except OSError as exc:
            raise IOFailureError.wrap("create file", exc) from exc

    def create_dir(self, relative_path: str) -> None:
        _require_non_blank(relative_path, "path")
        target = self._resolve(relative_path)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IOFailureError.wrap("create dir", exc) from exc

    def delete_entry(self, relative_path: str) -> None:
        _require_non_blank(relative_path, "path")
        target = self._resolve(relative_path)
        if target == self.root:
            raise InvalidPathError(message="refusing to delete the workspace root", path=relative_path)
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        except OSError as exc:
            raise IOFailureError.wrap("delete", exc) from exc
        LOGGER.debug("Deleted %s", relative_path)

    def rename_entry(self, from_relative_path: str, to_relative_path: str) -> None:
        _require_non_blank(from_relative_path, "from")
        _require_non_blank(to_relative_path, "to")
        source = self._resolve(from_relative_path)
        destination = self._resolve(to_relative_path)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            os.replace(source, destination)
        except OSError as exc:
            raise IOFailureError.wrap("rename", exc) from exc

    def list_tree(self, max_depth: int = 4) -> FsEntry:
        """Return the workspace as a tree, directories first then by name."""

        root = self.root
        try:
            return _build_tree(root, root, max(0, int(max_depth)))
        except OSError as exc:
            raise IOFailureError.wrap("list tree", exc) from exc

    # ------------------------------------------------------------------
    # Outline
    # ------------------------------------------------------------------
    def load_outline(self) -> Outline:
        """Load the outline document, failing loudly if it is corrupt.

        A missing file is an empty outline.
        """

        target = self.root / OUTLINE_PATH
        if not target.exists():
            return Outline()
        try:
            raw = file_io.read_text(target)
        except (OSError, UnicodeDecodeError) as exc:
            raise IOFailureError.wrap("read outline", exc) from exc
        return parse_outline(raw)

    def check_outline(self) -> list[ValidationIssue]:
        target = self.root / OUTLINE_PATH
        if not target.exists():
            return []
        try:
            raw = file_io.read_text(target)
        except (OSError, UnicodeDecodeError) as exc:
            raise IOFailureError.wrap("read outline", exc) from exc
        try:
            OutlineConflictChecker().validate("", raw)
        except MalformedOutlineError as exc:
            return [ValidationIssue("error", "outline.malformed", exc.message, OUTLINE_PATH)]
        except TimelineConflictError as exc:
            return [
                ValidationIssue("error", "timeline.conflict", message, OUTLINE_PATH)
                for message in exc.conflicts
            ]
        return []

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _resolve(self, relative_path: str) -> Path:
        return self.tool_context().resolve(relative_path)


def _require_non_blank(value: str, field_name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise EmptyArgumentError(message="empty path is not allowed", field_name=field_name)


def _build_tree(root: Path, path: Path, depth: int) -> FsEntry:
    name = path.name or str(path)
    relative = "" if path == root else path.relative_to(root).as_posix()
    if not path.is_dir():
        return FsEntry(name=name, path=relative, kind="file")
    if depth == 0:
        return FsEntry(name=name, path=relative, kind="dir")
    children = [_build_tree(root, child, depth - 1) for child in path.iterdir()]
    return FsEntry(name=name, path=relative, kind="dir", children=_sort_entries(children))


def _sort_entries(entries: Iterable[FsEntry]) -> list[FsEntry]:
    return sorted(entries, key=lambda entry: (entry.kind != "dir", entry.name.lower()))
