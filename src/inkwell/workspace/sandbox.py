"""Path sandboxing for tool-driven and API-driven file operations."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath, PureWindowsPath

from ..errors import InvalidPathError, PolicyViolationError
from .layout import CONCEPT_DIR, DOCUMENT_EXTENSION, RESERVED_DOCUMENT_DIRS

__all__ = [
    "PathSandbox",
    "ToolContext",
    "validate_relative_path",
    "normalize_relative_path",
    "check_write_policy",
    "is_concept_document",
]


def validate_relative_path(relative_path: str) -> str:
    """Return ``relative_path`` unchanged if it stays under the workspace root.

    Absolute paths, drive/UNC prefixes and ``..`` segments are rejected with
    :class:`InvalidPathError`. Existence is not checked.
    """

    if not isinstance(relative_path, str):
        raise InvalidPathError(message="path must be a string")
    if PurePosixPath(relative_path).is_absolute():
        raise InvalidPathError(message="absolute path is not allowed", path=relative_path)
    windows = PureWindowsPath(relative_path)
    if windows.drive or windows.root:
        raise InvalidPathError(message="absolute path is not allowed", path=relative_path)
    for part in relative_path.replace("\\", "/").split("/"):
        if part == "..":
            raise InvalidPathError(message="invalid relative path", path=relative_path)
    return relative_path


def normalize_relative_path(relative_path: str) -> str:
    """Return the ``/``-joined form of a validated path without ``.`` or empty segments."""

    parts = [part for part in relative_path.replace("\\", "/").split("/") if part not in ("", ".")]
    return "/".join(parts)


def check_write_policy(relative_path: str) -> None:
    """Reject writes into reserved document folders that are not ``.md`` files."""

    normalized = normalize_relative_path(relative_path)
    top = normalized.split("/", 1)[0]
    if "/" in normalized and top in RESERVED_DOCUMENT_DIRS:
        if not normalized.lower().endswith(DOCUMENT_EXTENSION):
            raise PolicyViolationError(path=relative_path)


def is_concept_document(relative_path: str) -> bool:
    """Return ``True`` for documents tracked by the concept index."""

    normalized = normalize_relative_path(relative_path)
    return normalized.startswith(f"{CONCEPT_DIR}/") and normalized.lower().endswith(DOCUMENT_EXTENSION)


class PathSandbox:
    """Resolves user-supplied relative paths against one workspace root."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def validate(self, relative_path: str) -> str:
        return validate_relative_path(relative_path)

    def resolve(self, relative_path: str) -> Path:
        """Validate ``relative_path`` and join it onto the root."""

        validated = validate_relative_path(relative_path)
        normalized = normalize_relative_path(validated)
        return self._root / normalized if normalized else self._root


@dataclass(slots=True, frozen=True)
class ToolContext:
    """Immutable per-request snapshot handed to every tool invocation.

    Attributes:
        workspace_root: Absolute directory all tool paths resolve under.
    """

    workspace_root: Path

    @property
    def sandbox(self) -> PathSandbox:
        return PathSandbox(self.workspace_root)

    def resolve(self, relative_path: str) -> Path:
        return self.sandbox.resolve(relative_path)
