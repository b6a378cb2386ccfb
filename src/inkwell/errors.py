"""Standardized error types for agent tools and the workspace layer.

Every error raised by a tool handler or by the direct workspace API derives
from :class:`ToolError` so the agent loop can turn it into an observation and
callers outside the loop can report it consistently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Sequence


# -----------------------------------------------------------------------------
# Error Code Constants
# -----------------------------------------------------------------------------

class ErrorCode:
    """Constants for error codes used in tool responses."""

    # Sandbox / policy
    INVALID_PATH = "invalid_path"
    POLICY_VIOLATION = "policy_violation"
    WORKSPACE_NOT_SET = "workspace_not_set"

    # Structured data
    MALFORMED_OUTLINE = "malformed_outline"
    TIMELINE_CONFLICT = "timeline_conflict"

    # Dispatch / arguments
    UNKNOWN_TOOL = "unknown_tool"
    MISSING_ARGUMENT = "missing_argument"
    EMPTY_ARGUMENT = "empty_argument"
    INVALID_ARGUMENT = "invalid_argument"

    # General
    IO_FAILURE = "io_failure"
    INTERNAL_ERROR = "internal_error"


# -----------------------------------------------------------------------------
# Base Error Class
# -----------------------------------------------------------------------------

@dataclass
class ToolError(Exception):
    """Base exception class for all tool errors.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable error description.
        details: Additional structured error information.
        suggestion: Actionable guidance for recovery.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = ""

    severity: ClassVar[str] = "error"

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for JSON responses."""
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# -----------------------------------------------------------------------------
# Sandbox / Policy Errors
# -----------------------------------------------------------------------------

@dataclass
class InvalidPathError(ToolError):
    """Raised when a path is absolute or escapes the workspace root."""

    error_code: str = field(default=ErrorCode.INVALID_PATH)
    message: str = field(default="invalid relative path")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Use a path relative to the workspace root without '..'")

    path: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.path is not None:
            result["path"] = self.path
        return result


@dataclass
class PolicyViolationError(ToolError):
    """Raised when a write targets a reserved folder with the wrong extension."""

    error_code: str = field(default=ErrorCode.POLICY_VIOLATION)
    message: str = field(default="concept/, outline/ and stories/ only accept .md files")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Rename the target so it ends in .md")

    path: str | None = field(default=None)


@dataclass
class WorkspaceNotSetError(ToolError):
    """Raised when the direct workspace API is used before a root is chosen."""

    error_code: str = field(default=ErrorCode.WORKSPACE_NOT_SET)
    message: str = field(default="workspace not set")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Open a workspace folder first")


# -----------------------------------------------------------------------------
# Outline Errors
# -----------------------------------------------------------------------------

@dataclass
class MalformedOutlineError(ToolError):
    """Raised when an outline payload cannot be parsed."""

    error_code: str = field(default=ErrorCode.MALFORMED_OUTLINE)
    message: str = field(default="outline json invalid")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default='Write a JSON object shaped like {"events": [...]}')


@dataclass
class TimelineConflictError(ToolError):
    """Raised when merged outline events contradict each other.

    ``message`` holds every conflict, one per line; ``conflicts`` keeps them
    as a list.
    """

    error_code: str = field(default=ErrorCode.TIMELINE_CONFLICT)
    message: str = field(default="outline has conflicts")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Fix the listed events and write the outline again")

    conflicts: Sequence[str] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["conflicts"] = list(self.conflicts)
        return result


# -----------------------------------------------------------------------------
# Dispatch / Argument Errors
# -----------------------------------------------------------------------------

@dataclass
class UnknownToolError(ToolError):
    """Raised when the model asks for a tool that is not registered."""

    error_code: str = field(default=ErrorCode.UNKNOWN_TOOL)
    message: str = field(default="unknown tool")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Pick one of the tools listed in the system prompt")

    tool_name: str | None = field(default=None)

    @classmethod
    def for_name(cls, name: str) -> "UnknownToolError":
        return cls(message=f"unknown tool: {name}", tool_name=name)


@dataclass
class MissingArgumentError(ToolError):
    """Raised when a required argument is absent."""

    error_code: str = field(default=ErrorCode.MISSING_ARGUMENT)
    message: str = field(default="missing required argument")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Provide the argument in the INPUT JSON object")

    field_name: str | None = field(default=None)

    @classmethod
    def for_field(cls, name: str) -> "MissingArgumentError":
        return cls(message=f"missing args.{name}", field_name=name)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field_name is not None:
            result["field"] = self.field_name
        return result


@dataclass
class EmptyArgumentError(ToolError):
    """Raised when a required string argument is blank."""

    error_code: str = field(default=ErrorCode.EMPTY_ARGUMENT)
    message: str = field(default="argument must not be empty")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="")

    field_name: str | None = field(default=None)

    @classmethod
    def for_field(cls, name: str) -> "EmptyArgumentError":
        return cls(message=f"empty args.{name}", field_name=name)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field_name is not None:
            result["field"] = self.field_name
        return result


@dataclass
class InvalidArgumentError(ToolError):
    """Raised when an argument has the wrong type."""

    error_code: str = field(default=ErrorCode.INVALID_ARGUMENT)
    message: str = field(default="invalid argument")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="")

    field_name: str | None = field(default=None)


# -----------------------------------------------------------------------------
# IO Errors
# -----------------------------------------------------------------------------

@dataclass
class IOFailureError(ToolError):
    """Wraps read/write/metadata failures with the operation that failed."""

    error_code: str = field(default=ErrorCode.IO_FAILURE)
    message: str = field(default="io failure")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="")

    @classmethod
    def wrap(cls, operation: str, exc: BaseException) -> "IOFailureError":
        return cls(message=f"{operation} failed: {exc}")


# -----------------------------------------------------------------------------
# Model Errors
# -----------------------------------------------------------------------------

class ModelInvocationError(RuntimeError):
    """Raised when the model capability fails; aborts the agent run."""


__all__ = [
    "ErrorCode",
    "ModelInvocationError",
    "ToolError",
    "InvalidPathError",
    "PolicyViolationError",
    "WorkspaceNotSetError",
    "MalformedOutlineError",
    "TimelineConflictError",
    "UnknownToolError",
    "MissingArgumentError",
    "EmptyArgumentError",
    "InvalidArgumentError",
    "IOFailureError",
]
