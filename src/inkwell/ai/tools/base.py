"""Base classes for agent tools.

Every tool implements :meth:`BaseTool.execute`; callers go through
:meth:`BaseTool.run`, which validates arguments, times the call and converts
failures into a :class:`ToolResult` instead of raising.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Mapping

from ...errors import (
    EmptyArgumentError,
    ErrorCode,
    IOFailureError,
    InvalidArgumentError,
    MissingArgumentError,
    ToolError,
)
from ...workspace.sandbox import ToolContext

__all__ = [
    "BaseTool",
    "ToolContext",
    "ToolResult",
    "optional_string",
    "require_string",
]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ToolResult:
    """Outcome of one tool invocation.

    Attributes:
        success: Whether the tool completed successfully.
        data: JSON-compatible result when successful.
        error: Error details when unsuccessful.
        duration_ms: Execution time in milliseconds.
    """

    success: bool
    data: Any = None
    error: ToolError | None = None
    duration_ms: float = 0.0

    @classmethod
    def ok(cls, data: Any, *, duration_ms: float = 0.0) -> "ToolResult":
        return cls(success=True, data=data, duration_ms=duration_ms)

    @classmethod
    def failed(cls, error: ToolError, *, duration_ms: float = 0.0) -> "ToolResult":
        return cls(success=False, error=error, duration_ms=duration_ms)

    def observation(self) -> Any:
        """Return the JSON value fed back to the model."""

        if self.success:
            return self.data
        message = self.error.message if self.error else "unknown error"
        return {"error": message}


class BaseTool(ABC):
    """Abstract base class for all agent tools.

    Subclasses set ``name`` and ``description`` and implement ``execute()``.
    Handlers must resolve every path through ``context.resolve`` themselves.
    """

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""

    def run(self, context: ToolContext, params: Mapping[str, Any] | None = None) -> ToolResult:
        """Execute the tool with standardized error handling."""

        start_time = time.perf_counter()
        params = dict(params) if isinstance(params, Mapping) else {}

        try:
            self.validate(params)
            data = self.execute(context, params)
        except ToolError as exc:
            return ToolResult.failed(exc, duration_ms=_elapsed_ms(start_time))
        except OSError as exc:
            LOGGER.debug("Tool %s hit an IO error: %s", self.name, exc)
            return ToolResult.failed(IOFailureError.wrap(self.name, exc), duration_ms=_elapsed_ms(start_time))
        except Exception as exc:
            LOGGER.exception("Tool %s failed unexpectedly", self.name)
            error = ToolError(error_code=ErrorCode.INTERNAL_ERROR, message=f"Internal error: {exc}")
            return ToolResult.failed(error, duration_ms=_elapsed_ms(start_time))
        return ToolResult.ok(data, duration_ms=_elapsed_ms(start_time))

    @abstractmethod
    def execute(self, context: ToolContext, params: dict[str, Any]) -> Any:
        """Execute the tool's core logic.

        Raises:
            ToolError: For expected error conditions.
        """
        ...

    def validate(self, params: dict[str, Any]) -> None:
        """Validate tool parameters before execution; override as needed."""
        pass


def require_string(params: Mapping[str, Any], field_name: str) -> str:
    """Return a present, non-blank string argument."""

    value = params.get(field_name)
    if not isinstance(value, str):
        raise MissingArgumentError.for_field(field_name)
    if not value.strip():
        raise EmptyArgumentError.for_field(field_name)
    return value


def optional_string(params: Mapping[str, Any], field_name: str, default: str = "") -> str:
    value = params.get(field_name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise InvalidArgumentError(message=f"args.{field_name} must be a string", field_name=field_name)
    return value


def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * 1000.0
