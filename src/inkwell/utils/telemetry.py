"""Local JSONL telemetry for agent runs.

Nothing leaves the machine: events are appended to ``agent.jsonl`` inside the
workspace's ``.novel/.logs`` folder.
"""

from __future__ import annotations

import json
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping

__all__ = ["TelemetryClient", "TelemetryEvent", "telemetry_enabled", "workspace_telemetry"]

AGENT_LOG_NAME = "agent.jsonl"
_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(slots=True, frozen=True)
class TelemetryEvent:
    name: str
    properties: Mapping[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_json(self, session_id: str) -> str:
        record = {
            "session_id": session_id,
            "name": self.name,
            "ts": self.timestamp.isoformat(),
            "properties": dict(self.properties),
        }
        return json.dumps(record, default=_json_default, ensure_ascii=False)


@dataclass(slots=True)
class TelemetryClient:
    """Buffers events and appends them to ``log_dir/agent.jsonl`` on flush.

    A disabled client, or one without a ``log_dir``, accepts events and drops
    them.
    """

    enabled: bool = False
    log_dir: Path | None = None
    flush_threshold: int = 32
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    _pending: list[TelemetryEvent] = field(default_factory=list, init=False, repr=False)

    @property
    def log_path(self) -> Path | None:
        return None if self.log_dir is None else self.log_dir / AGENT_LOG_NAME

    def track_event(self, name: str, **properties: Any) -> None:
        if not self.enabled or self.log_dir is None:
            return
        self._pending.append(TelemetryEvent(name=name, properties=properties))
        if len(self._pending) >= self.flush_threshold:
            self.flush()

    def flush(self) -> Path | None:
        """Append pending events and return the log path, or ``None`` if nothing was written.

        Raises:
            OSError: If the log folder or file cannot be written; pending
                events are kept.
        """

        path = self.log_path
        if not self._pending or path is None:
            return None
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = "".join(event.to_json(self.session_id) + "\n" for event in self._pending)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(lines)
        self._pending.clear()
        return path

    def pending_events(self) -> int:
        return len(self._pending)


def telemetry_enabled(default: bool = True) -> bool:
    """Return ``default`` unless ``INKWELL_TELEMETRY`` says otherwise."""

    raw = os.environ.get("INKWELL_TELEMETRY")
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


def workspace_telemetry(workspace_root: Path | str, *, enabled: bool | None = None) -> TelemetryClient:
    """Build a client writing into ``<workspace>/.novel/.logs``."""

    from ..workspace.layout import LOGS_DIR

    active = telemetry_enabled() if enabled is None else enabled
    return TelemetryClient(enabled=active, log_dir=Path(workspace_root) / LOGS_DIR)


def _json_default(value: Any) -> Any:
    if isinstance(value, (Path, os.PathLike)):
        return os.fspath(value)
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
