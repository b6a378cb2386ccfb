"""Small key/value long-term memory persisted inside the workspace."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from ...errors import IOFailureError
from ...utils.file_io import read_json, write_json
from ...workspace.layout import MEMORY_PATH

__all__ = ["MemoryItem", "MemoryStore"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class MemoryItem:
    key: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "value": self.value}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MemoryItem":
        return cls(key=str(payload.get("key", "")), value=str(payload.get("value", "")))


@dataclass(slots=True)
class MemoryStore:
    """Ordered long-term memory backed by ``agent_memory.json``.

    Keys are unique and case-sensitive; the first insertion of a key fixes its
    position. The store is loaded once and written back on :meth:`save`.
    """

    path: Path
    items: list[MemoryItem] = field(default_factory=list)

    @classmethod
    def load(cls, workspace_root: Path | str) -> "MemoryStore":
        """Load the store for ``workspace_root``; missing or corrupt files start empty."""

        path = Path(workspace_root) / MEMORY_PATH
        payload = read_json(path)
        return cls(path=path, items=list(_items_from_payload(payload, path)))

    def upsert(self, key: str, value: str) -> None:
        for item in self.items:
            if item.key == key:
                item.value = value
                return
        self.items.append(MemoryItem(key=key, value=value))

    def search(self, query: str, limit: int) -> list[MemoryItem]:
        """Case-insensitive substring match on key or value, in store order."""

        needle = query.lower()
        hits: list[MemoryItem] = []
        for item in self.items:
            if len(hits) >= limit:
                break
            if needle in item.key.lower() or needle in item.value.lower():
                hits.append(item)
        return hits

    def render(self, limit: int) -> str:
        lines = [f"- {item.key.strip()}: {item.value.strip()}" for item in self.items[: max(0, limit)]]
        return "\n".join(lines).strip()

    def save(self) -> None:
        payload = {"long_term": [item.to_dict() for item in self.items]}
        try:
            write_json(self.path, payload)
        except OSError as exc:
            raise IOFailureError.wrap("write memory", exc) from exc
        LOGGER.debug("Saved %s memory items to %s", len(self.items), self.path)

    def __len__(self) -> int:
        return len(self.items)


def _items_from_payload(payload: Any, path: Path) -> Iterable[MemoryItem]:
    if payload is None:
        return []
    entries = payload.get("long_term") if isinstance(payload, Mapping) else None
    if not isinstance(entries, list):
        LOGGER.warning("Ignoring malformed memory file %s", path)
        return []
    return [MemoryItem.from_dict(entry) for entry in entries if isinstance(entry, Mapping)]
