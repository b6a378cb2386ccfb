"""Long-term memory tools.

These are dispatched by the agent runtime against the memory store it owns,
rather than through the shared registry.
"""

from __future__ import annotations

from typing import Any, ClassVar

from ...errors import MissingArgumentError
from ..memory import MemoryStore
from .base import BaseTool, ToolContext, require_string

__all__ = ["MemorySearchTool", "MemoryUpsertTool", "DEFAULT_SEARCH_LIMIT"]

DEFAULT_SEARCH_LIMIT = 10


class MemoryUpsertTool(BaseTool):
    name: ClassVar[str] = "memory_upsert"
    description: ClassVar[str] = "Remember a fact. INPUT: {\"key\": \"...\", \"value\": \"...\"}"

    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        key = require_string(params, "key")
        value = params.get("value")
        if not isinstance(value, str):
            raise MissingArgumentError.for_field("value")
        self._store.upsert(key, value)
        self._store.save()
        return {"ok": True}


class MemorySearchTool(BaseTool):
    name: ClassVar[str] = "memory_search"
    description: ClassVar[str] = "Search remembered facts. INPUT: {\"query\": \"...\", \"limit\": 10}"

    def __init__(self, store: MemoryStore, *, default_limit: int = DEFAULT_SEARCH_LIMIT) -> None:
        self._store = store
        self._default_limit = default_limit

    def execute(self, context: ToolContext, params: dict[str, Any]) -> list[dict[str, str]]:
        query = params.get("query")
        if not isinstance(query, str):
            raise MissingArgumentError.for_field("query")
        hits = self._store.search(query, self._resolve_limit(params.get("limit")))
        return [item.to_dict() for item in hits]

    def _resolve_limit(self, raw: Any) -> int:
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
            return self._default_limit
        return raw
