"""Content-hash ledger over the ``concept/`` documents of a workspace.

The index carries one global revision counter. It moves forward by exactly one
whenever a tracked document's content hash changes, and never otherwise: an
identical re-save leaves the persisted file untouched, so downstream readers
can treat "revision increased" as "the concept corpus changed".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping

from ..errors import IOFailureError
from ..utils.file_io import compute_text_digest, read_json, write_json
from .layout import CONCEPT_INDEX_PATH
from .sandbox import normalize_relative_path

__all__ = ["ConceptIndex", "ConceptIndexEntry", "ConceptIndexStore", "update_concept_index"]

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ConceptIndexEntry:
    """Last known hash of one concept document."""

    path: str
    content_hash: str
    revision: int
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return {"hash": self.content_hash, "revision": self.revision, "updated_at": self.updated_at}

    @classmethod
    def from_payload(cls, path: str, payload: Mapping[str, Any]) -> "ConceptIndexEntry":
        return cls(
            path=path,
            content_hash=str(payload.get("hash", "")),
            revision=_as_revision(payload.get("revision")),
            updated_at=str(payload.get("updated_at", "")),
        )


@dataclass(slots=True)
class ConceptIndex:
    """In-memory form of ``concept_index.json``."""

    revision: int = 0
    updated_at: str = ""
    entries: dict[str, ConceptIndexEntry] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "revision": self.revision,
            "updated_at": self.updated_at,
            "files": {path: entry.to_dict() for path, entry in sorted(self.entries.items())},
        }

    @classmethod
    def from_payload(cls, payload: Any) -> "ConceptIndex":
        """Build an index from decoded JSON, falling back to empty defaults."""

        if not isinstance(payload, Mapping):
            return cls()
        files = payload.get("files")
        entries: dict[str, ConceptIndexEntry] = {}
        if isinstance(files, Mapping):
            for path, item in files.items():
                if isinstance(item, Mapping):
                    entries[str(path)] = ConceptIndexEntry.from_payload(str(path), item)
        return cls(
            revision=_as_revision(payload.get("revision")),
            updated_at=str(payload.get("updated_at") or ""),
            entries=entries,
        )

    def apply(self, relative_path: str, content_hash: str, *, now: str) -> bool:
        """Record ``content_hash`` for ``relative_path``; return ``True`` if it changed."""

        current = self.entries.get(relative_path)
        if current is not None and current.content_hash == content_hash:
            return False
        self.revision += 1
        self.updated_at = now
        self.entries[relative_path] = ConceptIndexEntry(
            path=relative_path,
            content_hash=content_hash,
            revision=self.revision,
            updated_at=now,
        )
        return True


class ConceptIndexStore:
    """Reads and read-modify-writes the concept index of one workspace."""

    def __init__(self, root: Path | str, *, clock: Callable[[], datetime] | None = None) -> None:
        self._root = Path(root)
        self._path = self._root / CONCEPT_INDEX_PATH
        self._clock = clock or _utcnow

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ConceptIndex:
        """Return the persisted index, or an empty one if missing or unparsable."""

        return ConceptIndex.from_payload(read_json(self._path))

    def save(self, index: ConceptIndex) -> None:
        try:
            write_json(self._path, index.to_payload())
        except OSError as exc:
            raise IOFailureError.wrap("write concept index", exc) from exc

    def update(self, relative_path: str, content: str) -> bool:
        """Hash ``content`` and bump the revision if the document changed.

        Returns ``True`` when the index was modified and persisted. When the
        stored hash already matches nothing is written.
        """

        key = normalize_relative_path(relative_path)
        index = self.load()
        digest = compute_text_digest(content)
        if not index.apply(key, digest, now=self._clock().isoformat()):
            LOGGER.debug("Concept document %s unchanged at revision %s", key, index.revision)
            return False
        self.save(index)
        LOGGER.debug("Concept index advanced to revision %s (%s)", index.revision, key)
        return True


def update_concept_index(root: Path | str, relative_path: str, content: str) -> bool:
    """Convenience wrapper around :meth:`ConceptIndexStore.update`."""

    return ConceptIndexStore(root).update(relative_path, content)


def _as_revision(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    return 0
