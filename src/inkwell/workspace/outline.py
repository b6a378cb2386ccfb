"""Timeline validation for the shared ``outline.json`` document.

Before an outline is written, the events already on disk and the events about
to be written are merged (existing first) and checked for two kinds of
contradiction:

* the same non-blank event id appearing twice;
* one character placed at two different locations for the same ``time``.

``time`` and ``location`` are opaque strings; only exact equality counts.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from ..errors import MalformedOutlineError, TimelineConflictError

__all__ = [
    "TimelineEvent",
    "Outline",
    "OutlineConflict",
    "OutlineConflictChecker",
    "parse_outline",
    "validate_outline",
]

LOGGER = logging.getLogger(__name__)

_STRING_FIELDS = ("id", "time", "location", "description")


@dataclass(slots=True, frozen=True)
class TimelineEvent:
    """One entry of the outline's ``events`` list."""

    time: str = ""
    location: str = ""
    characters: tuple[str, ...] = ()
    description: str = ""
    id: str = ""

    @classmethod
    def from_payload(cls, payload: Any, *, position: int = 0) -> "TimelineEvent":
        if not isinstance(payload, Mapping):
            raise MalformedOutlineError(message=f"outline json invalid: event {position} is not an object")
        values: dict[str, Any] = {}
        for name in _STRING_FIELDS:
            value = payload.get(name)
            if value is None:
                values[name] = ""
            elif isinstance(value, str):
                values[name] = value
            else:
                raise MalformedOutlineError(
                    message=f"outline json invalid: event {position} field '{name}' must be a string"
                )
        characters = payload.get("characters")
        if characters is None:
            characters = []
        if not isinstance(characters, list) or not all(isinstance(item, str) for item in characters):
            raise MalformedOutlineError(
                message=f"outline json invalid: event {position} field 'characters' must be a list of strings"
            )
        return cls(characters=tuple(characters), **values)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "time": self.time,
            "location": self.location,
            "characters": list(self.characters),
            "description": self.description,
        }
        if self.id:
            payload["id"] = self.id
        return payload


@dataclass(slots=True, frozen=True)
class Outline:
    """Ordered list of timeline events."""

    events: tuple[TimelineEvent, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        return {"events": [event.to_dict() for event in self.events]}


@dataclass(slots=True, frozen=True)
class OutlineConflict:
    """A single human-readable contradiction found in a merged outline."""

    kind: str
    message: str
    details: Mapping[str, Any] = field(default_factory=dict)


def parse_outline(raw: str) -> Outline:
    """Parse an outline document strictly.

    Raises:
        MalformedOutlineError: If ``raw`` is not JSON or not shaped like an outline.
    """

    try:
        payload = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedOutlineError(message=f"outline json invalid: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise MalformedOutlineError(message="outline json invalid: expected an object")
    events = payload.get("events")
    if events is None:
        return Outline()
    if not isinstance(events, list):
        raise MalformedOutlineError(message="outline json invalid: 'events' must be a list")
    return Outline(
        events=tuple(TimelineEvent.from_payload(item, position=idx + 1) for idx, item in enumerate(events))
    )


def _parse_existing(raw: str) -> Outline:
    if not raw or not raw.strip():
        return Outline()
    try:
        return parse_outline(raw)
    except MalformedOutlineError as exc:
        LOGGER.warning("Ignoring unreadable outline already on disk: %s", exc.message)
        return Outline()


class OutlineConflictChecker:
    """Detects duplicate ids and character/location/time contradictions."""

    def find_conflicts(self, events: Sequence[TimelineEvent]) -> list[OutlineConflict]:
        """Return every conflict in ``events`` in a deterministic order."""

        conflicts = list(self._duplicate_ids(events))
        conflicts.extend(self._timeline_conflicts(events))
        return conflicts

    def merge(self, existing: Outline, incoming: Outline) -> tuple[TimelineEvent, ...]:
        return existing.events + incoming.events

    def validate(self, existing_json: str, incoming_json: str) -> None:
        """Validate ``incoming_json`` against the outline currently on disk.

        A blank or unparsable ``existing_json`` counts as an empty outline.

        Raises:
            MalformedOutlineError: If ``incoming_json`` cannot be parsed.
            TimelineConflictError: If the merged events contain any conflict.
        """

        existing = _parse_existing(existing_json)
        incoming = parse_outline(incoming_json)
        conflicts = self.find_conflicts(self.merge(existing, incoming))
        if conflicts:
            messages = [conflict.message for conflict in conflicts]
            raise TimelineConflictError(message="\n".join(messages), conflicts=tuple(messages))

    @staticmethod
    def _duplicate_ids(events: Iterable[TimelineEvent]) -> Iterable[OutlineConflict]:
        seen: dict[str, int] = {}
        for idx, event in enumerate(events):
            if not event.id.strip():
                continue
            previous = seen.get(event.id)
            seen[event.id] = idx
            if previous is not None:
                yield OutlineConflict(
                    kind="duplicate_id",
                    message=f"duplicate event id: {event.id} (events {previous + 1} and {idx + 1})",
                    details={"id": event.id, "first": previous + 1, "second": idx + 1},
                )

    @staticmethod
    def _timeline_conflicts(events: Iterable[TimelineEvent]) -> Iterable[OutlineConflict]:
        placements: dict[tuple[str, str], str] = {}
        for event in events:
            if not event.time.strip() or not event.characters:
                continue
            has_location = bool(event.location.strip())
            for character in event.characters:
                key = (character, event.time)
                previous = placements.get(key)
                if previous is None:
                    if has_location:
                        placements[key] = event.location
                    continue
                if has_location and previous != event.location:
                    yield OutlineConflict(
                        kind="timeline",
                        message=(
                            f"timeline conflict: {character} is at both {previous} "
                            f"and {event.location} at {event.time}"
                        ),
                        details={
                            "character": character,
                            "time": event.time,
                            "locations": [previous, event.location],
                        },
                    )


def validate_outline(existing_json: str, incoming_json: str) -> None:
    """Module-level shortcut for :meth:`OutlineConflictChecker.validate`."""

    OutlineConflictChecker().validate(existing_json, incoming_json)
