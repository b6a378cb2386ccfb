"""File IO helpers shared by the workspace layer and the agent tools."""

from __future__ import annotations

import codecs
import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

__all__ = [
    "read_text",
    "write_text",
    "read_json",
    "write_json",
    "compute_text_digest",
]

LOGGER = logging.getLogger(__name__)

_BOM_MAP: dict[bytes, str] = {
    codecs.BOM_UTF8: "utf-8-sig",
    codecs.BOM_UTF16_LE: "utf-16-le",
    codecs.BOM_UTF16_BE: "utf-16-be",
    codecs.BOM_UTF32_LE: "utf-32-le",
    codecs.BOM_UTF32_BE: "utf-32-be",
}


def read_text(path: Path | str, *, encoding: str | None = None) -> str:
    """Read a text file, honouring a leading byte-order mark when present."""

    target = Path(path)
    raw = target.read_bytes()
    detected_encoding = encoding or _detect_encoding(raw)
    text = raw.decode(detected_encoding)
    return text[1:] if text.startswith("\ufeff") else text


def write_text(
    path: Path | str,
    content: str,
    *,
    encoding: str = "utf-8",
    atomic: bool = True,
) -> Path:
    """Write ``content`` verbatim, replacing the target atomically by default.

    The parent directory must already exist; callers decide whether creating it
    is allowed.
    """

    target = Path(path)
    if not atomic:
        with target.open("w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        return target

    descriptor, tmp_name = tempfile.mkstemp(
        dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(descriptor, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    finally:
        if os.path.exists(tmp_name):  # pragma: no cover - cleanup path
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
    return target


def read_json(path: Path | str) -> Any | None:
    """Return the decoded JSON document at ``path`` or ``None`` when unusable.

    Missing files and invalid JSON both yield ``None``; the latter is logged.
    """

    target = Path(path)
    try:
        text = read_text(target)
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.warning("Unable to read %s: %s", target, exc)
        return None
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        LOGGER.warning("%s is not valid JSON: %s", target, exc)
        return None


def write_json(path: Path | str, payload: Any, *, make_parents: bool = True) -> Path:
    """Serialize ``payload`` as pretty, key-sorted JSON and write it atomically."""

    target = Path(path)
    if make_parents:
        target.parent.mkdir(parents=True, exist_ok=True)
    body = json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)
    return write_text(target, body + "\n")


def compute_text_digest(text: str) -> str:
    """Return a SHA-256 digest for the provided text."""

    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _detect_encoding(raw: bytes) -> str:
    for bom, encoding in _BOM_MAP.items():
        if raw.startswith(bom):
            return encoding
    return "utf-8"
