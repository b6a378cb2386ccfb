"""Logging bootstrap for the ``inkwell`` command.

Records always go to a rotating ``inkwell.log``. The optional console handler
writes to stderr so it never interleaves with an answer printed on stdout.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import TextIO

__all__ = ["setup_logging", "get_log_path", "quiet_loggers", "LOG_FORMAT"]

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOG_FILE_NAME = "inkwell.log"
_DEFAULT_LOG_DIR = Path.home() / ".inkwell" / "logs"
_THIRD_PARTY_LOGGERS: tuple[str, ...] = ("asyncio", "httpx", "httpcore", "openai")

_installed: list[logging.Handler] = []
_log_path: Path | None = None


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    stream: TextIO | None = None,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> Path:
    """Install the file handler (and a stderr handler when ``console``).

    Repeated calls are no-ops unless ``force`` is set, in which case handlers
    from the previous call are closed and replaced.

    Args:
        level: Root level applied to every installed handler.
        log_dir: Directory for ``inkwell.log``; falls back to
            ``INKWELL_LOG_DIR`` then ``~/.inkwell/logs``.
        console: Whether to echo records on the console.
        stream: Console stream, ``sys.stderr`` by default.
        max_bytes: Rotation threshold of the log file.
        backup_count: Number of rotated files kept.
        force: Reconfigure even if logging was already set up.

    Returns:
        Path of the active log file.
    """

    global _log_path
    if _log_path is not None and not force:
        return _log_path

    directory = _resolve_log_dir(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / _LOG_FILE_NAME
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=_DATE_FORMAT)

    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    ]
    if console:
        handlers.append(logging.StreamHandler(stream or sys.stderr))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    _close_installed()
    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    quiet_loggers(_THIRD_PARTY_LOGGERS, floor=max(level, logging.WARNING))

    _installed.extend(handlers)
    _log_path = path
    return path


def get_log_path() -> Path | None:
    """Return the log file configured by :func:`setup_logging`, if any."""

    return _log_path


def quiet_loggers(names: tuple[str, ...], *, floor: int = logging.WARNING) -> None:
    for name in names:
        logging.getLogger(name).setLevel(floor)


def _resolve_log_dir(log_dir: Path | str | None) -> Path:
    return Path(log_dir or os.environ.get("INKWELL_LOG_DIR") or _DEFAULT_LOG_DIR).expanduser()


def _close_installed() -> None:
    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()
