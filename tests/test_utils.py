"""Tests covering the utilities modules."""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from inkwell.utils import file_io, logging as logging_utils, telemetry


def test_read_text_detects_bom(tmp_path: Path) -> None:
    target = tmp_path / "utf16.txt"
    target.write_bytes("Line1\r\nLine2".encode("utf-16"))

    assert file_io.read_text(target) == "Line1\r\nLine2"

    utf8 = tmp_path / "bom.txt"
    utf8.write_bytes(b"\xef\xbb\xbfhello")
    assert file_io.read_text(utf8) == "hello"


def test_write_text_is_verbatim(tmp_path: Path) -> None:
    target = tmp_path / "output.txt"

    returned = file_io.write_text(target, "Line1\r\nLine2")

    assert returned == target
    assert target.read_bytes() == b"Line1\r\nLine2"
    assert [path.name for path in tmp_path.iterdir()] == ["output.txt"]


def test_write_text_does_not_create_parents(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        file_io.write_text(tmp_path / "missing" / "a.txt", "x")


def test_json_helpers(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "doc.json"

    file_io.write_json(target, {"b": 1, "a": [1, 2]})

    assert target.read_text(encoding="utf-8").startswith('{\n  "a"')
    assert file_io.read_json(target) == {"a": [1, 2], "b": 1}
    assert file_io.read_json(tmp_path / "absent.json") is None
    target.write_text("{bad", encoding="utf-8")
    assert file_io.read_json(target) is None


def test_compute_text_digest_is_sha256() -> None:
    digest = file_io.compute_text_digest("abc")

    assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_setup_logging_writes_to_env_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("INKWELL_LOG_DIR", str(log_dir))

    path = logging_utils.setup_logging(logging.DEBUG, console=False, force=True)
    logging.getLogger("inkwell.test").info("hello log")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert path == log_dir / "inkwell.log"
    assert logging_utils.get_log_path() == path
    assert "hello log" in path.read_text(encoding="utf-8")
    assert logging.getLogger("httpx").level == logging.WARNING


def test_telemetry_disabled_records_nothing(tmp_path: Path) -> None:
    client = telemetry.TelemetryClient(enabled=False, log_dir=tmp_path)

    client.track_event("agent.run", steps=1)

    assert client.pending_events() == 0
    assert client.flush() is None


def test_telemetry_flush_appends_jsonl(tmp_path: Path) -> None:
    client = telemetry.workspace_telemetry(tmp_path, enabled=True)

    client.track_event("agent.run", steps=2, workspace=tmp_path)
    client.track_event("agent.run", steps=3)
    log_path = client.flush()

    assert log_path == tmp_path / ".novel" / ".logs" / "agent.jsonl"
    events = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert [event["properties"]["steps"] for event in events] == [2, 3]
    assert events[0]["properties"]["workspace"] == str(tmp_path)
    assert client.pending_events() == 0


def test_telemetry_env_switch(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("INKWELL_TELEMETRY", "off")

    assert not telemetry.telemetry_enabled()
    assert not telemetry.workspace_telemetry(tmp_path).enabled


def test_console_handler_uses_given_stream(tmp_path: Path) -> None:
    stream = io.StringIO()

    logging_utils.setup_logging(logging.INFO, log_dir=tmp_path, stream=stream, force=True)
    logging.getLogger("inkwell.test").warning("on the console")

    assert "WARNING  | inkwell.test | on the console" in stream.getvalue()
    logging_utils.setup_logging(logging.INFO, log_dir=tmp_path, console=False, force=True)
    logging.getLogger("inkwell.test").warning("file only")
    assert "file only" not in stream.getvalue()
