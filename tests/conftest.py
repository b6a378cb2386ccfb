"""Shared pytest fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from inkwell.workspace import WorkspaceService


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("INKWELL_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("INKWELL_LOG_DIR", str(tmp_path_factory.mktemp("logs")))


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "novel"
    root.mkdir()
    return root


@pytest.fixture
def workspace(workspace_root: Path) -> WorkspaceService:
    service = WorkspaceService(workspace_root)
    service.init_novel()
    return service
