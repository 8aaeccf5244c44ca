from __future__ import annotations

import logging
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _restore_root_logger() -> None:
    """Undo ``basicConfig(force=True)`` calls made by entry points under test."""

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def clinictime_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point settings at an isolated home directory."""

    monkeypatch.setenv("CLINICTIME_HOME", str(tmp_path))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    return tmp_path
