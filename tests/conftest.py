"""Shared pytest fixtures."""

from __future__ import annotations

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep user-level TIDELINE_* overrides and log files out of the tests."""

    for name in list(os.environ):
        if name.startswith("TIDELINE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TIDELINE_LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture
def three_line_text() -> str:
    return "alpha\nbeta\ngamma\n"
