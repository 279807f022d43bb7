"""Global test fixtures for roomdispatch."""

from __future__ import annotations

from pathlib import Path

import pytest

from roomdispatch.guard import NO_SPAWN_MARKER, WORKER_MARKER


@pytest.fixture(autouse=True)
def outside_worker(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test as a top-level caller, even when the suite itself runs inside a worker."""
    monkeypatch.delenv(WORKER_MARKER, raising=False)
    monkeypatch.delenv(NO_SPAWN_MARKER, raising=False)


@pytest.fixture
def tmp_workdir(tmp_path: Path) -> Path:
    """Provide a temporary project directory with no config files."""
    return tmp_path
