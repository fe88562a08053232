# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskkeeper.core.state import AppState
from taskkeeper.tasks.task_store import FileTaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    data_dir = tmp_path / "data"
    return SimpleNamespace(
        app_name="taskkeeper-test",
        log_level="DEBUG",
        console_enabled=False,
        data_dir=data_dir,
        tasks_file_path=data_dir / "tasks.json",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> FileTaskStore:
    return FileTaskStore(settings.tasks_file_path)


@pytest.fixture()
def state(settings: SimpleNamespace, store: FileTaskStore) -> AppState:
    """AppState wired with a real FileTaskStore in a tmp dir."""
    return AppState(settings=settings, task_store=store)
