# tests/conftest.py

from __future__ import annotations

from datetime import time
from pathlib import Path
from types import SimpleNamespace

import pytest

from nero_tasks.cli.bootstrap import build_state
from nero_tasks.core.state import AppState

from .fakes import FIXED_NOW, FailingTaskStore, FakeClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the console commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="nero-test",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        default_due_time=time(9, 0),
        confirm_before_delete=False,
        console_enabled=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(FIXED_NOW)


@pytest.fixture()
def store(settings: SimpleNamespace) -> FailingTaskStore:
    """Real SQLite store (its correctness is part of what we test), with a failure switch."""
    return FailingTaskStore(settings.tasks_db_path)


@pytest.fixture()
def state(settings: SimpleNamespace, store: FailingTaskStore, clock: FakeClock) -> AppState:
    return build_state(settings, store, clock=clock)


@pytest.fixture()
def actions(state: AppState):
    return state.actions
