# src/nero_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the task store, selection state and action layer into AppState,
  all sharing one lock.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime

from ..config import get_settings
from ..core.selection import SelectionState
from ..core.state import AppState
from ..tasks.task_actions import Clock, TaskActions
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_state(settings, task_store: TaskStore, *, clock: Clock = datetime.now) -> AppState:
    lock = threading.RLock()
    selection = SelectionState()
    actions = TaskActions(task_store, selection, lock=lock, clock=clock)
    return AppState(
        settings=settings,
        task_store=task_store,
        selection=selection,
        actions=actions,
        lock=lock,
    )


def create_initial_state(*, settings=None, clock: Clock = datetime.now) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    state = build_state(settings, TaskStore(settings.tasks_db_path), clock=clock)
    logger.info("State ready db=%s tasks=%d", settings.tasks_db_path, state.task_store.count_tasks())
    return state
