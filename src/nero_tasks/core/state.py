# src/nero_tasks/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_actions import TaskActions
from ..tasks.task_store import TaskStore
from .selection import SelectionState


@dataclass
class AppState:
    # Settings object (config.Settings or a test SimpleNamespace).
    settings: Any

    task_store: TaskStore
    selection: SelectionState
    actions: TaskActions

    # Single-writer lock shared by the action layer and connectors.
    lock: threading.RLock = field(default_factory=threading.RLock)

    # Task ids of the last list a connector rendered (for "/done 3" style refs).
    last_listing: list[str] = field(default_factory=list)
