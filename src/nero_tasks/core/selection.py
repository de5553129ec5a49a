# src/nero_tasks/core/selection.py

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from ..tasks.task_lists import SmartList

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SelectionSnapshot:
    selected_list: SmartList
    selected_task_id: str | None
    expanded_task_id: str | None
    search_text: str


class SelectionState:
    """
    Shared view state: visible list, selected task, expanded task, search text.

    One instance lives on AppState and is handed to every view and to the
    action layer. Invariants:
    - at most one task is expanded; expanding another collapses the previous one
    - ids of deleted tasks are cleared via forget()/reconcile()
    - search text never touches tasks; lists re-filter on next read
    """

    def __init__(self, selected_list: SmartList = SmartList.INBOX) -> None:
        self._lock = threading.RLock()
        self._selected_list = selected_list
        self._selected_task_id: str | None = None
        self._expanded_task_id: str | None = None
        self._search_text = ""

    @property
    def selected_list(self) -> SmartList:
        return self._selected_list

    @property
    def selected_task_id(self) -> str | None:
        return self._selected_task_id

    @property
    def expanded_task_id(self) -> str | None:
        return self._expanded_task_id

    @property
    def search_text(self) -> str:
        return self._search_text

    def snapshot(self) -> SelectionSnapshot:
        with self._lock:
            return SelectionSnapshot(
                selected_list=self._selected_list,
                selected_task_id=self._selected_task_id,
                expanded_task_id=self._expanded_task_id,
                search_text=self._search_text,
            )

    # ---- list ----

    def show_list(self, smart_list: SmartList) -> None:
        with self._lock:
            self._selected_list = smart_list

    # ---- selection ----

    def select(self, task_id: str | None) -> None:
        with self._lock:
            self._selected_task_id = task_id

    def clear_selection(self) -> None:
        self.select(None)

    def is_selected(self, task_id: str) -> bool:
        return self._selected_task_id == task_id

    # ---- expansion ----

    def expand(self, task_id: str) -> str | None:
        """Expand `task_id`; returns the id that was expanded before (now collapsed)."""
        with self._lock:
            previous = self._expanded_task_id
            self._expanded_task_id = task_id
        if previous is not None and previous != task_id:
            logger.debug("Collapsed task %s in favour of %s", previous, task_id)
        return previous

    def collapse(self) -> None:
        with self._lock:
            self._expanded_task_id = None

    def toggle_expanded(self, task_id: str) -> bool:
        """Returns True if `task_id` is expanded afterwards."""
        with self._lock:
            if self._expanded_task_id == task_id:
                self._expanded_task_id = None
                return False
            self.expand(task_id)
            return True

    def is_expanded(self, task_id: str) -> bool:
        return self._expanded_task_id == task_id

    # ---- search ----

    def set_search_text(self, text: str) -> None:
        with self._lock:
            self._search_text = text or ""

    def clear_search(self) -> None:
        self.set_search_text("")

    # ---- consistency with the task store ----

    def forget(self, task_id: str) -> None:
        """Drop every reference to a removed task."""
        with self._lock:
            if self._selected_task_id == task_id:
                self._selected_task_id = None
            if self._expanded_task_id == task_id:
                self._expanded_task_id = None

    def reconcile(self, existing_ids: Iterable[str]) -> None:
        ids = set(existing_ids)
        with self._lock:
            if self._selected_task_id is not None and self._selected_task_id not in ids:
                self._selected_task_id = None
            if self._expanded_task_id is not None and self._expanded_task_id not in ids:
                self._expanded_task_id = None
