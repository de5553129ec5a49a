# src/nero_tasks/tasks/task_actions.py

from __future__ import annotations

"""
Action layer: the only code path that mutates tasks.

Every operation:
- validates input before touching the store,
- stages the new field values on a copy,
- commits the copy through the TaskRepo,
- applies the values to the caller's instance only after the commit succeeded.

So a ValidationError or PersistenceError leaves every Task, every smart list
and the SelectionState exactly as they were.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..core.errors import ValidationError
from ..core.ports import TaskRepo
from ..core.selection import SelectionState
from .task_models import Task, TaskPriority, copy_fields, new_task_id, to_local_naive

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# save_expanded: "argument omitted", distinct from None (clear the due date).
_KEEP: Any = object()


def _clean_title(title: str | None) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("title is required")
    return cleaned


class TaskActions:
    def __init__(
        self,
        store: TaskRepo,
        selection: SelectionState,
        *,
        lock: threading.RLock | None = None,
        clock: Clock = datetime.now,
    ) -> None:
        self._store = store
        self._selection = selection
        self._lock = lock or threading.RLock()
        self._clock = clock

    @property
    def store(self) -> TaskRepo:
        return self._store

    @property
    def selection(self) -> SelectionState:
        return self._selection

    def now(self) -> datetime:
        return self._clock()

    # ---- helpers ----

    def _commit(self, task: Task, **changes: Any) -> Task:
        staged = replace(task, **changes)
        canonical = self._store.update(staged)
        copy_fields(staged, task)
        return canonical

    # ---- create / edit ----

    def create_task(
        self,
        title: str,
        notes: str = "",
        due_date: datetime | None = None,
        priority: TaskPriority = TaskPriority.NORMAL,
        tags: Iterable[str] | None = None,
        is_today: bool = False,
    ) -> Task:
        clean = _clean_title(title)
        task = Task(
            id=new_task_id(),
            title=clean,
            notes=notes or "",
            created_date=self._clock(),
            due_date=to_local_naive(due_date),
            priority=priority,
            tags=list(tags or []),
            is_today=is_today,
        )
        with self._lock:
            self._store.insert(task)
        logger.info("Task created id=%s title=%r today=%s due=%s", task.id, clean, is_today, due_date)
        return task

    def update_task(
        self,
        task: Task,
        title: str,
        notes: str,
        due_date: datetime | None,
        priority: TaskPriority,
        tags: Iterable[str] | None = None,
    ) -> Task:
        """Overwrite the editable fields. `tags=None` keeps the current tags."""
        clean = _clean_title(title)
        changes: dict[str, Any] = {
            "title": clean,
            "notes": notes or "",
            "due_date": to_local_naive(due_date),
            "priority": priority,
        }
        if tags is not None:
            changes["tags"] = list(tags)
        with self._lock:
            result = self._commit(task, **changes)
        logger.debug("Task updated id=%s", task.id)
        return result

    # ---- flags ----

    def toggle_completion(self, task: Task) -> Task:
        with self._lock:
            if task.is_completed:
                result = self._commit(task, is_completed=False, completed_date=None)
            else:
                result = self._commit(
                    task, is_completed=True, completed_date=self._clock(), is_today=False
                )
        logger.debug("Task %s completed=%s", task.id, result.is_completed)
        return result

    def uncomplete(self, task: Task) -> Task:
        if not task.is_completed:
            return task
        return self.toggle_completion(task)

    def toggle_today(self, task: Task) -> Task:
        """Flip the Today flag. Completed tasks are accepted too; callers should not offer it."""
        if task.is_completed and not task.is_today:
            logger.warning("Adding completed task %s to Today; it stays hidden from the Today list", task.id)
        with self._lock:
            return self._commit(task, is_today=not task.is_today)

    def set_priority(self, task: Task, priority: TaskPriority) -> Task:
        with self._lock:
            return self._commit(task, priority=priority)

    def reschedule(self, task: Task, due_date: datetime | None) -> Task:
        with self._lock:
            return self._commit(task, due_date=to_local_naive(due_date))

    # ---- copy / delete ----

    def duplicate_task(self, task: Task) -> Task:
        return self.create_task(
            task.title,
            notes=task.notes,
            due_date=task.due_date,
            priority=task.priority,
            tags=task.tags,
            is_today=task.is_today,
        )

    def delete_task(self, task: Task) -> None:
        with self._lock:
            self._store.delete(task.id)
            self._selection.forget(task.id)
        logger.info("Task deleted id=%s", task.id)

    # ---- bulk ----

    def clear_completed(self, tasks: Iterable[Task]) -> int:
        """Delete the completed tasks among `tasks` in one commit."""
        ids = [t.id for t in tasks if t.is_completed]
        if not ids:
            return 0
        with self._lock:
            self._store.delete_many(ids)
            self._selection.reconcile(t.id for t in self._store.all_tasks())
        logger.info("Cleared %d completed tasks", len(ids))
        return len(ids)

    def move_all_to_today(self, tasks: Iterable[Task]) -> int:
        """Flag every open task among `tasks` for Today in one commit."""
        pending = [t for t in tasks if not t.is_completed and not t.is_today]
        if not pending:
            return 0
        staged = [replace(t, is_today=True) for t in pending]
        with self._lock:
            self._store.update_many(staged)
            for src, dst in zip(staged, pending):
                copy_fields(src, dst)
        logger.info("Moved %d tasks to Today", len(pending))
        return len(pending)

    # ---- selection-driven operations ----

    def selected_task(self) -> Task | None:
        tid = self._selection.selected_task_id
        return self._store.get(tid) if tid else None

    def expanded_task(self) -> Task | None:
        tid = self._selection.expanded_task_id
        return self._store.get(tid) if tid else None

    def toggle_expand_selected(self) -> bool:
        """Expand or collapse the selected task. Returns False if nothing is selected."""
        task = self.selected_task()
        if task is None:
            return False
        self._selection.toggle_expanded(task.id)
        return True

    def toggle_completion_selected(self) -> Task | None:
        task = self.selected_task()
        if task is None:
            return None
        return self.toggle_completion(task)

    def delete_selected(self) -> Task | None:
        task = self.selected_task()
        if task is None:
            return None
        self.delete_task(task)
        return task

    def save_expanded(
        self,
        title: str,
        notes: str | None = None,
        due_date: datetime | None = _KEEP,
        priority: TaskPriority | None = None,
    ) -> Task | None:
        """
        Save the inline edit of the expanded task and collapse it.

        Omitted fields keep their current values; an explicit `due_date=None`
        clears the due date. The task stays expanded when the save fails.
        """
        task = self.expanded_task()
        if task is None:
            return None
        result = self.update_task(
            task,
            title,
            task.notes if notes is None else notes,
            task.due_date if due_date is _KEEP else due_date,
            task.priority if priority is None else priority,
        )
        self._selection.collapse()
        return result
