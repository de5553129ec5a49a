# tests/helpers.py

from __future__ import annotations

from datetime import datetime

from nero_tasks.tasks.task_models import Task, TaskPriority, new_task_id

from .fakes import FIXED_NOW


def make_task(
    title: str = "task",
    *,
    created: datetime = FIXED_NOW,
    notes: str = "",
    due: datetime | None = None,
    today: bool = False,
    priority: TaskPriority = TaskPriority.NORMAL,
    completed: datetime | None = None,
    tags: list[str] | None = None,
) -> Task:
    """Build a Task directly, for pure list/stats tests that bypass the action layer."""
    return Task(
        id=new_task_id(),
        title=title,
        created_date=created,
        notes=notes,
        is_completed=completed is not None,
        completed_date=completed,
        due_date=due,
        is_today=today,
        priority=priority,
        tags=list(tags or []),
    )
