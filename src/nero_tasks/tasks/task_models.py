# src/nero_tasks/tasks/task_models.py

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class TaskPriority(StrEnum):
    """
    Ordered task priority.

    Stored by value; ordering comes from `rank` (low < normal < high < urgent).
    """

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_db(cls, raw: str | None) -> TaskPriority:
        if not raw:
            return cls.NORMAL
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.NORMAL


_PRIORITY_RANK = {
    TaskPriority.LOW: 0,
    TaskPriority.NORMAL: 1,
    TaskPriority.HIGH: 2,
    TaskPriority.URGENT: 3,
}


def new_task_id() -> str:
    return uuid.uuid4().hex


def to_local_naive(value: datetime | None) -> datetime | None:
    """Task timestamps are naive local wall-clock time; aware values are converted."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


@dataclass(slots=True)
class Task:
    id: str
    title: str
    created_date: datetime

    notes: str = ""
    is_completed: bool = False
    completed_date: datetime | None = None
    due_date: datetime | None = None
    is_today: bool = False
    priority: TaskPriority = TaskPriority.NORMAL
    tags: list[str] = field(default_factory=list)


# Fields an action may change. id and created_date are fixed at creation.
MUTABLE_FIELDS: tuple[str, ...] = (
    "title",
    "notes",
    "is_completed",
    "completed_date",
    "due_date",
    "is_today",
    "priority",
    "tags",
)


def copy_fields(src: Task, dst: Task) -> None:
    """Copy every mutable field of `src` onto `dst` (same task id expected)."""
    if src is dst:
        return
    for name in MUTABLE_FIELDS:
        value = getattr(src, name)
        if name == "tags":
            value = list(value)
        setattr(dst, name, value)


@dataclass(frozen=True, slots=True)
class SortKey:
    """One level of a task ordering: `key(task)` ascending unless `descending`."""

    key: Callable[[Task], Any]
    descending: bool = False


def sort_tasks(tasks: Iterable[Task], keys: Sequence[SortKey]) -> list[Task]:
    """
    Order tasks by `keys` (first key is primary).

    Stable multi-pass sort: least significant key first, so ties after all keys
    keep the input order.
    """
    out = list(tasks)
    for sk in reversed(keys):
        out.sort(key=sk.key, reverse=sk.descending)
    return out
