# src/nero_tasks/tasks/task_lists.py

from __future__ import annotations

"""
Smart lists.

Each list is a (predicate, sort) pair evaluated against a snapshot of all tasks
on every read. The optional search filter runs after the predicate and before
the sort. Upcoming adds date buckets, Anytime adds priority groups.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import StrEnum

from ..core.ports import TaskRepo
from .task_models import SortKey, Task, TaskPriority, sort_tasks

Predicate = Callable[[Task], bool]


class SmartList(StrEnum):
    INBOX = "inbox"
    TODAY = "today"
    UPCOMING = "upcoming"
    ANYTIME = "anytime"
    COMPLETED = "completed"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, raw: str) -> SmartList:
        key = (raw or "").strip().lower()
        for item in cls:
            if key and (item.value == key or item.value.startswith(key)):
                return item
        raise ValueError(f"unknown list: {raw!r}")


@dataclass(frozen=True, slots=True)
class ListSpec:
    predicate: Predicate
    sort: tuple[SortKey, ...]


_PRIORITY_DESC = SortKey(lambda t: t.priority.rank, descending=True)

LIST_SPECS: dict[SmartList, ListSpec] = {
    SmartList.INBOX: ListSpec(
        predicate=lambda t: not t.is_completed,
        sort=(_PRIORITY_DESC, SortKey(lambda t: t.created_date, descending=True)),
    ),
    SmartList.TODAY: ListSpec(
        predicate=lambda t: t.is_today and not t.is_completed,
        sort=(_PRIORITY_DESC, SortKey(lambda t: t.created_date)),
    ),
    SmartList.UPCOMING: ListSpec(
        predicate=lambda t: not t.is_completed and t.due_date is not None,
        sort=(SortKey(lambda t: t.due_date),),
    ),
    SmartList.ANYTIME: ListSpec(
        predicate=lambda t: not t.is_completed and t.due_date is None and not t.is_today,
        sort=(_PRIORITY_DESC, SortKey(lambda t: t.created_date, descending=True)),
    ),
    SmartList.COMPLETED: ListSpec(
        predicate=lambda t: t.is_completed,
        sort=(SortKey(lambda t: t.completed_date or t.created_date, descending=True),),
    ),
}


@dataclass(frozen=True, slots=True)
class TaskGroup:
    label: str
    tasks: list[Task]

    def __len__(self) -> int:
        return len(self.tasks)


# ---- search filter ----


def matches_search(task: Task, search_text: str) -> bool:
    """Case-insensitive substring match over title, notes and tags."""
    needle = (search_text or "").strip().casefold()
    if not needle:
        return True
    if needle in task.title.casefold() or needle in task.notes.casefold():
        return True
    return any(needle in tag.casefold() for tag in task.tags)


def filter_tasks(tasks: Iterable[Task], search_text: str) -> list[Task]:
    return [t for t in tasks if matches_search(t, search_text)]


# ---- list membership ----


def list_tasks(
    smart_list: SmartList,
    tasks: Iterable[Task],
    search_text: str = "",
    now: datetime | None = None,
) -> list[Task]:
    """
    Members of `smart_list` in display order.

    `now` is accepted so every list shares one signature; only the groupings
    below depend on it.
    """
    list_spec = LIST_SPECS[smart_list]
    matched = [t for t in tasks if list_spec.predicate(t)]
    return sort_tasks(filter_tasks(matched, search_text), list_spec.sort)


def query_list(repo: TaskRepo, smart_list: SmartList, search_text: str = "") -> list[Task]:
    """Same membership and order as list_tasks, evaluated by the store's query()."""
    list_spec = LIST_SPECS[smart_list]
    return repo.query(
        lambda t: list_spec.predicate(t) and matches_search(t, search_text),
        list_spec.sort,
    )


def inbox_tasks(tasks: Iterable[Task], search_text: str = "", now: datetime | None = None) -> list[Task]:
    return list_tasks(SmartList.INBOX, tasks, search_text, now)


def today_tasks(tasks: Iterable[Task], search_text: str = "", now: datetime | None = None) -> list[Task]:
    return list_tasks(SmartList.TODAY, tasks, search_text, now)


def upcoming_tasks(tasks: Iterable[Task], search_text: str = "", now: datetime | None = None) -> list[Task]:
    return list_tasks(SmartList.UPCOMING, tasks, search_text, now)


def anytime_tasks(tasks: Iterable[Task], search_text: str = "", now: datetime | None = None) -> list[Task]:
    return list_tasks(SmartList.ANYTIME, tasks, search_text, now)


def completed_tasks(tasks: Iterable[Task], search_text: str = "", now: datetime | None = None) -> list[Task]:
    return list_tasks(SmartList.COMPLETED, tasks, search_text, now)


def list_counts(tasks: Iterable[Task], now: datetime | None = None) -> dict[SmartList, int]:
    """Unfiltered member count per list (sidebar badges)."""
    snapshot = list(tasks)
    return {
        sl: sum(1 for t in snapshot if LIST_SPECS[sl].predicate(t)) for sl in SmartList
    }


# ---- Upcoming buckets ----

OVERDUE = "Overdue"
TODAY = "Today"
TOMORROW = "Tomorrow"
THIS_WEEK = "This Week"
NEXT_WEEK = "Next Week"
THIS_MONTH = "This Month"


def _iso_week(d: date) -> tuple[int, int]:
    iso = d.isocalendar()
    return iso[0], iso[1]


def upcoming_bucket(due: datetime, now: datetime) -> str:
    today = now.date()
    due_day = due.date()

    if due < now and due_day != today:
        return OVERDUE
    if due_day == today:
        return TODAY
    if due_day == today + timedelta(days=1):
        return TOMORROW
    if _iso_week(due_day) == _iso_week(today):
        return THIS_WEEK
    if _iso_week(due_day) == _iso_week(today + timedelta(weeks=1)):
        return NEXT_WEEK
    if (due_day.year, due_day.month) == (today.year, today.month):
        return THIS_MONTH
    return due.strftime("%B %Y")


def upcoming_buckets(
    tasks: Iterable[Task],
    search_text: str = "",
    now: datetime | None = None,
) -> list[TaskGroup]:
    """
    Upcoming grouped into date buckets.

    Buckets come out ordered by their first member's due date; members keep
    the Upcoming order (due date ascending). Empty buckets never appear.
    """
    now = now or datetime.now()
    grouped: dict[str, list[Task]] = {}
    # Members arrive in due-date order, so dict insertion order is already
    # first-due-date order.
    for task in upcoming_tasks(tasks, search_text, now):
        if task.due_date is None:
            continue
        grouped.setdefault(upcoming_bucket(task.due_date, now), []).append(task)

    return [TaskGroup(label, members) for label, members in grouped.items()]


# ---- Anytime priority groups ----


def anytime_priority_groups(
    tasks: Iterable[Task],
    search_text: str = "",
    now: datetime | None = None,
) -> list[TaskGroup]:
    members = anytime_tasks(tasks, search_text, now)
    groups: list[TaskGroup] = []
    for priority in sorted(TaskPriority, key=lambda p: p.rank, reverse=True):
        bucket = [t for t in members if t.priority is priority]
        if bucket:
            groups.append(TaskGroup(f"{priority.label} Priority", bucket))
    return groups


@dataclass(frozen=True, slots=True)
class AnytimeSummary:
    total: int
    high_priority: int
    with_notes: int
    oldest_age: str


def format_age(days: int) -> str:
    if days <= 0:
        return "Today"
    if days == 1:
        return "1 day"
    if days < 7:
        return f"{days} days"
    if days < 30:
        weeks = days // 7
        return f"{weeks} week{'' if weeks == 1 else 's'}"
    months = days // 30
    return f"{months} month{'' if months == 1 else 's'}"


def anytime_summary(tasks: Iterable[Task], now: datetime | None = None) -> AnytimeSummary:
    """Backlog figures over the unfiltered Anytime list."""
    now = now or datetime.now()
    members = anytime_tasks(tasks, "", now)
    if members:
        oldest = min(t.created_date for t in members)
        oldest_age = format_age((now - oldest).days)
    else:
        oldest_age = "-"
    return AnytimeSummary(
        total=len(members),
        high_priority=sum(1 for t in members if t.priority.rank >= TaskPriority.HIGH.rank),
        with_notes=sum(1 for t in members if t.notes),
        oldest_age=oldest_age,
    )


def todays_completed(tasks: Iterable[Task], now: datetime | None = None) -> list[Task]:
    """Completed list restricted to completions on today's date."""
    today = (now or datetime.now()).date()
    return [
        t
        for t in completed_tasks(tasks, "", now)
        if t.completed_date is not None and t.completed_date.date() == today
    ]

