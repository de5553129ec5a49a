# src/nero_tasks/tasks/task_stats.py

from __future__ import annotations

"""
Completion statistics for the Completed list.

All functions are pure: they take a task snapshot and an explicit `now`.
Calendar reasoning (days, ISO weeks, months) uses the local wall clock.
"""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import StrEnum

from .task_lists import completed_tasks
from .task_models import Task

# Sunday-first, the order used for tie-breaking best_day.
WEEKDAYS: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


class TimePeriod(StrEnum):
    ALL = "All"
    TODAY = "Today"
    YESTERDAY = "Yesterday"
    THIS_WEEK = "This Week"
    LAST_WEEK = "Last Week"
    THIS_MONTH = "This Month"

    @classmethod
    def parse(cls, raw: str) -> TimePeriod:
        key = "".join((raw or "").split()).replace("-", "").replace("_", "").lower()
        for item in cls:
            if "".join(item.value.split()).lower() == key:
                return item
        raise ValueError(f"unknown period: {raw!r}")


@dataclass(frozen=True, slots=True)
class CompletionStats:
    total_completed: int
    current_streak: int
    average_completion_time: timedelta | None
    best_day: str | None


@dataclass(frozen=True, slots=True)
class CompletedSummary:
    period: TimePeriod
    tasks: list[Task]
    stats: CompletionStats
    period_counts: dict[TimePeriod, int]


def _iso_week(d: date) -> tuple[int, int]:
    iso = d.isocalendar()
    return iso[0], iso[1]


def in_period(completed: datetime, period: TimePeriod, now: datetime) -> bool:
    today = now.date()
    day = completed.date()

    if period is TimePeriod.ALL:
        return True
    if period is TimePeriod.TODAY:
        return day == today
    if period is TimePeriod.YESTERDAY:
        return day == today - timedelta(days=1)
    if period is TimePeriod.THIS_WEEK:
        return _iso_week(day) == _iso_week(today)
    if period is TimePeriod.LAST_WEEK:
        return _iso_week(day) == _iso_week(today - timedelta(weeks=1))
    if period is TimePeriod.THIS_MONTH:
        return (day.year, day.month) == (today.year, today.month)
    return False


def filter_by_period(tasks: Iterable[Task], period: TimePeriod, now: datetime) -> list[Task]:
    return [
        t
        for t in tasks
        if t.completed_date is not None and in_period(t.completed_date, period, now)
    ]


def period_counts(tasks: Iterable[Task], now: datetime) -> dict[TimePeriod, int]:
    """Chip counts: each period counted independently over the same subset."""
    snapshot = list(tasks)
    return {p: len(filter_by_period(snapshot, p, now)) for p in TimePeriod}


def current_streak(tasks: Iterable[Task], now: datetime) -> int:
    days = {t.completed_date.date() for t in tasks if t.completed_date is not None}
    day = now.date()
    streak = 0
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def average_completion_time(tasks: Iterable[Task]) -> timedelta | None:
    spans = [t.completed_date - t.created_date for t in tasks if t.completed_date is not None]
    if not spans:
        return None
    return sum(spans, timedelta()) / len(spans)


def best_day(tasks: Iterable[Task]) -> str | None:
    # weekday(): Monday=0 .. Sunday=6; shift so Sunday=0.
    counts = Counter(
        (t.completed_date.weekday() + 1) % 7 for t in tasks if t.completed_date is not None
    )
    if not counts:
        return None
    top = max(counts.values())
    return WEEKDAYS[min(i for i, n in counts.items() if n == top)]


def compute_stats(tasks: Iterable[Task], now: datetime) -> CompletionStats:
    snapshot = list(tasks)
    return CompletionStats(
        total_completed=len(snapshot),
        current_streak=current_streak(snapshot, now),
        average_completion_time=average_completion_time(snapshot),
        best_day=best_day(snapshot),
    )


def completed_summary(
    tasks: Iterable[Task],
    search_text: str = "",
    now: datetime | None = None,
    period: TimePeriod = TimePeriod.ALL,
) -> CompletedSummary:
    """Completed list for one period, its stats, and the chip count of every period."""
    now = now or datetime.now()
    searched = completed_tasks(tasks, search_text, now)
    selected = filter_by_period(searched, period, now)
    return CompletedSummary(
        period=period,
        tasks=selected,
        stats=compute_stats(selected, now),
        period_counts=period_counts(searched, now),
    )


def format_duration(td: timedelta | None) -> str:
    if td is None:
        return "-"
    seconds = td.total_seconds()
    if seconds < 3600:
        minutes = max(0, int(seconds // 60))
        return f"{minutes} minute{'' if minutes == 1 else 's'}"
    if seconds < 86400:
        return f"{seconds / 3600:.1f} hours"
    return f"{seconds / 86400:.1f} days"
