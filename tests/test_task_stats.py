# tests/test_task_stats.py

from __future__ import annotations

from datetime import timedelta

import pytest

from nero_tasks.tasks.task_stats import (
    TimePeriod,
    average_completion_time,
    best_day,
    completed_summary,
    compute_stats,
    current_streak,
    filter_by_period,
    format_duration,
    period_counts,
)

from .fakes import FIXED_NOW
from .helpers import make_task

NOW = FIXED_NOW  # Monday 2024-01-01 10:00
DAY = timedelta(days=1)


def test_streak_counts_consecutive_days_ending_today() -> None:
    tasks = [
        make_task("d-2", completed=NOW - 2 * DAY),
        make_task("d-1", completed=NOW - DAY),
        make_task("d0", completed=NOW - timedelta(hours=1)),
        make_task("d0 again", completed=NOW),
        make_task("gap", completed=NOW - 4 * DAY),
    ]
    assert current_streak(tasks, NOW) == 3


def test_streak_is_zero_without_completion_today() -> None:
    tasks = [
        make_task("d-1", completed=NOW - DAY),
        make_task("d-2", completed=NOW - 2 * DAY),
    ]
    assert current_streak(tasks, NOW) == 0
    assert current_streak([], NOW) == 0


def test_average_completion_time() -> None:
    start = NOW - 10 * DAY
    tasks = [
        make_task("one day", created=start, completed=start + DAY),
        make_task("three days", created=start, completed=start + 3 * DAY),
    ]
    assert average_completion_time(tasks) == 2 * DAY
    assert average_completion_time([]) is None


def test_best_day_highest_count() -> None:
    tuesday = NOW + DAY
    tasks = [
        make_task("mon", completed=NOW),
        make_task("tue", completed=tuesday),
        make_task("tue2", completed=tuesday + 7 * DAY),
    ]
    assert best_day(tasks) == "Tuesday"
    assert best_day([]) is None


def test_best_day_tie_goes_to_earliest_from_sunday() -> None:
    sunday = NOW - DAY
    saturday = NOW - 2 * DAY
    tasks = [
        make_task("mon", completed=NOW),
        make_task("sat", completed=saturday),
        make_task("sun", completed=sunday),
    ]
    assert best_day(tasks) == "Sunday"


def test_period_filters_and_counts() -> None:
    today = make_task("today", completed=NOW - timedelta(hours=2))
    yesterday = make_task("yesterday", completed=NOW - DAY)  # Sunday, previous ISO week
    last_monday = make_task("last monday", completed=NOW - 7 * DAY)
    tasks = [today, yesterday, last_monday]

    assert filter_by_period(tasks, TimePeriod.THIS_WEEK, NOW) == [today]
    assert filter_by_period(tasks, TimePeriod.LAST_WEEK, NOW) == [yesterday, last_monday]
    assert period_counts(tasks, NOW) == {
        TimePeriod.ALL: 3,
        TimePeriod.TODAY: 1,
        TimePeriod.YESTERDAY: 1,
        TimePeriod.THIS_WEEK: 1,
        TimePeriod.LAST_WEEK: 2,
        TimePeriod.THIS_MONTH: 1,
    }


def test_compute_stats() -> None:
    tasks = [
        make_task("a", created=NOW - DAY, completed=NOW),
        make_task("b", created=NOW - 2 * DAY, completed=NOW - DAY),
    ]
    stats = compute_stats(tasks, NOW)
    assert stats.total_completed == 2
    assert stats.current_streak == 2
    assert stats.average_completion_time == DAY
    assert stats.best_day == "Sunday"


def test_completed_summary_restricts_stats_but_not_chip_counts() -> None:
    today = make_task("report", completed=NOW - timedelta(hours=1))
    yesterday = make_task("report draft", completed=NOW - DAY)
    other = make_task("groceries", completed=NOW - timedelta(hours=3))
    still_open = make_task("report review")

    summary = completed_summary(
        [today, yesterday, other, still_open], "report", NOW, TimePeriod.TODAY
    )

    assert summary.tasks == [today]
    assert summary.stats.total_completed == 1
    assert summary.stats.current_streak == 1
    assert summary.period_counts[TimePeriod.ALL] == 2
    assert summary.period_counts[TimePeriod.YESTERDAY] == 1


@pytest.mark.parametrize(
    ("td", "text"),
    [
        (None, "-"),
        (timedelta(minutes=1), "1 minute"),
        (timedelta(minutes=45), "45 minutes"),
        (timedelta(hours=3), "3.0 hours"),
        (timedelta(days=2, hours=12), "2.5 days"),
    ],
)
def test_format_duration(td, text: str) -> None:
    assert format_duration(td) == text


def test_time_period_parse() -> None:
    assert TimePeriod.parse("this week") is TimePeriod.THIS_WEEK
    assert TimePeriod.parse("last-week") is TimePeriod.LAST_WEEK
    assert TimePeriod.parse("Today") is TimePeriod.TODAY
    with pytest.raises(ValueError):
        TimePeriod.parse("fortnight")
