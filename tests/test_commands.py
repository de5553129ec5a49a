# tests/test_commands.py

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

import pytest

from nero_tasks.cli.commands import CommandRegistry, parse_due, parse_priority
from nero_tasks.connectors.console_connector import handle_line
from nero_tasks.core.errors import ValidationError
from nero_tasks.tasks.task_lists import SmartList
from nero_tasks.tasks.task_models import TaskPriority

from .fakes import FIXED_NOW


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_quick_add_and_show(state) -> None:
    assert handle_line(state, "buy milk") == "Added: buy milk"
    handle_line(state, "/add call mom")

    out = handle_line(state, "/show inbox") or ""
    assert "buy milk" in out
    assert "call mom" in out
    assert len(state.last_listing) == 2


def test_add_in_today_list_sets_flag(state) -> None:
    handle_line(state, "/show today")
    assert handle_line(state, "stretch") == "Added: stretch (today)"
    (task,) = state.task_store.all_tasks()
    assert task.is_today


def test_blank_add_reports_validation_error(state) -> None:
    reply = handle_line(state, "/add   ") or ""
    assert reply.startswith("Invalid input:")
    assert state.task_store.count_tasks() == 0


def test_done_by_position(state) -> None:
    handle_line(state, "a")
    handle_line(state, "/show")
    assert handle_line(state, "/done 1") == "Completed: a"
    (task,) = state.task_store.all_tasks()
    assert task.is_completed
    assert "No such task" in (handle_line(state, "/done 9") or "")


def test_rm_requires_confirmation_when_enabled(state) -> None:
    state.settings.confirm_before_delete = True
    handle_line(state, "a")
    handle_line(state, "/show")

    assert "Repeat with 'yes'" in (handle_line(state, "/rm 1") or "")
    assert state.task_store.count_tasks() == 1

    emitted: list[str] = []
    assert handle_line(state, "/rm 1 yes", emit=emitted.append) == "Deleted."
    assert emitted == ["Deleted: a"]
    assert state.task_store.count_tasks() == 0


def test_persistence_failure_reply(state, store) -> None:
    handle_line(state, "a")
    handle_line(state, "/show")
    store.fail_writes = True

    assert handle_line(state, "/done 1") == "Could not save the change; nothing was modified."
    (task,) = state.task_store.all_tasks()
    assert not task.is_completed


def test_prio_due_and_today(state) -> None:
    handle_line(state, "a")
    handle_line(state, "/show")

    assert handle_line(state, "/prio 1 hi") == "Priority high: a"
    assert handle_line(state, "/due 1 tomorrow") == "Due 2024-01-02 09:00: a"
    assert handle_line(state, "/today 1") == "Moved to Today: a"

    (task,) = state.task_store.all_tasks()
    assert task.priority is TaskPriority.HIGH
    assert task.due_date == datetime(2024, 1, 2, 9, 0)
    assert task.is_today


def test_expand_and_edit(state) -> None:
    handle_line(state, "old title")
    handle_line(state, "/show")

    assert handle_line(state, "/expand 1") == "Expanded: old title"
    assert "notes:" in (handle_line(state, "/show") or "")
    assert handle_line(state, "/edit new title") == "Saved: new title"
    assert state.selection.expanded_task_id is None


def test_search_filters_show(state) -> None:
    handle_line(state, "buy milk")
    handle_line(state, "call mom")
    handle_line(state, "/search MILK")

    out = handle_line(state, "/show") or ""
    assert "[search: MILK]" in out
    assert "buy milk" in out
    assert "call mom" not in out


def test_stats_and_clear_completed(state) -> None:
    handle_line(state, "a")
    handle_line(state, "b")
    handle_line(state, "/show")
    handle_line(state, "/done 1")

    out = handle_line(state, "/stats today") or ""
    assert "Completed (Today)" in out
    assert "streak 1 days" in out

    assert handle_line(state, "/clear-completed") == "Removed 1 completed task."
    assert state.task_store.count_tasks() == 1


def test_all_today_and_lists(state) -> None:
    handle_line(state, "a")
    handle_line(state, "b")
    assert handle_line(state, "/all-today") == "Moved 2 tasks to Today."

    out = handle_line(state, "/lists") or ""
    assert "Today" in out
    state.selection.show_list(SmartList.ANYTIME)
    assert "(empty)" in (handle_line(state, "/show") or "")


def test_parse_due() -> None:
    nine = time(9, 0)
    assert parse_due("none", now=FIXED_NOW, default_time=nine) is None
    assert parse_due("+3", now=FIXED_NOW, default_time=nine) == datetime(2024, 1, 4, 9, 0)
    assert parse_due("2024-02-10", now=FIXED_NOW, default_time=nine) == datetime(2024, 2, 10, 9, 0)
    assert parse_due("2024-02-10 14:30", now=FIXED_NOW, default_time=nine) == datetime(2024, 2, 10, 14, 30)
    with pytest.raises(ValidationError):
        parse_due("someday", now=FIXED_NOW, default_time=nine)


def test_parse_priority() -> None:
    assert parse_priority("u") is TaskPriority.URGENT
    assert parse_priority("NORMAL") is TaskPriority.NORMAL
    with pytest.raises(ValidationError):
        parse_priority("meh")


def test_due_with_utc_offset_keeps_upcoming_readable(state) -> None:
    handle_line(state, "naive")
    handle_line(state, "aware")
    by_title = {t.title: t for t in state.task_store.all_tasks()}

    handle_line(state, f"/due {by_title['naive'].id} 2024-01-05")
    handle_line(state, f"/due {by_title['aware'].id} 2024-01-06T10:00+02:00")

    expected = datetime(2024, 1, 6, 10, 0, tzinfo=timezone(timedelta(hours=2)))
    assert by_title["aware"].due_date == expected.astimezone().replace(tzinfo=None)

    out = handle_line(state, "/show upcoming group") or ""
    assert "naive" in out
    assert "aware" in out
    assert len(state.last_listing) == 2


def test_today_shows_completed_today_with_undo(state) -> None:
    handle_line(state, "/show today")
    handle_line(state, "stretch")
    handle_line(state, "/show today")
    assert handle_line(state, "/done 1") == "Completed: stretch"

    out = handle_line(state, "/show today") or ""
    assert "-- Completed Today" in out
    assert "stretch" in out
    assert len(state.last_listing) == 1

    assert handle_line(state, "/undo 1") == "Reopened: stretch"
    (task,) = state.task_store.all_tasks()
    assert not task.is_completed
    assert handle_line(state, "/undo 1") == "Not completed: stretch"


def test_parse_due_converts_offsets_to_local_time() -> None:
    parsed = parse_due("2024-01-06T10:00+02:00", now=FIXED_NOW, default_time=time(9, 0))
    expected = datetime(2024, 1, 6, 10, 0, tzinfo=timezone(timedelta(hours=2)))
    assert parsed is not None
    assert parsed.tzinfo is None
    assert parsed == expected.astimezone().replace(tzinfo=None)
