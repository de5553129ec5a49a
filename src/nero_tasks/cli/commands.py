# src/nero_tasks/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Sequence
from datetime import date, datetime, time, timedelta
from typing import cast

from ..core.errors import PersistenceError, ValidationError
from ..core.state import AppState
from ..tasks.task_lists import (
    SmartList,
    TaskGroup,
    anytime_priority_groups,
    anytime_summary,
    list_counts,
    query_list,
    todays_completed,
    upcoming_buckets,
)
from ..tasks.task_models import Task, TaskPriority, to_local_naive
from ..tasks.task_stats import TimePeriod, completed_summary, format_duration

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValidationError as e:
            return f"Invalid input: {e}."
        except PersistenceError:
            logger.exception("Command /%s could not be saved.", name)
            return "Could not save the change; nothing was modified."

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- parsing helpers ----


def parse_due(raw: str, *, now: datetime, default_time: time) -> datetime | None:
    """
    Parse a due date argument.

    Accepts: none | today | tomorrow | +N (days) | YYYY-MM-DD [HH:MM] | YYYY-MM-DDTHH:MM.
    Dates without a time get `default_time`; values with a UTC offset become local time.
    """
    text = (raw or "").strip().lower()
    if text in ("", "none", "-", "clear"):
        return None

    day: date | None = None
    if text == "today":
        day = now.date()
    elif text == "tomorrow":
        day = now.date() + timedelta(days=1)
    elif text.startswith("+") and text[1:].isdigit():
        day = now.date() + timedelta(days=int(text[1:]))

    if day is not None:
        return datetime.combine(day, default_time)

    try:
        if len(text) == 10:
            return datetime.combine(date.fromisoformat(text), default_time)
        return to_local_naive(datetime.fromisoformat(text.replace(" ", "T", 1)))
    except ValueError as e:
        raise ValidationError(f"cannot parse due date {raw!r}") from e


def parse_priority(raw: str) -> TaskPriority:
    key = (raw or "").strip().lower()
    for p in TaskPriority:
        if p.value == key or (key and p.value.startswith(key)):
            return p
    raise ValidationError(f"unknown priority {raw!r} (low, normal, high, urgent)")


def _resolve(state: AppState, ref: str | None) -> Task | None:
    """Position in the last shown list, an id prefix, or (no ref) the selected task."""
    if not ref:
        return state.actions.selected_task()
    if ref.isdigit():
        idx = int(ref) - 1
        if 0 <= idx < len(state.last_listing):
            return state.task_store.get(state.last_listing[idx])
        return None
    matches = [t for t in state.task_store.all_tasks() if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def _default_due_time(state: AppState) -> time:
    value = getattr(state.settings, "default_due_time", None)
    return value if isinstance(value, time) else time(9, 0)


# ---- rendering ----


def _format_task(state: AppState, task: Task, position: int) -> str:
    sel = state.selection
    marker = ">" if sel.is_selected(task.id) else " "
    box = "[x]" if task.is_completed else "[ ]"
    bits = [f"{marker}{position:>3}. {box} {task.title}"]
    if task.priority is not TaskPriority.NORMAL:
        bits.append(f"!{task.priority.value}")
    if task.is_today:
        bits.append("*today")
    if task.due_date is not None:
        bits.append(f"due {task.due_date:%Y-%m-%d %H:%M}")
    if task.completed_date is not None:
        bits.append(f"done {task.completed_date:%Y-%m-%d %H:%M}")
    bits.extend(f"#{tag}" for tag in task.tags)
    line = "  ".join(bits)
    if sel.is_expanded(task.id):
        notes = task.notes or "(no notes)"
        line += f"\n         notes: {notes}\n         id: {task.id}"
    return line


def _render_groups(state: AppState, title: str, groups: Sequence[TaskGroup]) -> str:
    listing: list[str] = []
    lines = [title]
    for group in groups:
        if group.label:
            lines.append(f"-- {group.label} ({len(group)})")
        for task in group.tasks:
            listing.append(task.id)
            lines.append(_format_task(state, task, len(listing)))
    state.last_listing = listing
    if not listing:
        lines.append("  (empty)")
    return "\n".join(lines)


def _render_list(state: AppState, title: str, tasks: Sequence[Task]) -> str:
    return _render_groups(state, title, [TaskGroup("", list(tasks))] if tasks else [])


def _search_suffix(state: AppState) -> str:
    text = state.selection.search_text.strip()
    return f" [search: {text}]" if text else ""


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_lists(state: AppState, args: list[str]) -> str:
    counts = list_counts(state.task_store.all_tasks(), state.actions.now())
    current = state.selection.selected_list
    lines = ["Lists:"]
    for sl in SmartList:
        mark = ">" if sl is current else " "
        lines.append(f" {mark} {sl.display_name:<10} {counts[sl]}")
    return "\n".join(lines)


def cmd_show(state: AppState, args: list[str]) -> str:
    """
    /show [list] [group]
    group: Upcoming by date bucket, Anytime by priority.
    """
    if args and args[0].lower() != "group":
        try:
            state.selection.show_list(SmartList.parse(args[0]))
        except ValueError:
            return f"Unknown list: {args[0]}. Lists: {', '.join(sl.value for sl in SmartList)}."
    grouped = any(a.lower() == "group" for a in args)

    smart_list = state.selection.selected_list
    tasks = state.task_store.all_tasks()
    search = state.selection.search_text
    now = state.actions.now()
    title = f"{smart_list.display_name}{_search_suffix(state)}"

    if smart_list is SmartList.UPCOMING and grouped:
        return _render_groups(state, title, upcoming_buckets(tasks, search, now))
    if smart_list is SmartList.ANYTIME and grouped:
        summary = anytime_summary(tasks, now)
        title += (
            f"\n  total {summary.total}, high priority {summary.high_priority}, "
            f"with notes {summary.with_notes}, oldest {summary.oldest_age}"
        )
        return _render_groups(state, title, anytime_priority_groups(tasks, search, now))

    members = query_list(state.task_store, smart_list, search)
    if smart_list is SmartList.TODAY:
        groups = [TaskGroup("", members)]
        done = todays_completed(tasks, now)
        if done:
            groups.append(TaskGroup("Completed Today (/undo n)", done))
        return _render_groups(state, title, groups)
    return _render_list(state, title, members)


def cmd_add(state: AppState, args: list[str]) -> str:
    title = " ".join(args)
    is_today = state.selection.selected_list is SmartList.TODAY
    task = state.actions.create_task(title, is_today=is_today)
    return f"Added: {task.title}" + (" (today)" if is_today else "")


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <title> - save a new title for the expanded task and collapse it."""
    task = state.actions.save_expanded(" ".join(args))
    return f"Saved: {task.title}" if task else "No task is expanded. Use /expand <n> first."


def cmd_done(state: AppState, args: list[str]) -> str:
    task = _resolve(state, args[0] if args else None)
    if task is None:
        return "No such task."
    state.actions.toggle_completion(task)
    return f"{'Completed' if task.is_completed else 'Reopened'}: {task.title}"


def cmd_undo(state: AppState, args: list[str]) -> str:
    """/undo [n] - reopen a completed task (e.g. from Completed Today)."""
    task = _resolve(state, args[0] if args else None)
    if task is None:
        return "No such task."
    if not task.is_completed:
        return f"Not completed: {task.title}"
    state.actions.uncomplete(task)
    return f"Reopened: {task.title}"


def cmd_today(state: AppState, args: list[str]) -> str:
    task = _resolve(state, args[0] if args else None)
    if task is None:
        return "No such task."
    if task.is_completed:
        return "Completed tasks cannot be moved to Today."
    state.actions.toggle_today(task)
    return f"{'Moved to Today' if task.is_today else 'Removed from Today'}: {task.title}"


def cmd_prio(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /prio [n] <low|normal|high|urgent>"
    ref, level = (args[0], args[1]) if len(args) >= 2 else (None, args[0])
    priority = parse_priority(level)
    task = _resolve(state, ref)
    if task is None:
        return "No such task."
    state.actions.set_priority(task, priority)
    return f"Priority {priority.value}: {task.title}"


def cmd_due(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /due <n> <none|today|tomorrow|+N|YYYY-MM-DD [HH:MM]>"
    task = _resolve(state, args[0])
    if task is None:
        return "No such task."
    due = parse_due(" ".join(args[1:]), now=state.actions.now(), default_time=_default_due_time(state))
    state.actions.reschedule(task, due)
    if due is None:
        return f"Due date cleared: {task.title}"
    return f"Due {due:%Y-%m-%d %H:%M}: {task.title}"


def cmd_dup(state: AppState, args: list[str]) -> str:
    task = _resolve(state, args[0] if args else None)
    if task is None:
        return "No such task."
    copy = state.actions.duplicate_task(task)
    return f"Duplicated: {copy.title}"


def cmd_rm(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/rm [n] [yes] - confirmation required unless disabled in settings."""
    confirmed = bool(args) and args[-1].lower() in ("yes", "y", "!")
    refs = args[:-1] if confirmed else args
    task = _resolve(state, refs[0] if refs else None)
    if task is None:
        return "No such task."
    if getattr(state.settings, "confirm_before_delete", True) and not confirmed:
        return f"Delete '{task.title}'? Repeat with 'yes' at the end to confirm."
    state.actions.delete_task(task)
    if emit:
        emit(f"Deleted: {task.title}")
    return "Deleted."


def cmd_select(state: AppState, args: list[str]) -> str:
    if not args:
        state.selection.clear_selection()
        return "Selection cleared."
    task = _resolve(state, args[0])
    if task is None:
        return "No such task."
    state.selection.select(task.id)
    return f"Selected: {task.title}"


def cmd_expand(state: AppState, args: list[str]) -> str:
    if args:
        task = _resolve(state, args[0])
        if task is None:
            return "No such task."
        state.selection.select(task.id)
    if not state.actions.toggle_expand_selected():
        return "Nothing selected."
    task = state.actions.selected_task()
    if task is None:
        return "Nothing selected."
    verb = "Expanded" if state.selection.is_expanded(task.id) else "Collapsed"
    return f"{verb}: {task.title}"


def cmd_search(state: AppState, args: list[str]) -> str:
    text = " ".join(args)
    state.selection.set_search_text(text)
    return f"Search: {text}" if text else "Search cleared."


def cmd_stats(state: AppState, args: list[str]) -> str:
    try:
        period = TimePeriod.parse(" ".join(args)) if args else TimePeriod.ALL
    except ValueError:
        return f"Unknown period. Periods: {', '.join(p.value for p in TimePeriod)}."
    summary = completed_summary(
        state.task_store.all_tasks(),
        state.selection.search_text,
        state.actions.now(),
        period,
    )
    s = summary.stats
    chips = "  ".join(f"{p.value}: {n}" for p, n in summary.period_counts.items())
    head = (
        f"Completed ({period.value}){_search_suffix(state)}\n"
        f"  {chips}\n"
        f"  completed {s.total_completed}, streak {s.current_streak} days, "
        f"avg {format_duration(s.average_completion_time)}, best day {s.best_day or '-'}"
    )
    return _render_list(state, head, summary.tasks)


def cmd_clear_completed(state: AppState, args: list[str]) -> str:
    try:
        period = TimePeriod.parse(" ".join(args)) if args else TimePeriod.ALL
    except ValueError:
        return f"Unknown period. Periods: {', '.join(p.value for p in TimePeriod)}."
    summary = completed_summary(
        state.task_store.all_tasks(), state.selection.search_text, state.actions.now(), period
    )
    n = state.actions.clear_completed(summary.tasks)
    return f"Removed {n} completed task{'' if n == 1 else 's'}."


def cmd_all_today(state: AppState, args: list[str]) -> str:
    members = query_list(state.task_store, SmartList.ANYTIME, state.selection.search_text)
    n = state.actions.move_all_to_today(members)
    return f"Moved {n} task{'' if n == 1 else 's'} to Today."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("lists", cmd_lists, help_text="Show smart lists with counts.")
registry.register("show", cmd_show, help_text="Show a list: /show [inbox|today|upcoming|anytime|completed] [group].", aliases=["ls"])
registry.register("add", cmd_add, help_text="Create a task: /add <title>.")
registry.register("edit", cmd_edit, help_text="Rename the expanded task and collapse it: /edit <title>.")
registry.register("done", cmd_done, help_text="Toggle completion: /done [n].", aliases=["x"])
registry.register("undo", cmd_undo, help_text="Reopen a completed task: /undo [n].")
registry.register("today", cmd_today, help_text="Toggle the Today flag: /today [n].")
registry.register("prio", cmd_prio, help_text="Set priority: /prio [n] <low|normal|high|urgent>.")
registry.register("due", cmd_due, help_text="Reschedule: /due <n> <none|today|tomorrow|+N|YYYY-MM-DD [HH:MM]>.")
registry.register("dup", cmd_dup, help_text="Duplicate a task: /dup [n].")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm [n] yes.")
registry.register("select", cmd_select, help_text="Select a task: /select <n> (no arg clears).")
registry.register("expand", cmd_expand, help_text="Expand/collapse a task: /expand [n].")
registry.register("search", cmd_search, help_text="Filter lists: /search <text> (no arg clears).")
registry.register("stats", cmd_stats, help_text="Completed stats: /stats [all|today|yesterday|this week|last week|this month].")
registry.register("clear-completed", cmd_clear_completed, help_text="Delete completed tasks: /clear-completed [period].")
registry.register("all-today", cmd_all_today, help_text="Move every Anytime task to Today.")
