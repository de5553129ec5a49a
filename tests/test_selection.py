# tests/test_selection.py

from __future__ import annotations

from nero_tasks.core.selection import SelectionState
from nero_tasks.tasks.task_lists import SmartList


def test_defaults() -> None:
    sel = SelectionState()
    snap = sel.snapshot()
    assert snap.selected_list is SmartList.INBOX
    assert snap.selected_task_id is None
    assert snap.expanded_task_id is None
    assert snap.search_text == ""


def test_expanding_another_task_collapses_previous() -> None:
    sel = SelectionState()
    assert sel.expand("a") is None
    assert sel.expand("b") == "a"
    assert sel.is_expanded("b")
    assert not sel.is_expanded("a")


def test_toggle_expanded() -> None:
    sel = SelectionState()
    assert sel.toggle_expanded("a") is True
    assert sel.toggle_expanded("b") is True
    assert sel.expanded_task_id == "b"
    assert sel.toggle_expanded("b") is False
    assert sel.expanded_task_id is None


def test_forget_only_clears_matching_ids() -> None:
    sel = SelectionState()
    sel.select("a")
    sel.expand("b")

    sel.forget("a")
    assert sel.selected_task_id is None
    assert sel.expanded_task_id == "b"

    sel.forget("b")
    assert sel.expanded_task_id is None


def test_reconcile_drops_missing_ids() -> None:
    sel = SelectionState()
    sel.select("a")
    sel.expand("b")
    sel.reconcile(["a", "c"])
    assert sel.selected_task_id == "a"
    assert sel.expanded_task_id is None


def test_search_and_list_are_independent_of_selection() -> None:
    sel = SelectionState()
    sel.select("a")
    sel.set_search_text("milk")
    sel.show_list(SmartList.COMPLETED)

    assert sel.search_text == "milk"
    assert sel.selected_list is SmartList.COMPLETED
    assert sel.is_selected("a")

    sel.clear_search()
    sel.clear_selection()
    assert sel.search_text == ""
    assert sel.selected_task_id is None
