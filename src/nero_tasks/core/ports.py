# src/nero_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The action layer depends on Protocols instead of the concrete SQLite store.
This keeps storage swappable and makes failure paths easy to test.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import Protocol

from ..tasks.task_models import SortKey, Task


class TaskRepo(Protocol):
    """Durable keyed task collection. Writes commit or raise PersistenceError."""

    def get(self, task_id: str) -> Task | None: ...
    def all_tasks(self) -> list[Task]: ...
    def count_tasks(self) -> int: ...

    def query(
            self,
            predicate: Callable[[Task], bool] | None = None,
            sort: Sequence[SortKey] = (),
    ) -> list[Task]: ...

    def insert(self, task: Task) -> None: ...
    def update(self, task: Task) -> Task: ...
    def update_many(self, tasks: Iterable[Task]) -> None: ...
    def delete(self, task_id: str) -> None: ...
    def delete_many(self, task_ids: Iterable[str]) -> None: ...
