# src/nero_tasks/core/errors.py

"""
Error taxonomy for the task core.

- ValidationError: input rejected before the store is touched.
- PersistenceError: a store commit failed; the operation did not apply.
"""

from __future__ import annotations


class NeroTaskError(Exception):
    """Base class for errors raised by the task core."""


class ValidationError(NeroTaskError, ValueError):
    pass


class PersistenceError(NeroTaskError, RuntimeError):
    pass


class TaskNotFoundError(PersistenceError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"task not found: {task_id}")
        self.task_id = task_id
