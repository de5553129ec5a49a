# src/nero_tasks/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.errors import PersistenceError, TaskNotFoundError
from .task_models import SortKey, Task, TaskPriority, copy_fields, sort_tasks, to_local_naive

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id",
    "title",
    "notes",
    "is_completed",
    "created_date",
    "completed_date",
    "due_date",
    "is_today",
    "priority",
    "tags",
)


class TaskStore:
    """
    SQLite task store with a write-through in-memory map.

    - every write commits before returning; sqlite errors become PersistenceError
    - the in-memory map changes only after a successful commit
    - readers always see the canonical Task instances held here

    The schema is migration-safe: create table if missing, then add any
    missing columns with ALTER TABLE.

    Thread-safety:
    - each method opens its own SQLite connection
    - callers serialize writes (AppState.lock)
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._tasks: dict[str, Task] = {}
        self._ensure_schema()
        self._load_all()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, len(self._tasks))

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        except sqlite3.Error as e:
            logger.error("TaskStore cannot open db=%s: %s", self._db_path, e)
            raise PersistenceError(f"cannot open task database {self._db_path}") from e
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    notes TEXT NOT NULL DEFAULT '',
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    created_date TEXT NOT NULL,
                    completed_date TEXT,
                    due_date TEXT,
                    is_today INTEGER NOT NULL DEFAULT 0,
                    priority TEXT NOT NULL DEFAULT 'normal',
                    tags TEXT NOT NULL DEFAULT '[]'
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("notes", "TEXT NOT NULL DEFAULT ''")
            add_col("completed_date", "TEXT")
            add_col("due_date", "TEXT")
            add_col("is_today", "INTEGER NOT NULL DEFAULT 0")
            add_col("priority", "TEXT NOT NULL DEFAULT 'normal'")
            add_col("tags", "TEXT NOT NULL DEFAULT '[]'")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_date)")

            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"failed to prepare task schema at {self._db_path}") from e
        finally:
            conn.close()

    def _load_all(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks ORDER BY created_date ASC, rowid ASC")
            self._tasks = {}
            for row in cur.fetchall():
                task = self._row_to_task(row)
                self._tasks[task.id] = task
        except sqlite3.Error as e:
            raise PersistenceError(f"failed to load tasks from {self._db_path}") from e
        finally:
            conn.close()

    @staticmethod
    def _dt_to_str(value: datetime | None) -> str | None:
        return value.isoformat() if value is not None else None

    @staticmethod
    def _str_to_dt(raw: str | None) -> datetime | None:
        if not raw:
            return None
        try:
            return to_local_naive(datetime.fromisoformat(raw))
        except ValueError:
            logger.warning("Unparseable timestamp in task store: %r", raw)
            return None

    @staticmethod
    def _tags_to_str(tags: list[str] | None) -> str:
        if not tags:
            return "[]"
        return json.dumps([str(t) for t in tags], ensure_ascii=False)

    @staticmethod
    def _str_to_tags(s: str | None) -> list[str]:
        if not s:
            return []
        try:
            val = json.loads(s)
        except ValueError:
            return []
        return [str(t) for t in val] if isinstance(val, list) else []

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        completed_date = self._str_to_dt(row["completed_date"])
        is_completed = bool(row["is_completed"])
        if is_completed and completed_date is None:
            # completed_date is required for a completed task; fall back to creation.
            completed_date = self._str_to_dt(row["created_date"])
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            notes=str(row["notes"] or ""),
            is_completed=is_completed,
            created_date=self._str_to_dt(row["created_date"]) or datetime.fromtimestamp(0),
            completed_date=completed_date if is_completed else None,
            due_date=self._str_to_dt(row["due_date"]),
            is_today=bool(row["is_today"]),
            priority=TaskPriority.from_db(row["priority"]),
            tags=self._str_to_tags(row["tags"]),
        )

    def _task_params(self, task: Task) -> tuple[Any, ...]:
        return (
            task.id,
            task.title,
            task.notes,
            int(task.is_completed),
            self._dt_to_str(task.created_date),
            self._dt_to_str(task.completed_date),
            self._dt_to_str(task.due_date),
            int(task.is_today),
            task.priority.value,
            self._tags_to_str(task.tags),
        )

    def _write(self, label: str, statements: Callable[[sqlite3.Cursor], None]) -> None:
        """Run `statements` in one transaction; commit or raise PersistenceError."""
        conn = self._get_conn()
        try:
            statements(conn.cursor())
            conn.commit()
        except sqlite3.Error as e:
            with contextlib.suppress(sqlite3.Error):
                conn.rollback()
            logger.error("TaskStore %s failed: %s", label, e)
            raise PersistenceError(f"{label} failed") from e
        finally:
            conn.close()

    def _update_row(self, cur: sqlite3.Cursor, task: Task) -> None:
        params = self._task_params(task)
        cur.execute(
            """
            UPDATE tasks
            SET title = ?, notes = ?, is_completed = ?, created_date = ?,
                completed_date = ?, due_date = ?, is_today = ?, priority = ?, tags = ?
            WHERE id = ?
            """,
            (*params[1:], params[0]),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def all_tasks(self) -> list[Task]:
        """Snapshot of the collection in store order (creation order)."""
        return list(self._tasks.values())

    def query(
        self,
        predicate: Callable[[Task], bool] | None = None,
        sort: Sequence[SortKey] = (),
    ) -> list[Task]:
        matched = [t for t in self._tasks.values() if predicate is None or predicate(t)]
        return sort_tasks(matched, sort)

    def insert(self, task: Task) -> None:
        if task.id in self._tasks:
            raise PersistenceError(f"duplicate task id: {task.id}")

        placeholders = ", ".join("?" for _ in _COLUMNS)

        def run(cur: sqlite3.Cursor) -> None:
            cur.execute(
                f"INSERT INTO tasks({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                self._task_params(task),
            )

        self._write("insert", run)
        self._tasks[task.id] = task
        logger.debug("Task inserted id=%s title=%r", task.id, task.title)

    def update(self, task: Task) -> Task:
        """
        Persist `task` and return the canonical instance.

        `task` may be the canonical instance or a staged copy with the same id;
        a staged copy's fields are copied onto the canonical instance.
        """
        self.update_many([task])
        return self._tasks[task.id]

    def update_many(self, tasks: Iterable[Task]) -> None:
        batch = list(tasks)
        if not batch:
            return
        for t in batch:
            if t.id not in self._tasks:
                raise TaskNotFoundError(t.id)

        def run(cur: sqlite3.Cursor) -> None:
            for t in batch:
                self._update_row(cur, t)

        self._write("update", run)
        for t in batch:
            copy_fields(t, self._tasks[t.id])
        logger.debug("Tasks updated n=%d", len(batch))

    def delete(self, task_id: str) -> None:
        self.delete_many([task_id])

    def delete_many(self, task_ids: Iterable[str]) -> None:
        ids = list(dict.fromkeys(task_ids))
        if not ids:
            return
        for tid in ids:
            if tid not in self._tasks:
                raise TaskNotFoundError(tid)

        def run(cur: sqlite3.Cursor) -> None:
            cur.executemany("DELETE FROM tasks WHERE id = ?", [(tid,) for tid in ids])

        self._write("delete", run)
        for tid in ids:
            self._tasks.pop(tid, None)
        logger.debug("Tasks deleted n=%d", len(ids))
