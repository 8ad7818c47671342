"""SQLite implementation of TaskRepository."""
from __future__ import annotations

from taskboard.db.repositories.base import TaskTable
from taskboard.db.repositories.sqlite_records import SqliteRecordRepository


class SqliteTaskRepository(SqliteRecordRepository):
    """SQLite-backed ``tasks`` collection (main tasks and subtasks)."""

    table = TaskTable
