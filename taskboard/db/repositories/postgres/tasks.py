"""PostgreSQL implementation of TaskRepository."""
from __future__ import annotations

from taskboard.db.repositories.base import TaskTable
from taskboard.db.repositories.postgres.records import PostgresRecordRepository


class PostgresTaskRepository(PostgresRecordRepository):
    """PostgreSQL-backed ``tasks`` collection (main tasks and subtasks)."""

    table = TaskTable
