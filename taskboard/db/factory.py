"""Repository factory to abstract DB backend (SQLite vs Postgres)."""
from __future__ import annotations

from typing import Any

import aiosqlite

from taskboard.db.repositories.projects import SqliteProjectRepository
from taskboard.db.repositories.tasks import SqliteTaskRepository


def get_project_repository(db: Any):
    if isinstance(db, aiosqlite.Connection):
        return SqliteProjectRepository(db)
    from taskboard.db.repositories.postgres.projects import PostgresProjectRepository
    return PostgresProjectRepository(db)


def get_task_repository(db: Any):
    if isinstance(db, aiosqlite.Connection):
        return SqliteTaskRepository(db)
    from taskboard.db.repositories.postgres.tasks import PostgresTaskRepository
    return PostgresTaskRepository(db)
