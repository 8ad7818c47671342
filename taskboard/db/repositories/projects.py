"""SQLite implementation of ProjectRepository."""
from __future__ import annotations

from taskboard.db.repositories.base import ProjectTable
from taskboard.db.repositories.sqlite_records import SqliteRecordRepository


class SqliteProjectRepository(SqliteRecordRepository):
    """SQLite-backed ``projects`` collection."""

    table = ProjectTable
