"""PostgreSQL implementation of ProjectRepository."""
from __future__ import annotations

from taskboard.db.repositories.base import ProjectTable
from taskboard.db.repositories.postgres.records import PostgresRecordRepository


class PostgresProjectRepository(PostgresRecordRepository):
    """PostgreSQL-backed ``projects`` collection."""

    table = ProjectTable
