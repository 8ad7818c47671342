"""Shared column handling for the flat record tables."""
from __future__ import annotations

from typing import Any


class RecordTable:
    """Column whitelist and defaults for one record collection."""

    TABLE: str = ""
    COLUMNS: tuple[str, ...] = ()
    DEFAULTS: dict[str, Any] = {}

    @classmethod
    def insert_columns(cls, rows: list[dict]) -> list[str]:
        present = {key for row in rows for key in row}
        unknown = present - set(cls.COLUMNS)
        if unknown:
            raise ValueError(f"Unknown {cls.TABLE} columns: {sorted(unknown)}")
        if "id" not in present:
            raise ValueError(f"{cls.TABLE} rows require an id")
        return [col for col in cls.COLUMNS if col in present or col in cls.DEFAULTS]

    @classmethod
    def row_values(cls, row: dict, columns: list[str]) -> tuple:
        return tuple(row.get(col, cls.DEFAULTS.get(col)) for col in columns)

    @classmethod
    def update_columns(cls, fields: dict) -> list[str]:
        unknown = set(fields) - (set(cls.COLUMNS) - {"id"})
        if unknown:
            raise ValueError(f"Cannot update {cls.TABLE} columns: {sorted(unknown)}")
        return [col for col in cls.COLUMNS if col in fields]


class ProjectTable(RecordTable):
    TABLE = "projects"
    COLUMNS = ("id", "title", "user_id")
    DEFAULTS = {"title": "", "user_id": None}


class TaskTable(RecordTable):
    TABLE = "tasks"
    COLUMNS = (
        "id", "title", "estimated_time", "completed",
        "due_date", "notes", "parent_task", "project_id", "user_id",
    )
    DEFAULTS = {
        "title": "",
        "estimated_time": 0,
        "completed": False,
        "parent_task": None,
        "user_id": None,
    }
