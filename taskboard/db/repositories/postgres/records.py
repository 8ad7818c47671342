"""Generic CRUD over one PostgreSQL record table."""
from __future__ import annotations

import asyncpg

from taskboard.db.repositories.base import RecordTable


class PostgresRecordRepository:
    """Bulk select, batched insert, partial update and delete by id."""

    table: type[RecordTable] = RecordTable

    def __init__(self, db: asyncpg.Pool):
        self.db = db

    async def select_all(self) -> list[dict]:
        rows = await self.db.fetch(
            f"SELECT * FROM {self.table.TABLE} ORDER BY created_at, id"
        )
        return [dict(r) for r in rows]

    async def insert(self, rows: list[dict]) -> None:
        if not rows:
            return
        columns = self.table.insert_columns(rows)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        await self.db.executemany(
            f"INSERT INTO {self.table.TABLE} ({', '.join(columns)}) VALUES ({placeholders})",
            [self.table.row_values(row, columns) for row in rows],
        )

    async def update(self, record_id: str, fields: dict) -> None:
        columns = self.table.update_columns(fields)
        if not columns:
            return
        assignments = ", ".join(f"{col} = ${i}" for i, col in enumerate(columns, start=1))
        await self.db.execute(
            f"UPDATE {self.table.TABLE} SET {assignments} WHERE id = ${len(columns) + 1}",
            *(fields[col] for col in columns),
            record_id,
        )

    async def delete(self, record_id: str) -> None:
        await self.db.execute(f"DELETE FROM {self.table.TABLE} WHERE id = $1", record_id)
