"""Generic CRUD over one SQLite record table."""
from __future__ import annotations

import aiosqlite

from taskboard.db.repositories.base import RecordTable


class SqliteRecordRepository:
    """Bulk select, batched insert, partial update and delete by id."""

    table: type[RecordTable] = RecordTable

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def select_all(self) -> list[dict]:
        async with self.db.execute(
            f"SELECT * FROM {self.table.TABLE} ORDER BY rowid"
        ) as cur:
            return [dict(r) for r in await cur.fetchall()]

    async def insert(self, rows: list[dict]) -> None:
        if not rows:
            return
        columns = self.table.insert_columns(rows)
        placeholders = ", ".join("?" for _ in columns)
        await self.db.executemany(
            f"INSERT INTO {self.table.TABLE} ({', '.join(columns)}) VALUES ({placeholders})",
            [self.table.row_values(row, columns) for row in rows],
        )
        await self.db.commit()

    async def update(self, record_id: str, fields: dict) -> None:
        columns = self.table.update_columns(fields)
        if not columns:
            return
        assignments = ", ".join(f"{col} = ?" for col in columns)
        await self.db.execute(
            f"UPDATE {self.table.TABLE} SET {assignments} WHERE id = ?",
            (*(fields[col] for col in columns), record_id),
        )
        await self.db.commit()

    async def delete(self, record_id: str) -> None:
        await self.db.execute(f"DELETE FROM {self.table.TABLE} WHERE id = ?", (record_id,))
        await self.db.commit()
