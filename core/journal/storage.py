from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

import aiosqlite

from core.session.state import USER, Turn


class TurnStorage:
    """Persisted conversation history, the system of record for every session."""

    def __init__(self, db_path: str | Path = "data/tutor.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @asynccontextmanager
    async def _connect(self):
        async with aiosqlite.connect(str(self.db_path)) as conn:
            conn.row_factory = aiosqlite.Row
            yield conn

    async def _ensure_initialized(self) -> None:
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return

            async with self._connect() as conn:
                await conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS turns (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        session_id TEXT NOT NULL,
                        role TEXT NOT NULL,
                        content TEXT NOT NULL,
                        timestamp TEXT NOT NULL,
                        repetition_type TEXT
                    )
                    """
                )
                await conn.execute("CREATE INDEX IF NOT EXISTS idx_turns_session ON turns(session_id, id)")
                await conn.commit()
            self._initialized = True

    async def save_turn(self, session_id: str, turn: Turn) -> int:
        await self._ensure_initialized()

        async with self._connect() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO turns (session_id, role, content, timestamp, repetition_type)
                VALUES (?, ?, ?, ?, ?)
                """,
                (session_id, turn.role, turn.content, turn.timestamp.isoformat(), turn.repetition_type),
            )
            await conn.commit()
            return int(cursor.lastrowid)

    async def save_turns(self, session_id: str, turns: list[Turn]) -> None:
        """Write several turns in one transaction, in order."""
        await self._ensure_initialized()

        async with self._connect() as conn:
            await conn.executemany(
                """
                INSERT INTO turns (session_id, role, content, timestamp, repetition_type)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (session_id, turn.role, turn.content, turn.timestamp.isoformat(), turn.repetition_type)
                    for turn in turns
                ],
            )
            await conn.commit()

    async def load_history(self, session_id: str) -> list[Turn]:
        await self._ensure_initialized()

        async with self._connect() as conn:
            cursor = await conn.execute(
                "SELECT * FROM turns WHERE session_id = ? ORDER BY id ASC",
                (session_id,),
            )
            rows = await cursor.fetchall()
        return [
            Turn(
                role=row["role"],
                content=row["content"],
                timestamp=datetime.fromisoformat(row["timestamp"]),
                repetition_type=row["repetition_type"],
            )
            for row in rows
        ]

    async def clear_session(self, session_id: str) -> int:
        await self._ensure_initialized()

        async with self._connect() as conn:
            cursor = await conn.execute("DELETE FROM turns WHERE session_id = ?", (session_id,))
            await conn.commit()
            return cursor.rowcount

    async def session_started_at(self, session_id: str) -> datetime | None:
        await self._ensure_initialized()

        async with self._connect() as conn:
            cursor = await conn.execute(
                "SELECT timestamp FROM turns WHERE session_id = ? ORDER BY id ASC LIMIT 1",
                (session_id,),
            )
            row = await cursor.fetchone()
        return datetime.fromisoformat(row["timestamp"]) if row else None

    async def count_turns(self, session_id: str, role: str | None = None) -> int:
        await self._ensure_initialized()

        query = "SELECT COUNT(*) AS n FROM turns WHERE session_id = ?"
        params: tuple = (session_id,)
        if role is not None:
            query += " AND role = ?"
            params = (session_id, role)
        async with self._connect() as conn:
            cursor = await conn.execute(query, params)
            row = await cursor.fetchone()
        return int(row["n"])

    async def count_user_turns(self, session_id: str) -> int:
        return await self.count_turns(session_id, role=USER)
