"""SQLite storage implementation."""

import json
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from ..config import resolve_db_path
from ..models import Account, Content, LogEntry, Memory

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lower-case and collapse whitespace for exact-match de-duplication."""
    return _WHITESPACE.sub(" ", text).strip().lower()


def _to_db_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _from_db_timestamp(value: str) -> datetime:
    ts = datetime.fromisoformat(value)
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


class IStorage(Protocol):
    """Persistent storage for memories, logs and accounts (SQLite)."""

    async def init(self) -> None:
        """Initialize database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    # Memories
    async def save_memory(self, memory: Memory) -> bool:
        """Save a memory. Returns False if a memory with that id already exists."""
        ...

    async def get_memories(
        self, room_id: str, count: int = 10, unique: bool = False
    ) -> list[Memory]:
        """Get the most recent memories of a room, newest first."""
        ...

    async def count_memories(self, room_id: str, unique: bool = False) -> int:
        """Count memories in a room."""
        ...

    async def find_memory(self, room_id: str, user_id: str, text: str) -> Memory | None:
        """Find a memory by author and normalized text."""
        ...

    async def remove_memory(self, memory_id: str) -> None:
        """Delete a memory by id."""
        ...

    async def remove_all_memories(self, room_id: str) -> None:
        """Delete every memory of a room."""
        ...

    # Logs
    async def log(
        self, body: dict[str, Any], user_id: str, room_id: str, type: str
    ) -> LogEntry:
        """Append a structured log entry."""
        ...

    async def get_logs(
        self,
        room_id: str | None = None,
        type: str | None = None,
        limit: int = 100,
    ) -> list[LogEntry]:
        """Get log entries (newest first)."""
        ...

    # Accounts
    async def save_account(self, account: Account) -> None:
        """Save an account."""
        ...

    async def get_account(self, user_id: str) -> Account | None:
        """Get an account by ID."""
        ...

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        ...


class Storage:
    """SQLite storage implementation."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Initialize database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise RuntimeError("Storage not initialized")
        return self._conn

    # Memories
    async def save_memory(self, memory: Memory) -> bool:
        """Save a memory. Returns False if a memory with that id already exists."""
        conn = self._require_conn()

        if not memory.id:
            memory.id = str(uuid.uuid4())

        cursor = await conn.execute(
            """
            INSERT OR IGNORE INTO memories
            (id, user_id, room_id, content, search_text, embedding, is_unique, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                memory.id,
                memory.user_id,
                memory.room_id,
                json.dumps(memory.content.to_dict()),
                normalize_text(memory.content.text),
                json.dumps(memory.embedding),
                1 if memory.unique else 0,
                _to_db_timestamp(memory.created_at),
            ),
        )
        await conn.commit()
        return cursor.rowcount > 0

    async def get_memories(
        self, room_id: str, count: int = 10, unique: bool = False
    ) -> list[Memory]:
        """Get the most recent memories of a room, newest first."""
        conn = self._require_conn()

        unique_clause = "AND is_unique = 1" if unique else ""
        cursor = await conn.execute(
            f"""
            SELECT id, user_id, room_id, content, embedding, is_unique, created_at
            FROM memories
            WHERE room_id = ? {unique_clause}
            ORDER BY created_at DESC, seq DESC
            LIMIT ?
            """,
            (room_id, count),
        )
        rows = await cursor.fetchall()
        return [self._row_to_memory(row) for row in rows]

    async def count_memories(self, room_id: str, unique: bool = False) -> int:
        """Count memories in a room."""
        conn = self._require_conn()

        unique_clause = "AND is_unique = 1" if unique else ""
        cursor = await conn.execute(
            f"SELECT COUNT(*) FROM memories WHERE room_id = ? {unique_clause}",
            (room_id,),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def find_memory(self, room_id: str, user_id: str, text: str) -> Memory | None:
        """Find a memory by author and normalized text."""
        conn = self._require_conn()

        cursor = await conn.execute(
            """
            SELECT id, user_id, room_id, content, embedding, is_unique, created_at
            FROM memories
            WHERE room_id = ? AND user_id = ? AND search_text = ?
            ORDER BY seq ASC
            LIMIT 1
            """,
            (room_id, user_id, normalize_text(text)),
        )
        row = await cursor.fetchone()
        return self._row_to_memory(row) if row else None

    async def remove_memory(self, memory_id: str) -> None:
        """Delete a memory by id."""
        conn = self._require_conn()
        await conn.execute("DELETE FROM memories WHERE id = ?", (memory_id,))
        await conn.commit()

    async def remove_all_memories(self, room_id: str) -> None:
        """Delete every memory of a room."""
        conn = self._require_conn()
        await conn.execute("DELETE FROM memories WHERE room_id = ?", (room_id,))
        await conn.commit()

    @staticmethod
    def _row_to_memory(row: tuple) -> Memory:
        return Memory(
            id=row[0],
            user_id=row[1],
            room_id=row[2],
            content=Content.from_dict(json.loads(row[3])),
            embedding=json.loads(row[4]),
            unique=bool(row[5]),
            created_at=_from_db_timestamp(row[6]),
        )

    # Logs
    async def log(
        self, body: dict[str, Any], user_id: str, room_id: str, type: str
    ) -> LogEntry:
        """Append a structured log entry."""
        conn = self._require_conn()

        entry = LogEntry(
            id=str(uuid.uuid4()),
            user_id=user_id,
            room_id=room_id,
            type=type,
            body=body,
            created_at=datetime.now(timezone.utc),
        )
        await conn.execute(
            """
            INSERT INTO logs (id, user_id, room_id, type, body, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.user_id,
                entry.room_id,
                entry.type,
                json.dumps(entry.body, default=str),
                _to_db_timestamp(entry.created_at),
            ),
        )
        await conn.commit()
        return entry

    async def get_logs(
        self,
        room_id: str | None = None,
        type: str | None = None,
        limit: int = 100,
    ) -> list[LogEntry]:
        """Get log entries (newest first)."""
        conn = self._require_conn()

        conditions = []
        params: list[Any] = []

        if room_id:
            conditions.append("room_id = ?")
            params.append(room_id)
        if type:
            conditions.append("type = ?")
            params.append(type)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        query = f"""
            SELECT id, user_id, room_id, type, body, created_at
            FROM logs
            {where_clause}
            ORDER BY created_at DESC, seq DESC
            LIMIT ?
        """
        params.append(limit)

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()

        return [
            LogEntry(
                id=row[0],
                user_id=row[1],
                room_id=row[2],
                type=row[3],
                body=json.loads(row[4]),
                created_at=_from_db_timestamp(row[5]),
            )
            for row in rows
        ]

    # Accounts
    async def save_account(self, account: Account) -> None:
        """Save an account."""
        conn = self._require_conn()

        await conn.execute(
            """
            INSERT OR REPLACE INTO accounts (id, name)
            VALUES (?, ?)
            """,
            (account.id, account.name),
        )
        await conn.commit()

    async def get_account(self, user_id: str) -> Account | None:
        """Get an account by ID."""
        conn = self._require_conn()

        cursor = await conn.execute(
            """
            SELECT id, name
            FROM accounts
            WHERE id = ?
            """,
            (user_id,),
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return Account(id=row[0], name=row[1])

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        conn = self._require_conn()

        for table in ["memories", "logs", "accounts"]:
            await conn.execute(f"DELETE FROM {table}")

        await conn.commit()
