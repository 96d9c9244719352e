"""SQLite conversation store implementation.

This implementation uses aiosqlite for async SQLite operations.
It's suitable for development and small-scale deployments.
"""

import asyncio
import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

import aiosqlite

import logging
logger = logging.getLogger(__name__)

from ..core.errors import ChainConflictError
from ..core.models import Continuation
from .base import ChainRecord, ConversationStore


class SQLiteConversationStore(ConversationStore):
    """SQLite conversation store implementation."""

    def __init__(self, db_path: str = "data/continuations.db"):
        """Initialize SQLite storage.

        Args:
            db_path: Path to the SQLite database file, or ":memory:"
        """
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._connection: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize database and create tables."""
        self._connection = await aiosqlite.connect(self.db_path)
        await self._create_tables()
        logger.info(f"SQLite conversation store ready at {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def _create_tables(self) -> None:
        """Create database tables."""
        await self._connection.executescript("""
            CREATE TABLE IF NOT EXISTS conversation_chains (
                chain_id TEXT PRIMARY KEY,
                continuation TEXT NOT NULL,
                state TEXT,
                version INTEGER NOT NULL DEFAULT 0,
                updated_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_updated_at ON conversation_chains(updated_at);
        """)
        await self._connection.commit()

    async def load(self, chain_id: str) -> Optional[ChainRecord]:
        """Load a chain by ID."""
        async with self._connection.execute(
            "SELECT chain_id, continuation, state, version, updated_at "
            "FROM conversation_chains WHERE chain_id = ?",
            (chain_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_record(row)
        return None

    async def save(self, record: ChainRecord, expected_version: Optional[int] = None) -> ChainRecord:
        """Create or update a chain, checking the version when asked to.

        The version check is part of the write statement itself, so a
        second connection to the same database can't slip in between.
        """
        async with self._lock:
            # Take the write lock up front; upgrading a read lock later can
            # fail with "database is locked" when another connection writes
            await self._connection.execute("BEGIN IMMEDIATE")
            try:
                if expected_version is None:
                    expected_version = await self._get_version(record.chain_id) or 0
                new_version = expected_version + 1
                updated_at = datetime.utcnow()
                written = await self._write(record, expected_version, new_version, updated_at)
                if written == 0:
                    current = await self._get_version(record.chain_id) or 0
                    raise ChainConflictError(record.chain_id, expected_version, current)
            except Exception:
                await self._connection.rollback()
                raise
            await self._connection.commit()

        record.version = new_version
        record.updated_at = updated_at
        return record

    async def _write(
        self,
        record: ChainRecord,
        expected_version: int,
        new_version: int,
        updated_at: datetime
    ) -> int:
        """Insert or update a chain only if it's still at the expected version."""
        continuation = record.continuation.model_dump_json(exclude_none=True)
        state = json.dumps(record.state)

        if expected_version == 0:
            sql = """
                INSERT INTO conversation_chains (
                    chain_id, continuation, state, version, updated_at
                ) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(chain_id) DO NOTHING
            """
            params = (record.chain_id, continuation, state, new_version, updated_at.isoformat())
        else:
            sql = """
                UPDATE conversation_chains SET
                    continuation = ?, state = ?, version = ?, updated_at = ?
                WHERE chain_id = ? AND version = ?
            """
            params = (continuation, state, new_version, updated_at.isoformat(),
                      record.chain_id, expected_version)

        async with self._connection.execute(sql, params) as cursor:
            return cursor.rowcount

    async def delete(self, chain_id: str) -> bool:
        """Delete a chain by ID."""
        async with self._lock:
            async with self._connection.execute(
                "DELETE FROM conversation_chains WHERE chain_id = ?",
                (chain_id,)
            ) as cursor:
                deleted = cursor.rowcount > 0
            await self._connection.commit()
        return deleted

    async def list_chain_ids(self, limit: int = 100, offset: int = 0) -> List[str]:
        """List stored chain IDs."""
        async with self._connection.execute(
            "SELECT chain_id FROM conversation_chains ORDER BY chain_id LIMIT ? OFFSET ?",
            (limit, offset)
        ) as cursor:
            rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def cleanup_stale_chains(self, days: int = 30) -> int:
        """Delete chains untouched for the given number of days."""
        cutoff = (datetime.utcnow() - timedelta(days=days)).isoformat()
        async with self._lock:
            async with self._connection.execute(
                "DELETE FROM conversation_chains WHERE updated_at < ?",
                (cutoff,)
            ) as cursor:
                deleted = cursor.rowcount
            await self._connection.commit()

        if deleted:
            logger.info(f"Cleaned up {deleted} stale chains")
        return deleted

    async def _get_version(self, chain_id: str) -> Optional[int]:
        async with self._connection.execute(
            "SELECT version FROM conversation_chains WHERE chain_id = ?",
            (chain_id,)
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    def _row_to_record(self, row: aiosqlite.Row) -> ChainRecord:
        """Convert database row to ChainRecord."""
        return ChainRecord(
            chain_id=row[0],
            continuation=Continuation.model_validate_json(row[1]),
            state=json.loads(row[2]) if row[2] else {},
            version=row[3],
            updated_at=datetime.fromisoformat(row[4]),
        )
