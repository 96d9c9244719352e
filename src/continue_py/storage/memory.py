"""In-memory conversation store.

Records are kept as JSON so that loading one behaves exactly like loading it
from a real database: nothing but plain data survives a save.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from ..core.errors import ChainConflictError
from .base import ChainRecord, ConversationStore


class InMemoryConversationStore(ConversationStore):
    """Dictionary-backed store for tests and single-process demos."""

    def __init__(self):
        self._records: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def load(self, chain_id: str) -> Optional[ChainRecord]:
        raw = self._records.get(chain_id)
        if raw is None:
            return None
        return ChainRecord.model_validate_json(raw)

    async def save(self, record: ChainRecord, expected_version: Optional[int] = None) -> ChainRecord:
        async with self._lock:
            current = await self.load(record.chain_id)
            actual_version = current.version if current else 0
            if expected_version is not None and expected_version != actual_version:
                raise ChainConflictError(record.chain_id, expected_version, actual_version)

            record.version = actual_version + 1
            record.updated_at = datetime.utcnow()
            self._records[record.chain_id] = record.model_dump_json()
        return record

    async def delete(self, chain_id: str) -> bool:
        return self._records.pop(chain_id, None) is not None

    async def list_chain_ids(self, limit: int = 100, offset: int = 0) -> List[str]:
        return sorted(self._records)[offset:offset + limit]

    async def cleanup_stale_chains(self, days: int = 30) -> int:
        cutoff = datetime.utcnow() - timedelta(days=days)
        stale = [
            chain_id for chain_id, raw in self._records.items()
            if ChainRecord.model_validate_json(raw).updated_at < cutoff
        ]
        for chain_id in stale:
            del self._records[chain_id]
        return len(stale)
