"""Base storage interface for conversation chains.

The core never talks to storage itself; applications use a conversation store
to persist the current continuation of each chain between turns. This
abstract base class defines the contract every store implementation follows.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.models import Continuation


class ChainRecord(BaseModel):
    """Stored state of one chain: its next continuation plus app state."""

    chain_id: str
    continuation: Continuation
    state: Dict[str, Any] = Field(default_factory=dict)
    version: int = Field(default=0, ge=0)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ConversationStore(ABC):
    """Abstract base class for conversation stores.

    ``save`` implements optimistic concurrency: when ``expected_version`` is
    given and does not match the stored version, ``ChainConflictError`` is
    raised. A successful save bumps ``record.version``.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the store (create tables, connections, etc.)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connections and cleanup resources."""
        pass

    @abstractmethod
    async def load(self, chain_id: str) -> Optional[ChainRecord]:
        """Load a chain by ID."""
        pass

    @abstractmethod
    async def save(self, record: ChainRecord, expected_version: Optional[int] = None) -> ChainRecord:
        """Create or update a chain."""
        pass

    @abstractmethod
    async def delete(self, chain_id: str) -> bool:
        """Delete a chain by ID."""
        pass

    @abstractmethod
    async def list_chain_ids(self, limit: int = 100, offset: int = 0) -> List[str]:
        """List stored chain IDs."""
        pass

    @abstractmethod
    async def cleanup_stale_chains(self, days: int = 30) -> int:
        """Delete chains untouched for the given days. Returns number deleted."""
        pass
