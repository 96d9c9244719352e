"""Storage module for conversation chains.

This module provides:
- Abstract conversation store interface
- In-memory and SQLite implementations
- A factory driven by configuration
"""

from typing import Optional

from ..config import ContinuationSettings
from .base import ChainRecord, ConversationStore
from .memory import InMemoryConversationStore
from .sqlite import SQLiteConversationStore


def create_conversation_store(
    backend_type: Optional[str] = None,
    settings: Optional[ContinuationSettings] = None
) -> ConversationStore:
    """Create a conversation store based on configuration.

    Args:
        backend_type: Type of store ("memory", "sqlite", or None to use settings)
        settings: Settings to read defaults from (environment if not provided)

    Returns:
        Configured conversation store
    """
    settings = settings or ContinuationSettings.from_environment()
    backend_type = (backend_type or settings.store_backend).lower()

    if backend_type == "memory":
        return InMemoryConversationStore()

    elif backend_type == "sqlite":
        return SQLiteConversationStore(db_path=settings.sqlite_path)

    else:
        raise ValueError(
            f"Unknown store type: {backend_type}. "
            f"Supported types: memory, sqlite"
        )


__all__ = [
    "ChainRecord",
    "ConversationStore",
    "InMemoryConversationStore",
    "SQLiteConversationStore",
    "create_conversation_store",
]
