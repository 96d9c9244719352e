"""continue-py - resumable async workflows through serializable continuations.

Suspend a multi-step asynchronous workflow at any point and resume it later,
even after a process restart, by persisting a small continuation record:
- Stable IDs for continuation functions
- A startup-time registry of those functions
- A dispatcher that runs one step per turn and recovers from unknown IDs
"""

# Load environment variables from .env file if it exists
from dotenv import load_dotenv
load_dotenv()

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import logging
logger = logging.getLogger(__name__)

from .config import ContinuationSettings, configure_logging
from .core import (
    ChainConflictError,
    Continuation,
    ContinuationConfiguration,
    ContinuationDispatcher,
    ContinuationError,
    ContinuationNotFoundError,
    ContinuationRegistry,
    DuplicateRegistrationError,
    IdentifierCollisionError,
    RedirectLoopError,
    UnregisteredUnitError,
    module_continuation_id,
    relative_continuation_id,
)
from .monitoring import DispatchMonitor, EventFactory, EventType
from .storage import (
    ChainRecord,
    ConversationStore,
    InMemoryConversationStore,
    SQLiteConversationStore,
    create_conversation_store,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Continuation",
    "ContinuationConfiguration",
    "ContinuationRegistry",
    "ContinuationDispatcher",
    "relative_continuation_id",
    "module_continuation_id",
    # Errors
    "ContinuationError",
    "DuplicateRegistrationError",
    "IdentifierCollisionError",
    "UnregisteredUnitError",
    "ContinuationNotFoundError",
    "RedirectLoopError",
    "ChainConflictError",
    # Configuration
    "ContinuationSettings",
    "configure_logging",
    # Storage
    "ChainRecord",
    "ConversationStore",
    "InMemoryConversationStore",
    "SQLiteConversationStore",
    "create_conversation_store",
    # Monitoring
    "DispatchMonitor",
    "EventType",
    # High-level interface
    "TurnContext",
    "ContinuationManager",
]


@dataclass
class TurnContext:
    """Context handed to continuation functions by ContinuationManager."""

    chain_id: str
    payload: Any = None
    state: Dict[str, Any] = field(default_factory=dict)
    replies: List[Any] = field(default_factory=list)
    continuation: Optional[Continuation] = None

    def reply(self, message: Any) -> None:
        """Queue a message for the caller to deliver after the turn."""
        self.replies.append(message)


# Convenience class for easy usage
class ContinuationManager:
    """High-level interface running one turn per external trigger.

    Each turn loads the chain's continuation and state from the store,
    executes the continuation, and saves the next continuation with the
    updated state.
    """

    def __init__(
        self,
        dispatcher: ContinuationDispatcher,
        entry: Callable[..., Any],
        store: Optional[ConversationStore] = None,
        monitor: Optional[DispatchMonitor] = None,
        restart_on_done: bool = True,
        store_backend_type: Optional[str] = None
    ):
        """Initialize the manager.

        Args:
            dispatcher: Dispatcher bound to the application's registry
            entry: Registered continuation function that starts every chain
            store: Conversation store (if not provided, creates one from configuration)
            monitor: Monitor started and stopped with the manager (defaults to the dispatcher's)
            restart_on_done: Restart finished chains at ``entry`` on the next turn
            store_backend_type: Type of store to create ("memory", "sqlite")
        """
        # Fail at startup, not on the first turn, if entry isn't registered
        dispatcher.continue_with(entry)

        self.dispatcher = dispatcher
        self.entry = entry
        self.store = store or create_conversation_store(store_backend_type)
        self.monitor = monitor if monitor is not None else dispatcher.monitor
        self.restart_on_done = restart_on_done
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the store and monitor."""
        if self._initialized:
            return

        await self.store.initialize()
        if self.monitor:
            await self.monitor.start()
        self._initialized = True

    async def close(self) -> None:
        """Close the store and monitor."""
        if self.monitor:
            await self.monitor.stop()
        await self.store.close()
        self._initialized = False

    async def run_turn(self, chain_id: str, payload: Any = None) -> TurnContext:
        """Run one turn of a chain.

        Args:
            chain_id: Application-chosen chain key (e.g. conversation ID)
            payload: Data of the external trigger, exposed as ``context.payload``

        Returns:
            The turn context, with ``continuation`` set to the next continuation
        """
        if not self._initialized:
            await self.initialize()

        record = await self.store.load(chain_id)
        if record is None:
            record = ChainRecord(
                chain_id=chain_id,
                continuation=self.dispatcher.continue_with(self.entry),
            )
        expected_version = record.version

        context = TurnContext(chain_id=chain_id, payload=payload, state=record.state)
        next_continuation = await self.dispatcher.continue_now(record.continuation, context)
        context.continuation = next_continuation

        if next_continuation.done:
            logger.debug(f"Chain {chain_id} finished")
            if self.monitor:
                await self.monitor.emit_event(EventFactory.chain_finished(chain_id))

        if next_continuation.done and self.restart_on_done:
            record.continuation = self.dispatcher.continue_with(self.entry)
        else:
            record.continuation = next_continuation
        record.state = context.state

        await self.store.save(record, expected_version=expected_version)
        return context

    async def get_chain(self, chain_id: str) -> Optional[ChainRecord]:
        """Get the stored record of a chain."""
        if not self._initialized:
            await self.initialize()

        return await self.store.load(chain_id)

    async def reset_chain(self, chain_id: str) -> bool:
        """Forget a chain so its next turn starts at the entry function."""
        if not self._initialized:
            await self.initialize()

        return await self.store.delete(chain_id)
