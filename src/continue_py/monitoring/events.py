"""Event definitions for the monitoring system.

This module defines the events emitted while continuations are registered
and dispatched.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class EventType(str, Enum):
    """Types of events that can occur while dispatching continuations."""

    # Registration
    UNIT_REGISTERED = "unit_registered"

    # Dispatch lifecycle
    CONTINUATION_STARTED = "continuation_started"
    CONTINUATION_COMPLETED = "continuation_completed"
    CONTINUATION_FAILED = "continuation_failed"

    # Recovery
    CONTINUATION_NOT_FOUND = "continuation_not_found"
    CONTINUATION_REDIRECTED = "continuation_redirected"

    # Chain lifecycle
    CHAIN_FINISHED = "chain_finished"


@dataclass
class DispatchEvent:
    """Base dispatch event."""

    event_type: EventType
    continuation_id: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        return {
            "event_type": self.event_type.value,
            "continuation_id": self.continuation_id,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
        }


class EventFactory:
    """Factory for creating dispatch events."""

    @staticmethod
    def unit_registered(continuation_id: str, location: str) -> DispatchEvent:
        """Create unit registered event."""
        return DispatchEvent(
            event_type=EventType.UNIT_REGISTERED,
            continuation_id=continuation_id,
            data={"location": location},
        )

    @staticmethod
    def continuation_started(continuation_id: str, args: List[Any]) -> DispatchEvent:
        """Create continuation started event."""
        return DispatchEvent(
            event_type=EventType.CONTINUATION_STARTED,
            continuation_id=continuation_id,
            data={"arg_count": len(args)},
        )

    @staticmethod
    def continuation_completed(
        continuation_id: str,
        next_continuation_id: Optional[str],
        duration_ms: int
    ) -> DispatchEvent:
        """Create continuation completed event."""
        return DispatchEvent(
            event_type=EventType.CONTINUATION_COMPLETED,
            continuation_id=continuation_id,
            data={
                "next_continuation_id": next_continuation_id,
                "duration_ms": duration_ms,
            },
        )

    @staticmethod
    def continuation_failed(continuation_id: str, error: BaseException) -> DispatchEvent:
        """Create continuation failed event."""
        return DispatchEvent(
            event_type=EventType.CONTINUATION_FAILED,
            continuation_id=continuation_id,
            data={
                "error_type": type(error).__name__,
                "error_message": str(error),
            },
        )

    @staticmethod
    def continuation_not_found(continuation_id: Optional[str]) -> DispatchEvent:
        return DispatchEvent(
            event_type=EventType.CONTINUATION_NOT_FOUND,
            continuation_id=continuation_id,
        )

    @staticmethod
    def continuation_redirected(
        continuation_id: Optional[str],
        redirect_id: Optional[str],
        redirect_done: bool
    ) -> DispatchEvent:
        """Create redirect event produced by the not-found policy."""
        return DispatchEvent(
            event_type=EventType.CONTINUATION_REDIRECTED,
            continuation_id=continuation_id,
            data={"redirect_id": redirect_id, "redirect_done": redirect_done},
        )

    @staticmethod
    def chain_finished(chain_id: str) -> DispatchEvent:
        return DispatchEvent(
            event_type=EventType.CHAIN_FINISHED,
            data={"chain_id": chain_id},
        )
