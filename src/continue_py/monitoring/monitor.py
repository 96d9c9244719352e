"""Dispatch monitoring service.

Collects dispatch events and keeps simple counters:
- Event tracking
- Per continuation function metrics
- Handler fan-out
"""

import asyncio
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

import logging
logger = logging.getLogger(__name__)

from .events import DispatchEvent, EventType


def _empty_unit_metrics() -> Dict[str, int]:
    return {
        "executions": 0,
        "completions": 0,
        "failures": 0,
        "not_found": 0,
        "total_duration_ms": 0,
    }


class DispatchMonitor:
    """Monitors continuation dispatch and collects metrics."""

    def __init__(self):
        self._event_handlers: Dict[EventType, List[Callable]] = defaultdict(list)
        self._event_counts: Dict[EventType, int] = defaultdict(int)
        self._unit_metrics: Dict[str, Dict[str, int]] = defaultdict(_empty_unit_metrics)
        self._event_queue: Optional[asyncio.Queue] = None
        self._running = False
        self._processor_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the monitoring service."""
        if self._running:
            return

        # Created here so the queue belongs to the running loop
        self._event_queue = asyncio.Queue()
        self._running = True
        self._processor_task = asyncio.create_task(self._process_events())
        logger.info("Dispatch monitor started")

    async def stop(self) -> None:
        """Stop the monitoring service, draining queued events."""
        self._running = False

        if self._processor_task:
            await self._event_queue.put(None)  # Sentinel to stop processor
            await self._processor_task
            self._processor_task = None
            self._event_queue = None

        logger.info("Dispatch monitor stopped")

    def register_handler(
        self,
        event_type: EventType,
        handler: Callable[[DispatchEvent], None]
    ) -> None:
        """Register an event handler.

        Args:
            event_type: Type of event to handle
            handler: Handler function
        """
        self._event_handlers[event_type].append(handler)

    async def emit_event(self, event: DispatchEvent) -> None:
        """Emit a dispatch event.

        Events are queued while the monitor is running and handled inline
        otherwise.
        """
        if self._running:
            await self._event_queue.put(event)
        else:
            self._handle_event(event)

    def record_event(self, event: DispatchEvent) -> None:
        """Emit an event from synchronous code, such as registration."""
        if self._running:
            self._event_queue.put_nowait(event)
        else:
            self._handle_event(event)

    def get_metrics(self) -> Dict[str, Any]:
        """Get aggregate dispatch metrics."""
        return {
            "events": {event_type.value: count for event_type, count in self._event_counts.items()},
            "units": {cid: dict(metrics) for cid, metrics in self._unit_metrics.items()},
        }

    def get_unit_metrics(self, continuation_id: str) -> Optional[Dict[str, int]]:
        """Get metrics for a specific continuation function."""
        if continuation_id in self._unit_metrics:
            return dict(self._unit_metrics[continuation_id])
        return None

    async def _process_events(self) -> None:
        """Process events from the queue."""
        while True:
            event = await self._event_queue.get()
            if event is None:  # Sentinel value
                break

            try:
                self._handle_event(event)
            except Exception as e:
                logger.error(f"Error processing event: {e}", exc_info=True)

    def _handle_event(self, event: DispatchEvent) -> None:
        """Handle a dispatch event."""
        self._event_counts[event.event_type] += 1

        if event.continuation_id:
            metrics = self._unit_metrics[event.continuation_id]
            if event.event_type == EventType.CONTINUATION_STARTED:
                metrics["executions"] += 1
            elif event.event_type == EventType.CONTINUATION_COMPLETED:
                metrics["completions"] += 1
                metrics["total_duration_ms"] += event.data.get("duration_ms", 0)
            elif event.event_type == EventType.CONTINUATION_FAILED:
                metrics["failures"] += 1
            elif event.event_type == EventType.CONTINUATION_NOT_FOUND:
                metrics["not_found"] += 1

        # Call registered handlers
        for handler in self._event_handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler: {e}", exc_info=True)
