"""Monitoring module for continuation dispatch.

This module provides:
- Dispatch event definitions
- Per continuation function metrics
- Event handler fan-out
"""

from .events import DispatchEvent, EventFactory, EventType
from .monitor import DispatchMonitor

__all__ = [
    # Events
    "EventType",
    "DispatchEvent",
    "EventFactory",
    # Monitor
    "DispatchMonitor",
]
