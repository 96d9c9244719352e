"""Continuation registry.

Maps continuation IDs to continuation functions. Registration happens once,
at startup, and fails fast; afterwards the table is only read. The registry
must be rebuilt identically on every start for continuations saved by a
previous run to stay resolvable.
"""

from typing import Any, Callable, Dict, List, Optional

import logging
logger = logging.getLogger(__name__)

from ..monitoring.events import EventFactory
from ..monitoring.monitor import DispatchMonitor
from .errors import DuplicateRegistrationError, IdentifierCollisionError
from .identity import resolve_location
from .models import ContinuationConfiguration, RegisteredContinuation, unit_name


class ContinuationRegistry:
    """Process-wide table of continuation functions."""

    def __init__(
        self,
        config: Optional[ContinuationConfiguration] = None,
        monitor: Optional[DispatchMonitor] = None
    ):
        """Initialize the registry.

        Args:
            config: Policies to start from (read from the environment if not provided)
            monitor: Optional monitor receiving registration events
        """
        if config is None:
            # Imported here: config imports the core package
            from ..config import ContinuationSettings
            config = ContinuationSettings.from_environment().to_configuration()
        self.config = config
        self.monitor = monitor
        self._by_id: Dict[str, RegisteredContinuation] = {}
        self._by_unit: Dict[Any, RegisteredContinuation] = {}

    def configure(self, **overrides: Any) -> ContinuationConfiguration:
        """Customize the processing of continuations.

        Args:
            **overrides: Configuration fields to replace; the rest are kept

        Returns:
            The merged configuration
        """
        if "get_continuation_id" in overrides and self._by_id:
            logger.warning(
                f"Continuation ID policy changed after {len(self._by_id)} "
                f"functions were registered; their IDs are not recomputed"
            )
        merged = {**dict(self.config), **overrides}
        self.config = ContinuationConfiguration(**merged)
        return self.config

    def register(self, unit: Callable[..., Any], location: Optional[str] = None) -> Callable[..., Any]:
        """Register a function as being a continuation point.

        Args:
            unit: Async function taking ``(context, *args)``
            location: Declaring location; inferred from the caller if omitted

        Returns:
            The same function, so this can be used as a decorator
        """
        if not callable(unit):
            raise TypeError(f"Continuation functions must be callable, got {unit!r}")

        name = unit_name(unit)
        try:
            existing = self._by_unit.get(unit)
        except TypeError:
            raise TypeError(f"Continuation functions must be hashable, got {unit!r}") from None
        if existing is not None:
            raise DuplicateRegistrationError(name, existing.continuation_id)

        resolved = resolve_location(unit, location)
        continuation_id = self.config.get_continuation_id(resolved, name)
        if continuation_id in self._by_id:
            raise IdentifierCollisionError(continuation_id)

        entry = RegisteredContinuation(
            continuation_id=continuation_id,
            unit=unit,
            location=resolved,
        )
        self._by_id[continuation_id] = entry
        self._by_unit[unit] = entry
        logger.info(f"Registered continuation: {continuation_id}")
        if self.monitor:
            self.monitor.record_event(EventFactory.unit_registered(continuation_id, resolved))
        return unit

    def can_continue_with(self, unit: Optional[Callable[..., Any]] = None, *, location: Optional[str] = None):
        """Decorator form of :meth:`register`.

        Usable bare (``@registry.can_continue_with``) or with an explicit
        location (``@registry.can_continue_with(location="bot/dialogs")``).
        """
        if unit is None:
            return lambda fn: self.register(fn, location)
        return self.register(unit, location)

    def lookup(self, continuation_id: str) -> Optional[Callable[..., Any]]:
        """Find the function registered under an ID, or None."""
        try:
            entry = self._by_id.get(continuation_id)
        except TypeError:  # unhashable
            return None
        return entry.unit if entry else None

    def entry(self, continuation_id: str) -> Optional[RegisteredContinuation]:
        return self._by_id.get(continuation_id)

    def identifier_of(self, unit: Any) -> Optional[str]:
        """Get the continuation ID a function was registered under."""
        try:
            entry = self._by_unit.get(unit)
        except TypeError:  # unhashable
            return None
        return entry.continuation_id if entry else None

    def continuation_ids(self) -> List[str]:
        return list(self._by_id)

    def __contains__(self, continuation_id: object) -> bool:
        return continuation_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)
