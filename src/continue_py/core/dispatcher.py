"""Continuation dispatcher.

Turns continuation functions into serializable ``Continuation`` records and
executes those records against a registry:

- ``continue_with()`` builds a record for a registered function
- ``dont_continue()`` builds the terminal record
- ``continue_now()`` runs one step and returns the next record

When a record's continuation ID can't be resolved the registry's
``function_not_found`` policy is asked for a redirect. Redirects are executed
like any other record, up to ``max_redirects`` consecutive hops.
"""

import inspect
import time
from typing import Any, Callable, Optional

import logging
logger = logging.getLogger(__name__)

from ..monitoring.events import DispatchEvent, EventFactory
from ..monitoring.monitor import DispatchMonitor
from .errors import RedirectLoopError, UnregisteredUnitError
from .models import Continuation, ContinuationLike, unit_name
from .registry import ContinuationRegistry


async def resolve_continuation(value: ContinuationLike) -> Continuation:
    """Await and validate anything that should produce a continuation.

    Args:
        value: Continuation, plain dict or awaitable of either

    Returns:
        The validated continuation
    """
    if inspect.isawaitable(value):
        value = await value
    if isinstance(value, Continuation):
        return value
    if isinstance(value, dict):
        return Continuation.model_validate(value)
    raise TypeError(
        f"Expected a Continuation, got {type(value).__name__}. "
        f"Continuation functions must return continue_with() or dont_continue()."
    )


class ContinuationDispatcher:
    """Builds and executes continuations against a registry."""

    def __init__(
        self,
        registry: ContinuationRegistry,
        monitor: Optional[DispatchMonitor] = None
    ):
        """Initialize the dispatcher.

        Args:
            registry: Registry holding the continuation functions
            monitor: Monitor receiving dispatch events (defaults to the registry's)
        """
        self.registry = registry
        self.monitor = monitor if monitor is not None else registry.monitor

    def continue_with(self, unit: Callable[..., Any], *args: Any) -> Continuation:
        """Generate a continuation for a given continuation function.

        Args:
            unit: Function previously passed to ``can_continue_with()``
            *args: Arguments passed to the function when it's called

        Returns:
            Serialized continuation information for the function
        """
        continuation_id = self.registry.identifier_of(unit)
        if continuation_id is None:
            raise UnregisteredUnitError(unit_name(unit))

        return Continuation(done=False, continuation_id=continuation_id, args=list(args))

    def dont_continue(self) -> Continuation:
        """End a chain of continuation functions."""
        return Continuation(done=True)

    async def continue_now(self, continuation: ContinuationLike, context: Any) -> Continuation:
        """Execute a continuation.

        Args:
            continuation: Continuation to run, as a model, dict or awaitable
            context: Value passed as the first argument to the function

        Returns:
            Continuation for the next function to run
        """
        current = await resolve_continuation(continuation)
        redirects = 0

        while True:
            if current.is_terminal:
                return self.dont_continue()

            unit = self.registry.lookup(current.continuation_id)
            if unit is not None:
                return await self._invoke(unit, current, context)

            # Redirect to a configured error handler
            await self._emit(EventFactory.continuation_not_found(current.continuation_id))
            logger.warning(f"No continuation function for '{current.continuation_id}'")
            config = self.registry.config
            redirect = await resolve_continuation(config.function_not_found(current, context))
            await self._emit(EventFactory.continuation_redirected(
                current.continuation_id,
                redirect.continuation_id,
                redirect.done,
            ))
            if redirect.done:
                return redirect

            if redirects >= config.max_redirects:
                raise RedirectLoopError(current.continuation_id, config.max_redirects)
            redirects += 1
            current = redirect

    async def _invoke(self, unit: Callable[..., Any], continuation: Continuation, context: Any) -> Continuation:
        """Call a resolved function and validate what it returns."""
        continuation_id = continuation.continuation_id
        args = continuation.args or []

        logger.debug(f"Continuing with {continuation_id} ({len(args)} args)")
        await self._emit(EventFactory.continuation_started(continuation_id, args))
        started = time.monotonic()

        try:
            result = await resolve_continuation(unit(context, *args))
        except Exception as e:
            await self._emit(EventFactory.continuation_failed(continuation_id, e))
            raise

        duration_ms = int((time.monotonic() - started) * 1000)
        await self._emit(EventFactory.continuation_completed(
            continuation_id,
            None if result.done else result.continuation_id,
            duration_ms,
        ))
        return result

    async def _emit(self, event: DispatchEvent) -> None:
        if self.monitor:
            await self.monitor.emit_event(event)
