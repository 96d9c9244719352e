"""Error taxonomy for the continuation system.

Registration errors are raised at startup and are expected to abort
initialization. ``ContinuationNotFoundError`` is the only runtime condition
meant to be handled gracefully, through the configured recovery policy.
"""

from typing import Optional


class ContinuationError(Exception):
    """Base class for all continuation errors."""


class DuplicateRegistrationError(ContinuationError):
    """The same unit was registered more than once."""

    def __init__(self, unit_name: str, continuation_id: str):
        self.unit_name = unit_name
        self.continuation_id = continuation_id
        super().__init__(
            f"Continuation function '{unit_name}' is already registered "
            f"as '{continuation_id}'."
        )


class IdentifierCollisionError(ContinuationError):
    """Two distinct units resolved to the same continuation ID."""

    def __init__(self, continuation_id: str):
        self.continuation_id = continuation_id
        super().__init__(
            f"Can't register continuation ID '{continuation_id}' because it already exists."
        )


class UnregisteredUnitError(ContinuationError):
    """A continuation was requested for a unit that was never registered."""

    def __init__(self, unit_name: str):
        self.unit_name = unit_name
        super().__init__(
            f"continue_with() called with a function that can't be continued. "
            f"Register '{unit_name}' with can_continue_with() first."
        )


class ContinuationNotFoundError(ContinuationError):
    """A persisted continuation ID no longer resolves to a registered unit."""

    def __init__(self, continuation_id: Optional[str]):
        self.continuation_id = continuation_id
        super().__init__(
            f"continue_now() can't find a continuation function for "
            f"continuation ID '{continuation_id}'."
        )


class RedirectLoopError(ContinuationError):
    """The not-found policy kept redirecting to unknown continuation IDs."""

    def __init__(self, continuation_id: Optional[str], max_redirects: int):
        self.continuation_id = continuation_id
        self.max_redirects = max_redirects
        super().__init__(
            f"Gave up resolving continuation ID '{continuation_id}' after "
            f"{max_redirects} redirects."
        )


class ChainConflictError(ContinuationError):
    """A chain record was modified concurrently."""

    def __init__(self, chain_id: str, expected_version: int, actual_version: Optional[int]):
        self.chain_id = chain_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Chain '{chain_id}' expected version {expected_version} "
            f"but found {actual_version}."
        )
