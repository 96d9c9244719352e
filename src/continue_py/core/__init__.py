"""Core module for the continuation system.

This module contains the fundamental building blocks:
- The serializable continuation record
- Identity resolution for continuation functions
- The registry and the dispatcher
"""

from .dispatcher import ContinuationDispatcher, resolve_continuation
from .errors import (
    ChainConflictError,
    ContinuationError,
    ContinuationNotFoundError,
    DuplicateRegistrationError,
    IdentifierCollisionError,
    RedirectLoopError,
    UnregisteredUnitError,
)
from .identity import (
    caller_location,
    default_continuation_id,
    module_continuation_id,
    relative_continuation_id,
    resolve_location,
)
from .models import (
    Continuation,
    ContinuationConfiguration,
    RegisteredContinuation,
    raise_not_found,
)
from .registry import ContinuationRegistry

__all__ = [
    # Models
    "Continuation",
    "ContinuationConfiguration",
    "RegisteredContinuation",
    "raise_not_found",
    # Identity
    "caller_location",
    "resolve_location",
    "default_continuation_id",
    "relative_continuation_id",
    "module_continuation_id",
    # Registry & dispatch
    "ContinuationRegistry",
    "ContinuationDispatcher",
    "resolve_continuation",
    # Errors
    "ContinuationError",
    "DuplicateRegistrationError",
    "IdentifierCollisionError",
    "UnregisteredUnitError",
    "ContinuationNotFoundError",
    "RedirectLoopError",
    "ChainConflictError",
]
