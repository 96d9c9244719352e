"""Core data models for the continuation system.

A ``Continuation`` is the only value that ever leaves the process: it is
flat, JSON-safe and carries nothing but a continuation ID and its arguments.
Using Pydantic keeps the record validated when it is loaded back from a store.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import ContinuationNotFoundError
from .identity import default_continuation_id


class Continuation(BaseModel):
    """Serialized continuation."""

    done: bool
    continuation_id: Optional[str] = None
    args: Optional[List[Any]] = None

    @property
    def is_terminal(self) -> bool:
        """True when executing this record would not invoke anything."""
        return self.done or not self.continuation_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert the continuation to a plain dictionary."""
        return self.model_dump(exclude_none=True)


# Anything that resolves to a continuation: units may return the model, a
# dict loaded from storage, or an awaitable of either.
ContinuationLike = Union[Continuation, Dict[str, Any], Awaitable[Any]]


def raise_not_found(continuation: Continuation, context: Any) -> Continuation:
    """Default not-found policy: an unknown continuation ID is fatal."""
    raise ContinuationNotFoundError(continuation.continuation_id)


class ContinuationConfiguration(BaseModel):
    """Policies used to customize the processing of continuations."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # (location, function_name) -> continuation ID
    get_continuation_id: Callable[[str, str], str] = default_continuation_id
    # (continuation, context) -> continuation to redirect to
    function_not_found: Callable[[Continuation, Any], Any] = raise_not_found
    max_redirects: int = Field(default=10, ge=0)


@dataclass(frozen=True)
class RegisteredContinuation:
    """A continuation function paired with the ID it was registered under."""

    continuation_id: str
    unit: Callable[..., Any]
    location: str

    @property
    def name(self) -> str:
        return unit_name(self.unit)


def unit_name(unit: Any) -> str:
    """Best-effort display name for a callable."""
    return getattr(unit, "__qualname__", None) or getattr(unit, "__name__", None) or repr(unit)
