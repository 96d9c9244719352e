"""Environment driven settings.

Environment Variables:
    CONTINUE_MAX_REDIRECTS: Bound on not-found redirects per execution (default 10)
    CONTINUE_PATH_ROOT: Make continuation IDs relative to this directory
    CONTINUE_STORE_BACKEND: Conversation store type (memory, sqlite)
    CONTINUE_SQLITE_PATH: SQLite database file for the sqlite store
    CONTINUE_LOG_LEVEL: Log level applied by configure_logging()
"""

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .core.identity import relative_continuation_id
from .core.models import ContinuationConfiguration


class ContinuationSettings(BaseModel):
    """Settings read from the environment (and a ``.env`` file)."""

    max_redirects: int = Field(default=10, ge=0)
    path_root: Optional[str] = None
    store_backend: str = "memory"
    sqlite_path: str = "data/continuations.db"
    log_level: str = "INFO"

    @field_validator("store_backend", "log_level")
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    @classmethod
    def from_environment(cls) -> "ContinuationSettings":
        """Create settings from environment variables."""
        return cls(
            max_redirects=int(os.getenv("CONTINUE_MAX_REDIRECTS", "10")),
            path_root=os.getenv("CONTINUE_PATH_ROOT") or None,
            store_backend=os.getenv("CONTINUE_STORE_BACKEND", "memory").lower(),
            sqlite_path=os.getenv("CONTINUE_SQLITE_PATH", "data/continuations.db"),
            log_level=os.getenv("CONTINUE_LOG_LEVEL", "INFO").upper(),
        )

    def to_configuration(self) -> ContinuationConfiguration:
        """Build the registry configuration these settings describe."""
        overrides = {"max_redirects": self.max_redirects}
        if self.path_root:
            overrides["get_continuation_id"] = relative_continuation_id(self.path_root)
        return ContinuationConfiguration(**overrides)


def configure_logging(settings: Optional[ContinuationSettings] = None) -> None:
    """Apply a basic logging setup at the configured level."""
    settings = settings or ContinuationSettings.from_environment()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
