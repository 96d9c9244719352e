"""Identity resolution for continuation functions.

A continuation ID is derived from where a function was registered and the
function's name. By default the location is the file of the first stack
frame outside this package, so helper wrappers inside the package never
become part of the ID.
"""

import inspect
import logging
import os
from pathlib import Path, PurePath
from typing import Any, Callable, Iterable, Optional

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "<unknown>"

_PACKAGE_ROOT = str(Path(__file__).resolve().parent.parent)


def default_continuation_id(location: str, name: str) -> str:
    """Default ID policy: ``location#name``."""
    return f"{location}#{name}"


def relative_continuation_id(root: str) -> Callable[[str, str], str]:
    """Build an ID policy that strips an environment-specific path prefix.

    IDs produced this way stay the same when the application is deployed to
    a different directory, as long as its layout below ``root`` is unchanged.

    Args:
        root: Directory that locations are made relative to

    Returns:
        ID policy accepting ``(location, name)``
    """
    root_path = Path(root).resolve()

    def policy(location: str, name: str) -> str:
        try:
            relative = Path(location).resolve().relative_to(root_path).as_posix()
        except ValueError:
            relative = PurePath(location).as_posix()
        return default_continuation_id(relative, name)

    return policy


def module_continuation_id(root: str) -> Callable[[str, str], str]:
    """Build an ID policy producing dotted module paths, e.g. ``bot.dialogs:start``."""
    relative = relative_continuation_id(root)

    def policy(location: str, name: str) -> str:
        path, _, _ = relative(location, name).rpartition("#")
        if path.endswith(".py"):
            path = path[:-3]
        module = path.replace("/", ".")
        return f"{module}:{name}"

    return policy


def _is_internal(filename: str, skip_files: Iterable[str]) -> bool:
    try:
        resolved = str(Path(filename).resolve())
    except (OSError, ValueError):
        return False
    if resolved.startswith(_PACKAGE_ROOT + os.sep):
        return True
    return resolved in skip_files


def caller_location(skip_files: Optional[Iterable[str]] = None) -> str:
    """Return the file of the first frame outside the registration entry point.

    Args:
        skip_files: Extra files to treat as part of the entry point

    Returns:
        Filename of the calling frame, or an empty string if none was found
    """
    skip = {str(Path(f).resolve()) for f in (skip_files or ())}
    frame = inspect.currentframe()
    try:
        while frame is not None:
            filename = frame.f_code.co_filename
            if not _is_internal(filename, skip):
                return filename
            frame = frame.f_back
    finally:
        del frame
    return ""


def resolve_location(unit: Any, location: Optional[str] = None) -> str:
    """Determine the declaring location of a continuation function.

    An explicit ``location`` always wins. Otherwise the call stack is walked;
    if that yields nothing the unit's module is used, and as a last resort
    ``UNKNOWN_LOCATION``.
    """
    if location:
        return location

    found = caller_location()
    if found:
        return found

    module = getattr(unit, "__module__", None)
    if module:
        logger.debug(f"No caller frame for {unit!r}; using module '{module}' as location")
        return module

    logger.warning(
        f"Could not determine a location for {unit!r}; "
        f"its continuation ID will use '{UNKNOWN_LOCATION}'"
    )
    return UNKNOWN_LOCATION
