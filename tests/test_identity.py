"""Tests for continuation identity resolution."""

from pathlib import Path

import pytest

from continue_py import ContinuationRegistry, IdentifierCollisionError
from continue_py.core import identity
from continue_py.core.identity import (
    UNKNOWN_LOCATION,
    caller_location,
    default_continuation_id,
    module_continuation_id,
    relative_continuation_id,
    resolve_location,
)


def test_default_continuation_id():
    assert default_continuation_id("bot/app.py", "start") == "bot/app.py#start"


def test_caller_location_is_this_file():
    assert Path(caller_location()).resolve() == Path(__file__).resolve()


def test_caller_location_skips_given_files():
    """Test helper files around registration don't become the location."""
    location = caller_location(skip_files=[__file__])
    assert location
    assert Path(location).resolve() != Path(__file__).resolve()


def test_resolve_location_prefers_explicit_location():
    assert resolve_location(test_default_continuation_id, "dialogs") == "dialogs"


def test_resolve_location_defaults_to_caller():
    location = resolve_location(test_default_continuation_id)
    assert Path(location).resolve() == Path(__file__).resolve()
    assert location != UNKNOWN_LOCATION


def test_relative_policy_strips_root(tmp_path):
    """Test the relative policy removes the deployment directory."""
    policy = relative_continuation_id(str(tmp_path))
    location = str(tmp_path / "bot" / "dialogs.py")

    assert policy(location, "start") == "bot/dialogs.py#start"


def test_relative_policy_keeps_locations_outside_root(tmp_path):
    policy = relative_continuation_id(str(tmp_path / "app"))
    assert policy("elsewhere/dialogs.py", "start") == "elsewhere/dialogs.py#start"


def test_relative_ids_survive_a_move(tmp_path):
    """Test the same layout under two roots gives the same ID."""
    old_root = tmp_path / "release-1"
    new_root = tmp_path / "release-2"

    old_id = relative_continuation_id(str(old_root))(str(old_root / "bot.py"), "start")
    new_id = relative_continuation_id(str(new_root))(str(new_root / "bot.py"), "start")

    assert old_id == new_id


def test_module_policy(tmp_path):
    policy = module_continuation_id(str(tmp_path))
    location = str(tmp_path / "bot" / "dialogs.py")

    assert policy(location, "start") == "bot.dialogs:start"


@pytest.fixture
def no_caller_frame(monkeypatch):
    """Make the stack walk come back empty, as in frozen or embedded runs."""
    monkeypatch.setattr(identity, "caller_location", lambda *args, **kwargs: "")


def _make_unit():
    async def step(context):
        return None
    step.__module__ = None
    return step


def test_resolve_location_falls_back_to_module(no_caller_frame):
    assert resolve_location(test_default_continuation_id) == __name__


def test_resolve_location_falls_back_to_unknown(no_caller_frame):
    assert resolve_location(_make_unit()) == UNKNOWN_LOCATION


def test_registry_uses_module_without_caller_frame(no_caller_frame):
    registry = ContinuationRegistry()

    async def start(context):
        return None

    registry.register(start)

    assert registry.identifier_of(start) == f"{__name__}#{start.__qualname__}"


def test_unknown_locations_still_collide(no_caller_frame):
    """Test two units without any location can't share an ID silently."""
    registry = ContinuationRegistry()
    first = _make_unit()
    registry.register(first)
    assert registry.identifier_of(first) == f"{UNKNOWN_LOCATION}#_make_unit.<locals>.step"

    with pytest.raises(IdentifierCollisionError):
        registry.register(_make_unit())
    assert len(registry) == 1
