"""Tests for the continuation registry."""

from pathlib import Path

import pytest

from continue_py import (
    ContinuationConfiguration,
    ContinuationRegistry,
    DuplicateRegistrationError,
    IdentifierCollisionError,
)


async def greet(context):
    return None


async def farewell(context):
    return None


def _split(continuation_id):
    location, _, name = continuation_id.rpartition("#")
    return location, name


def test_register_uses_caller_file_and_name():
    """Test the default ID is '<registering file>#<function name>'."""
    registry = ContinuationRegistry()
    registry.register(greet)

    continuation_id = registry.identifier_of(greet)
    location, name = _split(continuation_id)

    assert name == "greet"
    assert Path(location).resolve() == Path(__file__).resolve()


def test_register_returns_same_function():
    registry = ContinuationRegistry()
    assert registry.register(greet) is greet


def test_lookup_returns_registered_functions():
    """Test every registered function is found under its own ID."""
    registry = ContinuationRegistry()
    registry.register(greet)
    registry.register(farewell)

    for unit in (greet, farewell):
        assert registry.lookup(registry.identifier_of(unit)) is unit

    assert len(registry) == 2
    assert set(registry.continuation_ids()) == {
        registry.identifier_of(greet),
        registry.identifier_of(farewell),
    }


def test_lookup_unknown_id_returns_none():
    registry = ContinuationRegistry()
    assert registry.lookup("nowhere#nothing") is None
    assert "nowhere#nothing" not in registry
    assert registry.identifier_of(greet) is None


def test_decorator_forms():
    """Test bare and parametrized decorator usage."""
    registry = ContinuationRegistry()

    @registry.can_continue_with
    async def bare(context):
        return None

    @registry.can_continue_with(location="dialogs/main")
    async def explicit(context):
        return None

    @registry.can_continue_with()
    async def empty_parens(context):
        return None

    assert registry.identifier_of(explicit) == f"dialogs/main#{explicit.__qualname__}"

    for unit in (bare, empty_parens):
        location, name = _split(registry.identifier_of(unit))
        assert name == unit.__qualname__
        assert Path(location).resolve() == Path(__file__).resolve()


def test_explicit_location_wins():
    registry = ContinuationRegistry()
    registry.register(greet, location="bot/greetings.py")

    assert registry.identifier_of(greet) == "bot/greetings.py#greet"
    entry = registry.entry("bot/greetings.py#greet")
    assert entry.unit is greet
    assert entry.location == "bot/greetings.py"
    assert entry.name == "greet"


def test_double_registration_fails():
    """Test registering the same function twice is rejected."""
    registry = ContinuationRegistry()
    registry.register(greet)

    with pytest.raises(DuplicateRegistrationError) as exc_info:
        registry.register(greet)

    assert exc_info.value.unit_name == "greet"
    assert exc_info.value.continuation_id == registry.identifier_of(greet)
    assert len(registry) == 1


def test_identifier_collision_fails():
    """Test two functions mapped to the same ID are rejected."""
    registry = ContinuationRegistry()
    registry.configure(get_continuation_id=lambda location, name: "same")
    registry.register(greet)

    with pytest.raises(IdentifierCollisionError) as exc_info:
        registry.register(farewell)

    assert exc_info.value.continuation_id == "same"
    assert registry.lookup("same") is greet
    assert registry.identifier_of(farewell) is None


def test_register_rejects_non_callables():
    registry = ContinuationRegistry()
    with pytest.raises(TypeError):
        registry.register("not a function")


def test_configure_merges_partial_overrides():
    """Test configure() keeps fields that aren't overridden."""
    def not_found(continuation, context):
        return continuation

    registry = ContinuationRegistry(ContinuationConfiguration(max_redirects=3))
    config = registry.configure(function_not_found=not_found)

    assert config.function_not_found is not_found
    assert config.max_redirects == 3
    assert registry.config is config


def test_custom_id_policy_is_used():
    registry = ContinuationRegistry()
    registry.configure(get_continuation_id=lambda location, name: f"app:{name}")
    registry.register(greet)

    assert registry.identifier_of(greet) == "app:greet"


def test_separate_registries_produce_same_ids():
    """Test IDs are reproducible when a registry is rebuilt."""
    first = ContinuationRegistry()
    second = ContinuationRegistry()
    first.register(greet)
    second.register(greet)

    assert first.identifier_of(greet) == second.identifier_of(greet)


class _UnhashableStep:
    """Callable whose instances compare by value and so can't be hashed."""

    def __init__(self, name):
        self.name = name

    def __eq__(self, other):
        return isinstance(other, _UnhashableStep) and other.name == self.name

    async def __call__(self, context):
        return None


def test_register_rejects_unhashable_callables():
    registry = ContinuationRegistry()

    with pytest.raises(TypeError, match="hashable"):
        registry.register(_UnhashableStep("start"), location="steps")

    assert len(registry) == 0


def test_lookups_with_unhashable_values_find_nothing():
    """Test IDs read back from storage can't crash a lookup."""
    registry = ContinuationRegistry()
    registry.register(greet)

    assert registry.lookup(["not", "an", "id"]) is None
    assert registry.lookup({"continuation_id": "x"}) is None
    assert registry.identifier_of(_UnhashableStep("start")) is None
