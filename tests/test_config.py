"""Tests for environment driven settings."""

from continue_py import ContinuationRegistry, ContinuationSettings
from continue_py.core.identity import default_continuation_id


def test_defaults(monkeypatch):
    for name in (
        "CONTINUE_MAX_REDIRECTS",
        "CONTINUE_PATH_ROOT",
        "CONTINUE_STORE_BACKEND",
        "CONTINUE_SQLITE_PATH",
        "CONTINUE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = ContinuationSettings.from_environment()

    assert settings.max_redirects == 10
    assert settings.path_root is None
    assert settings.store_backend == "memory"
    assert settings.log_level == "INFO"


def test_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("CONTINUE_MAX_REDIRECTS", "2")
    monkeypatch.setenv("CONTINUE_PATH_ROOT", str(tmp_path))
    monkeypatch.setenv("CONTINUE_STORE_BACKEND", "SQLite")
    monkeypatch.setenv("CONTINUE_SQLITE_PATH", str(tmp_path / "chains.db"))
    monkeypatch.setenv("CONTINUE_LOG_LEVEL", "debug")

    settings = ContinuationSettings.from_environment()

    assert settings.max_redirects == 2
    assert settings.path_root == str(tmp_path)
    assert settings.store_backend == "sqlite"
    assert settings.sqlite_path == str(tmp_path / "chains.db")
    assert settings.log_level == "DEBUG"


def test_to_configuration_uses_relative_ids(tmp_path):
    settings = ContinuationSettings(max_redirects=4, path_root=str(tmp_path))
    config = settings.to_configuration()

    assert config.max_redirects == 4
    assert config.get_continuation_id(str(tmp_path / "bot.py"), "start") == "bot.py#start"


def test_to_configuration_without_root_keeps_default_policy():
    config = ContinuationSettings().to_configuration()
    assert config.get_continuation_id is default_continuation_id


def test_registry_reads_settings_from_environment(monkeypatch):
    monkeypatch.setenv("CONTINUE_MAX_REDIRECTS", "1")
    monkeypatch.delenv("CONTINUE_PATH_ROOT", raising=False)

    registry = ContinuationRegistry()

    assert registry.config.max_redirects == 1
    assert registry.config.get_continuation_id is default_continuation_id


def test_registry_uses_path_root_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("CONTINUE_PATH_ROOT", str(tmp_path))
    registry = ContinuationRegistry()

    async def start(context):
        pass

    registry.register(start, location=str(tmp_path / "bot" / "dialogs.py"))

    assert registry.identifier_of(start) == "bot/dialogs.py#test_registry_uses_path_root_from_environment.<locals>.start"


def test_explicit_configuration_ignores_environment(monkeypatch):
    monkeypatch.setenv("CONTINUE_MAX_REDIRECTS", "1")

    registry = ContinuationRegistry(ContinuationSettings().to_configuration())

    assert registry.config.max_redirects == 10
