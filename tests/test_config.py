"""
Tests for configuration handling
"""

import json

import pytest

from cmdwise.config import ConfigManager
from cmdwise.exceptions import ConfigurationError


@pytest.fixture
def config_file(tmp_path):
    """Fixture for a config file path inside a temporary home."""
    return tmp_path / ".cmdwise" / "config.json"


def test_defaults(config_file):
    config = ConfigManager(config_file, environ={})
    assert config.get("engine.max_results") == 20
    assert config.get("history.files") == ["~/.bash_history", "~/.zsh_history"]
    assert config.get("missing.key", "fallback") == "fallback"


def test_file_is_deep_merged(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text(json.dumps({"engine": {"max_results": 5}}))
    config = ConfigManager(config_file, environ={})
    assert config.get("engine.max_results") == 5
    assert config.get("engine.source_limit") == 50


def test_broken_file_falls_back_to_defaults(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text("{not json")
    assert ConfigManager(config_file, environ={}).get("engine.max_results") == 20


def test_environment_overrides(config_file):
    environ = {
        "CMDWISE_ENGINE_MAX_RESULTS": "7",
        "CMDWISE_LEARNING_ENABLED": "off",
        "CMDWISE_CONTEXT_GIT_TIMEOUT_SECONDS": "0.25",
        "CMDWISE_HISTORY_FILES": "/a/history:/b/history",
        "CMDWISE_LOGGING_LEVEL": "DEBUG",
        "CMDWISE_UNKNOWN_SECTION": "ignored",
        "OTHER_ENGINE_MAX_RESULTS": "1",
    }
    config = ConfigManager(config_file, environ=environ)
    assert config.get("engine.max_results") == 7
    assert config.get("learning.enabled") is False
    assert config.get("context.git_timeout_seconds") == 0.25
    assert config.get("history.files") == ["/a/history", "/b/history"]
    assert config.get("logging.level") == "DEBUG"
    assert "unknown" not in config.to_dict()


def test_set_and_save(config_file):
    config = ConfigManager(config_file, environ={})
    config.set("engine.max_results", 10)
    config.set("new.section.key", "value")
    path = config.save()
    saved = json.loads(path.read_text())
    assert saved["engine"]["max_results"] == 10
    assert saved["new"]["section"]["key"] == "value"


def test_reset_to_defaults(config_file):
    config = ConfigManager(config_file, environ={})
    config.set("engine.max_results", 3)
    config.reset_to_defaults()
    assert config.get("engine.max_results") == 20


def test_get_path_expands_home(config_file, monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    config = ConfigManager(config_file, environ={})
    assert config.get_path("learning.data_directory") == tmp_path / ".cmdwise" / "data"


@pytest.mark.parametrize("key, value", [
    ("engine.max_results", 0),
    ("engine.source_limit", "many"),
    ("history.max_entries", True),
    ("context.cache_ttl_seconds", -1),
    ("history.files", 3),
    ("engine.max_results", 60),
    ("engine.recent_commands", 11),
    ("logging.level", "verbose"),
    ("logging.level", 10),
])
def test_validate_rejects_bad_values(config_file, key, value):
    config = ConfigManager(config_file, environ={})
    config.set(key, value)
    with pytest.raises(ConfigurationError) as exc_info:
        config.validate()
    assert exc_info.value.details["config_key"] == key


def test_validate_accepts_single_history_file(config_file):
    config = ConfigManager(config_file, environ={})
    config.set("history.files", "~/.bash_history")
    config.validate()
    assert config.get("history.files") == ["~/.bash_history"]


def test_print_config(config_file):
    from rich.console import Console
    console = Console(record=True, width=120)
    ConfigManager(config_file, environ={}).print_config(console)
    assert "max_results" in console.export_text()


def test_environment_cannot_raise_result_limit(config_file):
    config = ConfigManager(config_file, environ={"CMDWISE_ENGINE_MAX_RESULTS": "60"})
    with pytest.raises(ConfigurationError) as exc_info:
        config.validate()
    assert "at most 20" in exc_info.value.message


def test_validate_accepts_lowercase_level(config_file):
    config = ConfigManager(config_file, environ={"CMDWISE_LOGGING_LEVEL": "debug"})
    config.validate()
