"""Tests for client configuration loading and logging setup."""

import logging

import pytest
import yaml

from syncdev.shared.core.configuration import ConfigManager, LoggingConfig, SystemConfig, ValidationLevel
from syncdev.shared.core.logging_config import configure_logging


@pytest.fixture
def clean_env(monkeypatch):
    for key in ConfigManager.ENV_MAP:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def write_yaml(path, data):
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f)


class TestConfigManager:
    """Layered configuration: defaults file, user file, environment."""

    def test_builtin_defaults(self, tmp_path, clean_env):
        config = ConfigManager(tmp_path).get_config()

        assert config == SystemConfig()
        assert config.state.event_log_capacity == 100
        assert config.state.default_tab == "peers"
        assert config.logging.level == "INFO"

    def test_user_file_overrides_defaults_file(self, tmp_path, clean_env):
        write_yaml(tmp_path / "defaults.yaml", {"state": {"event_log_capacity": 50, "default_tab": "sync"}})
        write_yaml(tmp_path / "user.yaml", {"state": {"event_log_capacity": 20}})

        config = ConfigManager(tmp_path).get_config()

        assert config.state.event_log_capacity == 20
        assert config.state.default_tab == "sync"

    def test_environment_overrides_files(self, tmp_path, clean_env):
        write_yaml(tmp_path / "user.yaml", {"state": {"event_log_capacity": 20}, "logging": {"level": "info"}})
        clean_env.setenv("SYNCDEV_EVENT_LOG_CAPACITY", "7")
        clean_env.setenv("SYNCDEV_LOG_LEVEL", "debug")

        config = ConfigManager(tmp_path).get_config()

        assert config.state.event_log_capacity == 7
        assert config.logging.level == "DEBUG"

    def test_non_numeric_env_value_is_ignored(self, tmp_path, clean_env):
        clean_env.setenv("SYNCDEV_EVENT_LOG_CAPACITY", "lots")

        assert ConfigManager(tmp_path).get_config().state.event_log_capacity == 100

    def test_invalid_yaml_is_ignored(self, tmp_path, clean_env):
        (tmp_path / "user.yaml").write_text("state: [unclosed", encoding="utf-8")

        assert ConfigManager(tmp_path).get_config() == SystemConfig()

    def test_strict_validation_raises(self, tmp_path, clean_env):
        write_yaml(tmp_path / "user.yaml", {"state": {"event_log_capacity": 0}})

        with pytest.raises(ValueError):
            ConfigManager(tmp_path).get_config(ValidationLevel.STRICT)

    def test_lenient_validation_falls_back_to_defaults(self, tmp_path, clean_env):
        write_yaml(tmp_path / "user.yaml", {"state": {"default_tab": "downloads"}})

        config = ConfigManager(tmp_path).get_config(ValidationLevel.LENIENT)

        assert config == SystemConfig()

    def test_unknown_keys_are_rejected(self, tmp_path, clean_env):
        write_yaml(tmp_path / "user.yaml", {"state": {"persist": True}})

        with pytest.raises(ValueError):
            ConfigManager(tmp_path).get_config()

    def test_reload_picks_up_changes(self, tmp_path, clean_env):
        manager = ConfigManager(tmp_path)
        assert manager.get_config().state.event_log_capacity == 100

        write_yaml(tmp_path / "user.yaml", {"state": {"event_log_capacity": 30}})
        assert manager.get_config().state.event_log_capacity == 100

        manager.reload_config()
        assert manager.get_config().state.event_log_capacity == 30


class TestLogging:

    def test_file_and_console_handlers(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "client.log"

        root = configure_logging(LoggingConfig(level="DEBUG", log_file=str(log_file)))
        logging.getLogger("syncdev.test").debug("hello from the state layer")
        for handler in root.handlers:
            handler.flush()

        assert len(root.handlers) == 2
        assert "hello from the state layer" in log_file.read_text(encoding="utf-8")

    def test_console_only_without_log_file(self, restore_root_logger):
        root = configure_logging(LoggingConfig())

        assert len(root.handlers) == 1
        assert root.handlers[0].level == logging.WARNING

    def test_unknown_level_is_rejected(self):
        with pytest.raises(ValueError):
            LoggingConfig(level="LOUD")
