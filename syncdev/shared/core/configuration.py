"""
Configuration Management for the SyncDev client state layer

Settings are merged with the precedence: environment → user → defaults file →
built-in pydantic defaults.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".syncdev" / "client"


class ValidationLevel(Enum):
    """Configuration validation strictness levels"""
    STRICT = "strict"      # Fail fast on validation errors
    LENIENT = "lenient"    # Log warnings, use defaults


class StateConfig(BaseModel):
    """State layer behaviour"""
    model_config = ConfigDict(extra='forbid')

    event_log_capacity: int = Field(default=100, ge=1, le=10000, description="Max entries kept in the sync event log")
    default_tab: str = Field(default="peers", description="Tab selected at startup")

    @field_validator("default_tab")
    @classmethod
    def _known_tab(cls, value: str) -> str:
        from syncdev.shared.domain.models import Tab

        return Tab(value).value


class LoggingConfig(BaseModel):
    """Logging Configuration"""
    model_config = ConfigDict(extra='forbid')

    level: str = Field(default="INFO", description="Level for the log file")
    console_level: str = Field(default="WARNING", description="Level for terminal output")
    log_file: Optional[str] = Field(default=None, description="Rotating log file path; no file when unset")
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, description="Rotate after this many bytes")
    backup_count: int = Field(default=5, ge=0, le=100, description="Rotated files to keep")

    @field_validator("level", "console_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level '{value}'")
        return value


class SystemConfig(BaseModel):
    """Complete client configuration"""
    model_config = ConfigDict(extra='forbid')

    state: StateConfig = Field(default_factory=StateConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    schema_version: int = Field(default=1, description="Configuration schema version")


class ConfigManager:
    """Loads client settings from YAML files and the environment."""

    ENV_MAP = {
        'SYNCDEV_EVENT_LOG_CAPACITY': ('state', 'event_log_capacity', int),
        'SYNCDEV_DEFAULT_TAB': ('state', 'default_tab', str),
        'SYNCDEV_LOG_LEVEL': ('logging', 'level', str),
        'SYNCDEV_LOG_FILE': ('logging', 'log_file', str),
    }

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
        self._defaults: Optional[Dict[str, Any]] = None
        self._user_config: Optional[Dict[str, Any]] = None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file"""
        if not file_path.exists():
            return {}

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.warning(f"Failed to load {file_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {file_path}: top level is not a mapping")
            return {}
        return data

    def _load_defaults(self) -> Dict[str, Any]:
        if self._defaults is None:
            self._defaults = self._load_yaml_file(self.config_dir / "defaults.yaml")
        return self._defaults

    def _load_user_config(self) -> Dict[str, Any]:
        if self._user_config is None:
            self._user_config = self._load_yaml_file(self.config_dir / "user.yaml")
        return self._user_config

    def _deep_merge(self, base: Dict[str, Any], updates: Dict[str, Any]) -> None:
        """Deep merge configuration dictionaries"""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Extract configuration overrides from environment variables"""
        overrides: Dict[str, Any] = {}
        for env_key, (section, config_key, cast) in self.ENV_MAP.items():
            value = os.getenv(env_key)
            if value is None:
                continue
            try:
                converted = cast(value)
            except ValueError:
                logger.warning(f"Ignoring {env_key}={value!r}: not a valid {cast.__name__}")
                continue
            overrides.setdefault(section, {})[config_key] = converted
        return overrides

    def _merge_configs(self) -> Dict[str, Any]:
        """Merge configurations with precedence: env → user → defaults"""
        merged = SystemConfig().model_dump()
        self._deep_merge(merged, self._load_defaults())
        self._deep_merge(merged, self._load_user_config())
        self._deep_merge(merged, self._get_env_overrides())
        return merged

    def get_config(self, validation_level: ValidationLevel = ValidationLevel.STRICT) -> SystemConfig:
        """Get merged configuration with validation"""
        merged_config = self._merge_configs()

        try:
            return SystemConfig(**merged_config)
        except ValidationError as e:
            if validation_level == ValidationLevel.STRICT:
                raise ValueError(f"Configuration validation failed: {e}") from e
            logger.warning(f"Configuration validation failed, using defaults: {e}")
            return SystemConfig()

    def reload_config(self) -> None:
        """Clear cached configurations and reload from files"""
        self._defaults = None
        self._user_config = None


# Global instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[Path] = None) -> ConfigManager:
    """Get global configuration manager instance"""
    global _config_manager
    if _config_manager is None or config_dir is not None:
        _config_manager = ConfigManager(config_dir)
    return _config_manager


def get_config(validation_level: ValidationLevel = ValidationLevel.STRICT) -> SystemConfig:
    """Get current client configuration"""
    return get_config_manager().get_config(validation_level)
