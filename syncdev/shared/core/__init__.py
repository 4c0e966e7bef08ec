"""
Shared Core Module
==================

Event bus, event topics, configuration, logging and error types.
"""

# Event System
from .event_bus import EventBus, EventPayload
from . import events

# Errors
from .exceptions import ConfigValidationError, InvalidIntentError, MalformedPayloadError, SyncDevError

# Configuration
from .configuration import (
    ConfigManager,
    LoggingConfig,
    StateConfig,
    SystemConfig,
    ValidationLevel,
    get_config,
    get_config_manager,
)
from .logging_config import configure_logging

__all__ = [
    # Event System
    "EventBus",
    "EventPayload",
    "events",
    # Errors
    "SyncDevError",
    "InvalidIntentError",
    "ConfigValidationError",
    "MalformedPayloadError",
    # Configuration
    "ConfigManager",
    "SystemConfig",
    "StateConfig",
    "LoggingConfig",
    "ValidationLevel",
    "get_config_manager",
    "get_config",
    "configure_logging",
]
