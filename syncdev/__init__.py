"""SyncDev client package."""

from .shared.core.event_bus import EventBus
from .client.state import AppState, Store

__version__ = "1.0.0"

__all__ = ["AppState", "EventBus", "Store"]
