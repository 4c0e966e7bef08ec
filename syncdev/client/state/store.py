"""Global State Store - composition point for the client state.

Builds the state cells, derived views and backend sink in one place. Tests
create isolated instances with ``Store(bus)``; the application uses the
process-wide instance through ``Store.initialize()`` / ``Store.get()``.
"""

from __future__ import annotations

from typing import Optional

from syncdev.shared.core.configuration import StateConfig
from syncdev.shared.core.event_bus import EventBus

from .app_state import AppState
from .sink import BackendSink


class Store:
    """Global state store for the client application.

    Usage:
        # During app initialization
        store = Store.initialize(event_bus)
        await store.start()

        # In any view
        store = Store.get()
        store.app.derived.formatted_speed.subscribe(render_speed)
    """

    _instance: Optional['Store'] = None

    def __init__(self, event_bus: EventBus, settings: Optional[StateConfig] = None) -> None:
        """Build a store wired to ``event_bus``.

        Args:
            event_bus: The channel backend events arrive on
            settings: State layer settings; defaults when omitted
        """
        self.bus = event_bus
        self.app = AppState(settings)
        self.sink = BackendSink(self.app, event_bus)

    async def start(self) -> None:
        """Start receiving backend events."""
        await self.sink.attach()

    async def stop(self) -> None:
        await self.sink.detach()

    @classmethod
    def initialize(cls, event_bus: EventBus, settings: Optional[StateConfig] = None) -> 'Store':
        """Initialize the global store instance.

        Should be called once during application startup before any view
        is created.

        Raises:
            RuntimeError: If store is already initialized
        """
        if cls._instance is not None:
            raise RuntimeError("Store already initialized!")

        cls._instance = cls(event_bus, settings)
        return cls._instance

    @classmethod
    def get(cls) -> 'Store':
        """Get the global store instance.

        Raises:
            RuntimeError: If store has not been initialized
        """
        if cls._instance is None:
            raise RuntimeError("Store not initialized! Call Store.initialize() first.")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the global instance. Used by tests."""
        cls._instance = None
