from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeAlias

EventPayload: TypeAlias = Dict[str, Any]
EventHandler: TypeAlias = Callable[[EventPayload], Awaitable[None]]


class EventBus:
    """Push channel between the sync backend and the client state layer.

    Each ``publish`` schedules one delivery task that runs the topic's
    handlers one after another. Deliveries are chained, so every handler
    observes events in the order they were published.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[EventHandler]] = defaultdict(list)
        # Lazy initialization to avoid event loop binding issues
        self._lock: Optional[asyncio.Lock] = None
        self._loop_id: Optional[int] = None
        self._logger = logging.getLogger(__name__)
        self._pending_tasks: set[asyncio.Task] = set()
        self._tail: Optional[asyncio.Task] = None

    def _ensure_lock(self) -> asyncio.Lock:
        """Get or create lock for current event loop."""
        try:
            loop_id = id(asyncio.get_running_loop())
            if self._loop_id is not None and self._loop_id != loop_id:
                self._lock = None
                self._tail = None
            if self._lock is None:
                self._lock = asyncio.Lock()
                self._loop_id = loop_id
        except RuntimeError:
            if self._lock is None:
                self._lock = asyncio.Lock()
        return self._lock

    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        """Register an async handler for a topic."""
        async with self._ensure_lock():
            if handler not in self._subscribers[topic]:
                self._subscribers[topic].append(handler)

    async def unsubscribe(self, topic: str, handler: EventHandler) -> None:
        """Remove a handler from a topic."""
        async with self._ensure_lock():
            if handler in self._subscribers.get(topic, []):
                self._subscribers[topic].remove(handler)

    def topics(self) -> List[str]:
        return [topic for topic, handlers in self._subscribers.items() if handlers]

    async def publish(self, topic: str, payload: EventPayload) -> None:
        """Publish an event to all subscribers of ``topic``."""
        async with self._ensure_lock():
            handlers = list(self._subscribers.get(topic, []))

        if not handlers:
            self._logger.debug(f"No subscribers for topic '{topic}'")
            return

        self._logger.debug(f"Publishing to topic '{topic}' with {len(handlers)} handler(s)")
        task = asyncio.create_task(self._deliver(topic, handlers, payload, self._tail))
        self._tail = task
        self._pending_tasks.add(task)
        task.add_done_callback(self._pending_tasks.discard)

    async def wait_until_idle(self, timeout: float = 60.0) -> bool:
        """Wait for all pending deliveries to complete.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            True if all tasks completed, False if timeout reached
        """
        if not self._pending_tasks:
            return True

        loop = asyncio.get_running_loop()
        start_time = loop.time()
        while self._pending_tasks:
            remaining = timeout - (loop.time() - start_time)
            if remaining <= 0:
                self._logger.warning(
                    f"EventBus: Timeout reached while waiting for {len(self._pending_tasks)} tasks"
                )
                return False
            # Deliveries may publish further events, so loop until nothing is left
            await asyncio.wait(list(self._pending_tasks), timeout=remaining)
        return True

    async def _deliver(
        self,
        topic: str,
        handlers: List[EventHandler],
        payload: EventPayload,
        previous: Optional[asyncio.Task],
    ) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        for handler in handlers:
            await self._safe_dispatch(topic, handler, payload)
        if self._tail is asyncio.current_task():
            self._tail = None

    async def _safe_dispatch(
        self,
        topic: str,
        handler: EventHandler,
        payload: EventPayload,
    ) -> None:
        """Dispatch wrapper to keep one handler failure from stopping the bus."""
        handler_name = getattr(handler, "__name__", str(handler))
        try:
            await handler(payload)
        except Exception as exc:
            self._logger.exception(
                f"EventBus handler error in '{handler_name}' for topic '{topic}'",
                exc_info=exc,
            )

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._subscribers.clear()
