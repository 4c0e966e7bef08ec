"""Tests for the async event bus."""

import asyncio
import logging

import pytest

from syncdev.shared.core.event_bus import EventBus


class TestEventBus:

    @pytest.mark.asyncio
    async def test_handlers_receive_events_in_publish_order(self):
        bus = EventBus()
        received = []

        async def slow_first(payload):
            # The first event takes longest; later ones must still wait for it
            await asyncio.sleep(0.05 if payload["n"] == 1 else 0)
            received.append(payload["n"])

        await bus.subscribe("sync.progress", slow_first)
        for n in (1, 2, 3):
            await bus.publish("sync.progress", {"n": n})

        assert await bus.wait_until_idle(timeout=5)
        assert received == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_order_holds_across_topics(self):
        bus = EventBus()
        received = []

        async def on_progress(payload):
            await asyncio.sleep(0.02)
            received.append("progress")

        async def on_end(payload):
            received.append("end")

        await bus.subscribe("sync.progress", on_progress)
        await bus.subscribe("sync.end", on_end)
        await bus.publish("sync.progress", {})
        await bus.publish("sync.end", {})
        await bus.wait_until_idle(timeout=5)

        assert received == ["progress", "end"]

    @pytest.mark.asyncio
    async def test_publish_without_subscribers(self):
        bus = EventBus()
        await bus.publish("peers.changed", {"peers": []})
        assert await bus.wait_until_idle()

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_the_bus(self, caplog):
        bus = EventBus()
        received = []

        async def broken(payload):
            raise RuntimeError("boom")

        async def healthy(payload):
            received.append(payload)

        await bus.subscribe("sync.status", broken)
        await bus.subscribe("sync.status", healthy)

        with caplog.at_level(logging.ERROR):
            await bus.publish("sync.status", {"status": "idle"})
            await bus.wait_until_idle(timeout=5)

        assert received == [{"status": "idle"}]
        assert "EventBus handler error in 'broken'" in caplog.text

    @pytest.mark.asyncio
    async def test_subscribe_is_deduplicated_and_unsubscribe_works(self):
        bus = EventBus()
        received = []

        async def handler(payload):
            received.append(payload)

        await bus.subscribe("config.changed", handler)
        await bus.subscribe("config.changed", handler)
        await bus.publish("config.changed", {"port": 1})
        await bus.wait_until_idle(timeout=5)
        await bus.unsubscribe("config.changed", handler)
        await bus.publish("config.changed", {"port": 2})
        await bus.wait_until_idle(timeout=5)

        assert received == [{"port": 1}]
        assert bus.topics() == []

    @pytest.mark.asyncio
    async def test_wait_until_idle_times_out(self):
        bus = EventBus()
        release = asyncio.Event()

        async def blocked(payload):
            await release.wait()

        await bus.subscribe("sync.start", blocked)
        await bus.publish("sync.start", {})

        assert await bus.wait_until_idle(timeout=0.05) is False
        release.set()
        assert await bus.wait_until_idle(timeout=5) is True
