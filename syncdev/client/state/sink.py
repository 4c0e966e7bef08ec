"""Backend Update Sink.

Turns backend-pushed events into cell writes. Every event becomes exactly one
whole-value replace (or one log append) on exactly one cell. An event whose
payload does not validate is dropped and the target cell keeps its last good
value.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from pydantic import BaseModel

from syncdev.shared.core import events
from syncdev.shared.core.event_bus import EventBus, EventHandler, EventPayload
from syncdev.shared.core.exceptions import MalformedPayloadError
from syncdev.shared.domain.models import (
    AppConfig,
    FolderPair,
    PairingRequest,
    PairingSession,
    Peer,
    ProgressSnapshot,
    SyncEvent,
    SyncStatus,
    TransferProgress,
)

from .app_state import AppState

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _require_mapping(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise MalformedPayloadError(f"expected an object payload, got {type(payload).__name__}")
    return payload


def _field(payload: Dict[str, Any], *names: str) -> Any:
    for name in names:
        if name in payload:
            return payload[name]
    raise MalformedPayloadError(f"missing '{names[0]}'")


def _parse_list(model: type[M], items: Any, label: str) -> Tuple[M, ...]:
    if not isinstance(items, (list, tuple)):
        raise MalformedPayloadError(f"'{label}' must be a list")
    parsed = tuple(model.model_validate(item) for item in items)
    _ensure_unique((getattr(item, "id") for item in parsed), label)
    return parsed


def _ensure_unique(ids: Iterable[str], label: str) -> None:
    seen = set()
    for item_id in ids:
        if item_id in seen:
            raise MalformedPayloadError(f"duplicate id '{item_id}' in '{label}'")
        seen.add(item_id)


class BackendSink:
    """Routes backend events to the cells of an :class:`AppState`.

    Use :meth:`apply` to feed events directly, or :meth:`attach` to receive
    them from an :class:`EventBus`.
    """

    def __init__(self, state: AppState, event_bus: Optional[EventBus] = None) -> None:
        self.state = state
        self.bus = event_bus
        self.applied = 0
        self.dropped = 0
        self._routes: Dict[str, Callable[[EventPayload], None]] = {
            events.TOPIC_PEERS_CHANGED: self._apply_peers,
            events.TOPIC_FOLDERS_CHANGED: self._apply_folder_pairs,
            events.TOPIC_SYNC_STATUS: self._apply_status,
            events.TOPIC_SYNC_PROGRESS: self._apply_progress,
            events.TOPIC_SYNC_FILE_PROGRESS: self._apply_file_progress,
            events.TOPIC_SYNC_START: self._clear_progress,
            events.TOPIC_SYNC_END: self._clear_progress,
            events.TOPIC_SYNC_EVENT: self._apply_sync_event,
            events.TOPIC_CONFIG_CHANGED: self._apply_config,
            events.TOPIC_PAIRING_REQUEST: self._apply_pairing_request,
        }
        self._handlers: Dict[str, EventHandler] = {}

    @property
    def topics(self) -> List[str]:
        return list(self._routes)

    @property
    def attached(self) -> bool:
        return bool(self._handlers)

    def apply(self, topic: str, payload: EventPayload) -> bool:
        """Apply one backend event.

        Returns:
            True if a cell was written, False if the event was ignored or dropped
        """
        route = self._routes.get(topic)
        if route is None:
            logger.debug(f"Ignoring event for unrouted topic '{topic}'")
            return False
        try:
            route(payload)
        except ValueError as exc:
            # pydantic.ValidationError is a ValueError too
            self.dropped += 1
            logger.warning(f"Dropped malformed '{topic}' event: {exc}")
            return False
        self.applied += 1
        logger.debug(f"Applied '{topic}' event")
        return True

    async def attach(self) -> None:
        """Subscribe to every routed topic on the event bus."""
        if self.bus is None:
            raise RuntimeError("BackendSink has no event bus to attach to")
        if self._handlers:
            return
        for topic in self._routes:
            handler = self._bus_handler(topic)
            self._handlers[topic] = handler
            await self.bus.subscribe(topic, handler)
        logger.debug(f"Backend sink attached to {len(self._handlers)} topics")

    async def detach(self) -> None:
        if self.bus is None:
            return
        handlers, self._handlers = self._handlers, {}
        for topic, handler in handlers.items():
            await self.bus.unsubscribe(topic, handler)

    def _bus_handler(self, topic: str) -> EventHandler:
        async def handle(payload: EventPayload) -> None:
            self.apply(topic, payload)

        handle.__name__ = f"apply_{topic.replace('.', '_')}"
        return handle

    # --- Routes ---

    def _apply_peers(self, payload: EventPayload) -> None:
        items = _field(_require_mapping(payload), "peers")
        self.state.peers.set(_parse_list(Peer, items, "peers"))

    def _apply_folder_pairs(self, payload: EventPayload) -> None:
        items = _field(_require_mapping(payload), "folder_pairs", "folderPairs")
        self.state.folder_pairs.set(_parse_list(FolderPair, items, "folder_pairs"))

    def _apply_status(self, payload: EventPayload) -> None:
        self.state.sync_status.set(SyncStatus.model_validate(_require_mapping(payload)))

    def _apply_progress(self, payload: EventPayload) -> None:
        raw = _field(_require_mapping(payload), "progress")
        self.state.progress.set(None if raw is None else ProgressSnapshot.model_validate(raw))

    def _apply_file_progress(self, payload: EventPayload) -> None:
        raw = _field(_require_mapping(payload), "progress")
        self.state.file_progress.set(None if raw is None else TransferProgress.model_validate(raw))

    def _clear_progress(self, payload: EventPayload) -> None:
        self.state.progress.set(None)

    def _apply_sync_event(self, payload: EventPayload) -> None:
        self.state.append_event(SyncEvent.model_validate(_require_mapping(payload)))

    def _apply_config(self, payload: EventPayload) -> None:
        self.state.config.set(AppConfig.model_validate(_require_mapping(payload)))

    def _apply_pairing_request(self, payload: EventPayload) -> None:
        request = PairingRequest.model_validate(_require_mapping(payload))
        self.state.pairing.set(
            PairingSession(code=request.code, is_pairing=True, target_peer=request.from_peer_id)
        )
