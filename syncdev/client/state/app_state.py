"""Client Application State.

One reactive cell per concern, the derived views computed from them, and the
UI intents that are allowed to write to them.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from syncdev.shared.core.configuration import StateConfig
from syncdev.shared.core.exceptions import ConfigValidationError, InvalidIntentError
from syncdev.shared.domain.models import (
    CLOSED_MODAL,
    IDLE_PAIRING,
    AppConfig,
    FolderPair,
    ModalState,
    PairingSession,
    Peer,
    ProgressSnapshot,
    SyncEvent,
    SyncStatus,
    Tab,
    TransferProgress,
)

from .cells import Cell, DeprecatedAlias, StateGraph
from .derived import SyncDerivations
from .modal import ModalCoordinator

logger = logging.getLogger(__name__)


def prepend_bounded(events: Tuple[SyncEvent, ...], event: SyncEvent, capacity: int) -> Tuple[SyncEvent, ...]:
    """Newest-first log with the oldest entries dropped beyond ``capacity``."""
    return ((event,) + events)[:capacity]


class AppState:
    """Reactive state of the SyncDev client.

    Cells are public for reading and subscribing. Views must not write to
    them; writes come from the backend sink or from the intent methods below.

    Attributes:
        graph: The dependency graph owning every cell and derived node
        derived: Derived views (formatted speed, ETA, file counts...)
        modal: Coordinator for the dialog state
    """

    def __init__(self, settings: Optional[StateConfig] = None) -> None:
        self.settings = settings or StateConfig()
        self.graph = StateGraph("syncdev")

        # Navigation
        self.current_tab: Cell[Tab] = self.graph.cell(Tab(self.settings.default_tab), "current_tab")

        # Backend-owned data
        self.peers: Cell[Tuple[Peer, ...]] = self.graph.cell((), "peers")
        self.folder_pairs: Cell[Tuple[FolderPair, ...]] = self.graph.cell((), "folder_pairs")
        self.sync_status: Cell[SyncStatus] = self.graph.cell(SyncStatus(), "sync_status")
        self.progress: Cell[Optional[ProgressSnapshot]] = self.graph.cell(None, "progress")
        self.file_progress: Cell[Optional[TransferProgress]] = self.graph.cell(None, "file_progress")
        self.recent_events: Cell[Tuple[SyncEvent, ...]] = self.graph.cell((), "recent_events")
        self.config: Cell[AppConfig] = self.graph.cell(AppConfig(), "config")

        # Transient UI state
        self.pairing: Cell[PairingSession] = self.graph.cell(IDLE_PAIRING, "pairing")
        self._modal: Cell[ModalState] = self.graph.cell(CLOSED_MODAL, "modal")
        self.modal = ModalCoordinator(self._modal)

        self.derived = SyncDerivations(self.graph, self.progress, self.sync_status, self.peers)

        # Older views subscribe to the aggregate progress under this name
        self.transfer_progress: DeprecatedAlias[Optional[ProgressSnapshot]] = DeprecatedAlias(
            self.progress, "transfer_progress"
        )

    @property
    def event_log_capacity(self) -> int:
        return self.settings.event_log_capacity

    # --- Public Actions ---

    def select_tab(self, tab: Union[Tab, str]) -> None:
        """Change the selected navigation tab.

        Raises:
            InvalidIntentError: If ``tab`` is not a known tab
        """
        try:
            selected = Tab(tab)
        except ValueError as exc:
            raise InvalidIntentError(f"unknown tab '{tab}'") from exc
        self.current_tab.set(selected)

    def begin_pairing(self, code: str, target_peer: Optional[str] = None) -> PairingSession:
        """Start showing a pairing handshake.

        Args:
            code: The short pairing code, shown to or typed by the user
            target_peer: Device id of the peer being paired, when known

        Raises:
            InvalidIntentError: If ``code`` is empty
        """
        if not code or not code.strip():
            raise InvalidIntentError("pairing code must not be empty")
        session = PairingSession(code=code.strip(), is_pairing=True, target_peer=target_peer)
        self.pairing.set(session)
        return session

    def clear_pairing(self) -> None:
        """Reset code, flag and target together."""
        self.pairing.set(IDLE_PAIRING)

    def submit_config(self, draft: Union[AppConfig, Mapping[str, Any]]) -> AppConfig:
        """Validate a complete configuration draft and make it current.

        Raises:
            ConfigValidationError: If the draft is invalid; the config cell
                is left untouched
        """
        config = validate_config_draft(draft)
        self.config.set(config)
        return config

    def edit_config(self, **changes: Any) -> AppConfig:
        """Apply field changes on top of the current config, validated as a whole."""
        draft = self.config.get().model_dump()
        draft.update(changes)
        return self.submit_config(draft)

    def show_modal(self, kind: str, payload: Any = None) -> None:
        self.modal.open(kind, payload)

    def close_modal(self) -> None:
        self.modal.close()

    def append_event(self, event: SyncEvent) -> None:
        """Add an event to the front of the recent-events log."""
        capacity = self.event_log_capacity
        self.recent_events.update(lambda events: prepend_bounded(events, event, capacity))

    def clear_events(self) -> None:
        self.recent_events.set(())

    def reset(self) -> None:
        """Return every backend-owned and transient cell to its initial value."""
        self.peers.set(())
        self.folder_pairs.set(())
        self.sync_status.set(SyncStatus())
        self.progress.set(None)
        self.file_progress.set(None)
        self.recent_events.set(())
        self.pairing.set(IDLE_PAIRING)
        self.modal.close()


def validate_config_draft(draft: Union[AppConfig, Mapping[str, Any]]) -> AppConfig:
    """Turn a config form draft into an :class:`AppConfig` or raise."""
    try:
        if isinstance(draft, AppConfig):
            # Re-validate: drafts may have been built with model_construct
            return AppConfig.model_validate(draft.model_dump())
        return AppConfig.model_validate(dict(draft))
    except ValidationError as exc:
        logger.info(f"Rejected configuration draft: {exc.error_count()} invalid field(s)")
        raise ConfigValidationError(
            f"Invalid configuration: {exc.error_count()} invalid field(s)",
            exc.errors(include_url=False),
        ) from exc
