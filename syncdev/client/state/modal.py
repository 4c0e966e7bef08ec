"""Modal/dialog coordinator.

The only writer of the modal cell. Opening and closing always replace kind and
payload together, so a payload can never outlive the dialog it belongs to.
"""

from __future__ import annotations

from typing import Any, Optional

from syncdev.shared.core.exceptions import InvalidIntentError
from syncdev.shared.domain.models import CLOSED_MODAL, ModalState

from .cells import Cell, Subscriber, Subscription

MODAL_PAIRING = "pairing"
MODAL_ADD_FOLDER = "add-folder"
MODAL_CONFIRM_DELETE = "confirm-delete"
MODAL_CONFIRM_UNPAIR = "confirm-unpair"
MODAL_SYNC_PREVIEW = "sync-preview"


class ModalCoordinator:
    def __init__(self, cell: Cell[ModalState]) -> None:
        self._cell = cell

    def open(self, kind: str, payload: Any = None) -> None:
        """Show dialog ``kind``, replacing whatever dialog is open."""
        if not kind:
            raise InvalidIntentError("modal kind must be a non-empty string")
        self._cell.set(ModalState(kind=kind, payload=payload))

    def close(self) -> None:
        self._cell.set(CLOSED_MODAL)

    @property
    def state(self) -> ModalState:
        return self._cell.get()

    @property
    def is_open(self) -> bool:
        return self._cell.get().show

    @property
    def kind(self) -> Optional[str]:
        return self._cell.get().kind

    def subscribe(self, fn: Subscriber[ModalState]) -> Subscription:
        return self._cell.subscribe(fn)
