"""Tests for the modal/dialog coordinator."""

import pytest
from pydantic import ValidationError

from syncdev.client.state.modal import MODAL_ADD_FOLDER, MODAL_CONFIRM_DELETE, MODAL_PAIRING
from syncdev.shared.core.exceptions import InvalidIntentError
from syncdev.shared.domain.models import ModalState


class TestModalCoordinator:

    def test_starts_closed(self, state):
        assert not state.modal.is_open
        assert state.modal.kind is None
        assert state.modal.state == ModalState()

    def test_open_sets_kind_and_payload_together(self, state, recorder):
        rec = recorder()
        state.modal.subscribe(rec)

        state.modal.open(MODAL_CONFIRM_DELETE, {"id": 7})

        assert rec.values == [ModalState(), ModalState(kind="confirm-delete", payload={"id": 7})]
        for observed in rec.values:
            assert (observed.kind is None) == (observed.payload is None)
        assert state.modal.is_open

    def test_switching_dialogs_drops_previous_payload(self, state):
        state.modal.open(MODAL_PAIRING, {"code": "123456"})
        state.modal.open(MODAL_ADD_FOLDER)

        assert state.modal.state == ModalState(kind="add-folder", payload=None)

    def test_close_clears_kind_and_payload(self, state, recorder):
        state.modal.open(MODAL_CONFIRM_DELETE, {"id": 7})
        rec = recorder()
        state.modal.subscribe(rec)

        state.modal.close()

        assert rec.last.kind is None
        assert rec.last.payload is None
        assert not rec.last.show

    def test_close_when_closed_is_silent(self, state, recorder):
        rec = recorder()
        state.modal.subscribe(rec)

        state.close_modal()
        state.close_modal()

        assert len(rec.values) == 1

    def test_reopening_same_dialog_is_silent(self, state, recorder):
        state.show_modal(MODAL_CONFIRM_DELETE, {"id": 7})
        rec = recorder()
        state.modal.subscribe(rec)

        state.show_modal(MODAL_CONFIRM_DELETE, {"id": 7})

        assert len(rec.values) == 1

    def test_empty_kind_is_rejected(self, state):
        state.modal.open(MODAL_PAIRING)

        with pytest.raises(InvalidIntentError):
            state.modal.open("", {"id": 1})

        assert state.modal.kind == MODAL_PAIRING

    def test_closed_state_cannot_carry_payload(self):
        with pytest.raises(ValidationError):
            ModalState(kind=None, payload={"id": 7})
