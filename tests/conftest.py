"""Shared fixtures for the SyncDev client state tests."""

import logging

import pytest

from syncdev.client.state import AppState, BackendSink, Store
from syncdev.shared.core.configuration import StateConfig


class Recorder:
    """Subscriber that remembers every value it was called with."""

    def __init__(self):
        self.values = []

    def __call__(self, value):
        self.values.append(value)

    @property
    def last(self):
        return self.values[-1]


@pytest.fixture
def recorder():
    return Recorder


@pytest.fixture
def state():
    return AppState()


@pytest.fixture
def small_state():
    return AppState(StateConfig(event_log_capacity=3))


@pytest.fixture
def sink(state):
    return BackendSink(state)


@pytest.fixture
def progress_payload():
    """A complete aggregate progress snapshot as the backend sends it."""
    return {
        "status": "syncing",
        "totalFiles": 10,
        "completedFiles": 3,
        "totalBytes": 5 * 1024 * 1024,
        "transferredBytes": 1536 * 1024,
        "percentage": 30.0,
        "bytesPerSecond": 2_097_152,
        "eta": 125,
        "activeFiles": [
            {"path": "docs/report.pdf", "size": 2048, "transferred": 1024, "percentage": 50.0, "status": "active"},
        ],
    }


@pytest.fixture(autouse=True)
def reset_store():
    yield
    Store.reset()


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
