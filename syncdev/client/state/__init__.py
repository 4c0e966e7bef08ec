"""Reactive client state for SyncDev.

Architecture:
- cells: state cells, derived nodes and the graph that propagates changes
- derived: formatters and the derived views of progress, status and peers
- modal: dialog open/close coordinator
- app_state: one cell per concern plus the UI intents that write them
- sink: backend event routing into the cells
- store: composition point and process-wide instance
"""

from .app_state import AppState
from .cells import Cell, DeprecatedAlias, Derived, StateGraph, Subscription
from .modal import ModalCoordinator
from .sink import BackendSink
from .store import Store

__all__ = [
    "AppState",
    "BackendSink",
    "Cell",
    "DeprecatedAlias",
    "Derived",
    "ModalCoordinator",
    "StateGraph",
    "Store",
    "Subscription",
]
