"""Domain entities shared by the SyncDev client."""

from .models import (
    AppConfig,
    FileProgress,
    FolderPair,
    ModalState,
    PairingRequest,
    PairingSession,
    Peer,
    PeerStatus,
    ProgressSnapshot,
    SyncEvent,
    SyncState,
    SyncStatus,
    Tab,
    TransferProgress,
)

__all__ = [
    "AppConfig",
    "FileProgress",
    "FolderPair",
    "ModalState",
    "PairingRequest",
    "PairingSession",
    "Peer",
    "PeerStatus",
    "ProgressSnapshot",
    "SyncEvent",
    "SyncState",
    "SyncStatus",
    "Tab",
    "TransferProgress",
]
