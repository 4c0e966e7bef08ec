"""Immutable domain entities reported by the sync backend.

Every entity is a frozen pydantic model. The backend speaks camelCase JSON
(``deviceId``, ``bytesPerSecond``); the models accept either that or the
snake_case field names, and ``model_dump(by_alias=True)`` writes camelCase back.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_PORT = 52525
DEFAULT_SYNC_INTERVAL_MINS = 5
MAX_ACTIVE_FILES = 10

DEFAULT_GLOBAL_EXCLUSIONS: Tuple[str, ...] = (
    ".DS_Store",
    ".git",
    ".svn",
    "node_modules",
    "*.tmp",
    "*.swp",
    "*~",
    ".Trash",
    "Thumbs.db",
)


class Entity(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
        allow_inf_nan=False,
    )


class Tab(str, Enum):
    """Top-level navigation tabs."""
    PEERS = "peers"
    FOLDERS = "folders"
    SYNC = "sync"
    SETTINGS = "settings"


class PeerStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    SYNCING = "syncing"
    PAIRING = "pairing"


class SyncState(str, Enum):
    """Engine-level sync status."""
    IDLE = "idle"
    SCANNING = "scanning"
    SYNCING = "syncing"
    ERROR = "error"
    PAUSED = "paused"


class Peer(Entity):
    """A remote device that can sync with this one."""

    id: str = Field(min_length=1)
    name: str = ""
    host: str = ""
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    version: str = ""
    status: PeerStatus = PeerStatus.OFFLINE
    paired: bool = False
    last_seen: Optional[datetime] = None
    last_sync_time: Optional[datetime] = None

    @property
    def is_online(self) -> bool:
        return self.status != PeerStatus.OFFLINE


class FolderPair(Entity):
    """A local folder bound to a folder on a remote peer."""

    id: str = Field(min_length=1)
    peer_id: str
    local_path: str
    remote_path: str
    enabled: bool = True
    exclusions: Tuple[str, ...] = ()
    last_sync_time: Optional[datetime] = None


class SyncStatus(Entity):
    status: SyncState = SyncState.IDLE
    action: str = ""


class FileProgress(Entity):
    """Progress of one file inside an aggregate snapshot."""

    path: str
    size: int = Field(default=0, ge=0)
    transferred: int = Field(default=0, ge=0)
    percentage: float = Field(default=0.0, ge=0, le=100)
    status: str = "active"  # "active", "pending", "complete"


class ProgressSnapshot(Entity):
    """Aggregate sync progress, always sent complete by the backend.

    The absence of a running sync is modelled as ``None`` in the progress
    cell, never as a snapshot full of zeros.
    """

    status: str = "idle"  # "idle", "syncing", "complete"
    total_files: int = Field(default=0, ge=0)
    completed_files: int = Field(default=0, ge=0)
    total_bytes: int = Field(default=0, ge=0)
    transferred_bytes: int = Field(default=0, ge=0)
    percentage: float = Field(default=0.0, ge=0, le=100)
    bytes_per_second: float = Field(default=0.0, ge=0)
    eta: int = -1  # seconds remaining, -1 when unknown
    active_files: Tuple[FileProgress, ...] = ()


class TransferProgress(Entity):
    """Legacy single-file transfer progress."""

    file_name: str
    total_bytes: int = Field(default=0, ge=0)
    transfer_bytes: int = Field(default=0, ge=0)
    percentage: float = Field(default=0.0, ge=0, le=100)
    bytes_per_second: int = Field(default=0, ge=0)


class SyncEvent(Entity):
    """An entry of the sync activity log."""

    time: datetime
    type: str = Field(min_length=1)  # "push", "pull", "delete", "error", ...
    folder_pair: str = ""
    file_path: str = ""
    peer_name: str = ""
    description: str = ""


class AppConfig(Entity):
    """Device identity, network settings and user preferences."""

    device_id: str = ""
    device_name: str = ""
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    sync_interval_mins: int = Field(default=DEFAULT_SYNC_INTERVAL_MINS, gt=0)
    global_exclusions: Tuple[str, ...] = DEFAULT_GLOBAL_EXCLUSIONS
    auto_sync: bool = True
    start_on_login: bool = False
    show_notifications: bool = True


class PairingSession(Entity):
    """An in-progress pairing handshake."""

    code: str = ""
    is_pairing: bool = False
    target_peer: Optional[str] = None

    @model_validator(mode="after")
    def _code_while_pairing(self) -> "PairingSession":
        if self.is_pairing and not self.code:
            raise ValueError("an active pairing session needs a code")
        return self


class PairingRequest(Entity):
    """A pairing request received from another device."""

    from_peer_id: str = Field(min_length=1)
    from_peer_name: str = ""
    code: str = Field(min_length=1)
    timestamp: int = 0


class ModalState(Entity):
    """Which dialog is open, and the data it was opened with."""

    kind: Optional[str] = None
    payload: Any = None

    @model_validator(mode="after")
    def _payload_needs_kind(self) -> "ModalState":
        if self.kind is None and self.payload is not None:
            raise ValueError("a closed modal cannot carry a payload")
        return self

    @property
    def show(self) -> bool:
        return self.kind is not None


IDLE_PAIRING = PairingSession()
CLOSED_MODAL = ModalState()
