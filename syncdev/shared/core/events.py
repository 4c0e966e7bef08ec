"""Canonical backend event topics and payload factories for SyncDev."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from .event_bus import EventPayload

# Peer discovery and pairing
TOPIC_PEERS_CHANGED = "peers.changed"
TOPIC_PAIRING_REQUEST = "pairing.request"

# Folder pair configuration
TOPIC_FOLDERS_CHANGED = "folders.changed"

# Sync engine
TOPIC_SYNC_STATUS = "sync.status"
TOPIC_SYNC_PROGRESS = "sync.progress"
TOPIC_SYNC_FILE_PROGRESS = "sync.file_progress"  # Legacy per-file progress
TOPIC_SYNC_START = "sync.start"
TOPIC_SYNC_END = "sync.end"
TOPIC_SYNC_EVENT = "sync.event"

# Application configuration
TOPIC_CONFIG_CHANGED = "config.changed"

ALL_TOPICS = (
    TOPIC_PEERS_CHANGED,
    TOPIC_PAIRING_REQUEST,
    TOPIC_FOLDERS_CHANGED,
    TOPIC_SYNC_STATUS,
    TOPIC_SYNC_PROGRESS,
    TOPIC_SYNC_FILE_PROGRESS,
    TOPIC_SYNC_START,
    TOPIC_SYNC_END,
    TOPIC_SYNC_EVENT,
    TOPIC_CONFIG_CHANGED,
)


def create_peers_changed_event(peers: List[Dict[str, Any]]) -> EventPayload:
    """Create a peer list event (the complete list, never a delta)."""
    return {"peers": list(peers)}


def create_folders_changed_event(folder_pairs: List[Dict[str, Any]]) -> EventPayload:
    """Create a folder pair list event."""
    return {"folder_pairs": list(folder_pairs)}


def create_sync_status_event(status: str, action: str = "") -> EventPayload:
    """Create a sync status event."""
    return {"status": status, "action": action}


def create_sync_progress_event(progress: Optional[Dict[str, Any]]) -> EventPayload:
    """Create an aggregate progress event.

    Args:
        progress: Complete progress snapshot, or None when no sync is running
    """
    return {"progress": progress}


def create_file_progress_event(progress: Optional[Dict[str, Any]]) -> EventPayload:
    """Create a legacy per-file progress event."""
    return {"progress": progress}


def create_sync_event(
    event_type: str,
    description: str,
    folder_pair: str = "",
    file_path: str = "",
    peer_name: str = "",
    timestamp: float | None = None,
) -> EventPayload:
    """Create a sync activity event (file pushed, pulled, deleted, error...)."""
    return {
        "time": timestamp if timestamp is not None else time.time(),
        "type": event_type,
        "folderPair": folder_pair,
        "filePath": file_path,
        "peerName": peer_name,
        "description": description,
    }


def create_config_changed_event(config: Dict[str, Any]) -> EventPayload:
    """Create a config changed event carrying the complete configuration."""
    return dict(config)


def create_pairing_request_event(
    from_peer_id: str,
    from_peer_name: str,
    code: str,
    timestamp: int | None = None,
) -> EventPayload:
    """Create an incoming pairing request event."""
    return {
        "fromPeerId": from_peer_id,
        "fromPeerName": from_peer_name,
        "code": code,
        "timestamp": timestamp if timestamp is not None else int(time.time()),
    }
