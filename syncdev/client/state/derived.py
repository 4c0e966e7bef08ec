"""Derived, read-only views over the primitive state cells.

The formatters are plain functions of plain values. The ``*_of`` helpers lift
them over an optional :class:`ProgressSnapshot`; ``None`` (no sync running)
always maps to the empty/zero default, never to text built from missing
fields.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from syncdev.shared.domain.models import FileProgress, Peer, PeerStatus, ProgressSnapshot, SyncState, SyncStatus

from .cells import Cell, Derived, StateGraph

KIB = 1024
MIB = 1024 * 1024

TRAY_IDLE = "idle"
TRAY_SYNCING = "syncing"
TRAY_ERROR = "error"

_TRAY_LABELS = {
    TRAY_IDLE: "Idle",
    TRAY_SYNCING: "Syncing",
    TRAY_ERROR: "Sync error",
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_speed(bytes_per_second: Optional[float]) -> str:
    """``1536`` → ``"1.5 KB/s"``; empty for a missing, non-finite or non-positive rate."""
    if bytes_per_second is None or not math.isfinite(bytes_per_second) or bytes_per_second <= 0:
        return ""
    if bytes_per_second >= MIB:
        return f"{bytes_per_second / MIB:.1f} MB/s"
    if bytes_per_second >= KIB:
        return f"{bytes_per_second / KIB:.1f} KB/s"
    return f"{_round_half_up(bytes_per_second)} B/s"


def format_eta(seconds: Optional[float]) -> str:
    """``125`` → ``"2:05 remaining"``; empty for a missing or negative ETA."""
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return ""
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s remaining"
    if seconds < 3600:
        return f"{seconds // 60}:{seconds % 60:02d} remaining"
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m remaining"


def format_file_count(completed: int, total: int) -> str:
    if total <= 0:
        return ""
    return f"{completed} of {total} files"


def format_bytes(size: int) -> str:
    """Human readable byte count with binary units (``1536`` → ``"1.5 KB"``)."""
    if size < KIB:
        return f"{size} B"
    divisor, exponent = KIB, 0
    remaining = size // KIB
    while remaining >= KIB and exponent < 5:
        divisor *= KIB
        exponent += 1
        remaining //= KIB
    return f"{size / divisor:.1f} {'KMGTPE'[exponent]}B"


def format_duration(seconds: int) -> str:
    """Compact duration (``"45s"``, ``"2m 5s"``, ``"2h 1m"``)."""
    seconds = max(int(seconds), 0)
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


# --- Snapshot projections ---

def speed_of(progress: Optional[ProgressSnapshot]) -> str:
    return format_speed(progress.bytes_per_second) if progress is not None else ""


def eta_of(progress: Optional[ProgressSnapshot]) -> str:
    return format_eta(progress.eta) if progress is not None else ""


def file_count_of(progress: Optional[ProgressSnapshot]) -> str:
    if progress is None:
        return ""
    return format_file_count(progress.completed_files, progress.total_files)


def transferred_of(progress: Optional[ProgressSnapshot]) -> str:
    if progress is None or progress.total_bytes <= 0:
        return ""
    return f"{format_bytes(progress.transferred_bytes)} of {format_bytes(progress.total_bytes)}"


def is_syncing_of(progress: Optional[ProgressSnapshot]) -> bool:
    return progress is not None and progress.status == SyncState.SYNCING.value


def percentage_of(progress: Optional[ProgressSnapshot]) -> float:
    return progress.percentage if progress is not None else 0.0


def active_files_of(progress: Optional[ProgressSnapshot]) -> Tuple[FileProgress, ...]:
    return progress.active_files if progress is not None else ()


def tray_state_of(status: SyncStatus) -> str:
    if status.status in (SyncState.SCANNING, SyncState.SYNCING):
        return TRAY_SYNCING
    if status.status == SyncState.ERROR:
        return TRAY_ERROR
    return TRAY_IDLE


def summarize(tray_state: str, speed: str, eta: str) -> str:
    """One-line status, e.g. ``"Syncing · 2.0 MB/s · 2:05 remaining"``."""
    parts = [_TRAY_LABELS.get(tray_state, tray_state)]
    if tray_state == TRAY_SYNCING:
        parts.extend(part for part in (speed, eta) if part)
    return " · ".join(parts)


class SyncDerivations:
    """Derived nodes of the client state, declared over their upstream cells."""

    def __init__(
        self,
        graph: StateGraph,
        progress: Cell[Optional[ProgressSnapshot]],
        sync_status: Cell[SyncStatus],
        peers: Cell[Tuple[Peer, ...]],
    ) -> None:
        # Progress
        self.formatted_speed: Derived[str] = graph.derived(progress, speed_of, "formatted_speed")
        self.formatted_eta: Derived[str] = graph.derived(progress, eta_of, "formatted_eta")
        self.file_count_progress: Derived[str] = graph.derived(progress, file_count_of, "file_count_progress")
        self.transferred_bytes: Derived[str] = graph.derived(progress, transferred_of, "transferred_bytes")
        self.is_syncing: Derived[bool] = graph.derived(progress, is_syncing_of, "is_syncing")
        self.overall_percentage: Derived[float] = graph.derived(progress, percentage_of, "overall_percentage")
        self.active_files: Derived[Tuple[FileProgress, ...]] = graph.derived(
            progress, active_files_of, "active_files"
        )

        # Status
        self.tray_state: Derived[str] = graph.derived(sync_status, tray_state_of, "tray_state")
        self.status_summary: Derived[str] = graph.derived(
            (self.tray_state, self.formatted_speed, self.formatted_eta),
            summarize,
            "status_summary",
        )

        # Peers
        self.paired_peers: Derived[Tuple[Peer, ...]] = graph.derived(
            peers, lambda items: tuple(peer for peer in items if peer.paired), "paired_peers"
        )
        self.online_peer_count: Derived[int] = graph.derived(
            peers,
            lambda items: sum(1 for peer in items if peer.status != PeerStatus.OFFLINE),
            "online_peer_count",
        )
