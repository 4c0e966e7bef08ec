"""SyncDev client state - replay entry point.

Feeds a recorded stream of backend events (JSON Lines, one
``{"topic": ..., "payload": ...}`` object per line) through a fresh store and
prints the resulting state. Useful to reproduce what a view would have shown.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from syncdev.client.state import Store
from syncdev.client.state.derived import format_bytes
from syncdev.shared.core.configuration import ConfigManager, StateConfig, ValidationLevel
from syncdev.shared.core.event_bus import EventBus
from syncdev.shared.core.logging_config import configure_logging

logger = logging.getLogger(__name__)

Record = Tuple[str, Dict[str, Any]]


def load_records(path: Path) -> List[Record]:
    """Read ``(topic, payload)`` pairs from a JSON Lines file.

    Raises:
        OSError: If the file cannot be read
        ValueError: If a line is not a valid record
    """
    records: List[Record] = []
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{path}:{line_no}: invalid JSON ({exc.msg})") from exc
            if not isinstance(record, dict) or not isinstance(record.get("topic"), str):
                raise ValueError(f"{path}:{line_no}: expected an object with a 'topic' string")
            payload = record.get("payload")
            records.append((record["topic"], payload if payload is not None else {}))
    return records


async def replay(records: Sequence[Record], settings: Optional[StateConfig] = None) -> Store:
    """Publish ``records`` on a new bus wired to a new store and wait for delivery."""
    bus = EventBus()
    store = Store(bus, settings)
    await store.start()
    for topic, payload in records:
        await bus.publish(topic, payload)
    await bus.wait_until_idle()
    await store.stop()
    logger.info(
        f"Replayed {len(records)} event(s): {store.sink.applied} applied, {store.sink.dropped} dropped"
    )
    return store


def render(store: Store, console: Console) -> None:
    app = store.app
    derived = app.derived

    summary = Table(title="Sync", show_header=False)
    summary.add_column("Field", style="bold")
    summary.add_column("Value")
    status = app.sync_status.get()
    summary.add_row("Status", f"{status.status.value} {status.action}".strip())
    summary.add_row("Summary", derived.status_summary.get())
    summary.add_row("Progress", f"{derived.overall_percentage.get():.0f}%")
    summary.add_row("Files", derived.file_count_progress.get())
    summary.add_row("Transferred", derived.transferred_bytes.get())
    summary.add_row("Speed", derived.formatted_speed.get())
    summary.add_row("ETA", derived.formatted_eta.get())
    summary.add_row("Tab", app.current_tab.get().value)
    summary.add_row("Modal", app.modal.kind or "")
    pairing = app.pairing.get()
    summary.add_row("Pairing", f"{pairing.code} → {pairing.target_peer or '?'}" if pairing.is_pairing else "")
    console.print(summary)

    peers = Table(title=f"Peers ({derived.online_peer_count.get()} online)")
    for column in ("Name", "Id", "Status", "Paired"):
        peers.add_column(column)
    for peer in app.peers.get():
        peers.add_row(peer.name, peer.id, peer.status.value, "yes" if peer.paired else "no")
    console.print(peers)

    active = derived.active_files.get()
    if active:
        files = Table(title="Active files")
        files.add_column("Path")
        files.add_column("Size", justify="right")
        files.add_column("%", justify="right")
        for item in active:
            files.add_row(item.path, format_bytes(item.size), f"{item.percentage:.0f}")
        console.print(files)

    recent = Table(title="Recent events")
    for column in ("Time", "Type", "Peer", "Description"):
        recent.add_column(column)
    for event in app.recent_events.get():
        recent.add_row(event.time.strftime("%H:%M:%S"), event.type, event.peer_name, event.description)
    console.print(recent)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="syncdev-state", description="SyncDev client state tools")
    parser.add_argument("--config-dir", type=Path, default=None, help="Directory holding defaults.yaml/user.yaml")
    commands = parser.add_subparsers(dest="command", required=True)
    replay_cmd = commands.add_parser("replay", help="Replay recorded backend events and show the resulting state")
    replay_cmd.add_argument("file", type=Path, help="JSON Lines file of {topic, payload} records")
    return parser


def main(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    console = console or Console()

    config = ConfigManager(args.config_dir).get_config(ValidationLevel.LENIENT)
    configure_logging(config.logging)

    try:
        records = load_records(args.file)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Cannot read {escape(str(args.file))}: {escape(str(exc))}[/red]")
        return 1

    store = asyncio.run(replay(records, config.state))
    render(store, console)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
