"""Tests for the replay entry point."""

import io
import json

import pytest
from rich.console import Console

from syncdev.client import main as cli
from syncdev.shared.core import events


@pytest.fixture
def records_file(tmp_path, progress_payload):
    records = [
        {"topic": events.TOPIC_PEERS_CHANGED,
         "payload": events.create_peers_changed_event([{"id": "a", "name": "Laptop", "status": "online", "paired": True}])},
        {"topic": events.TOPIC_SYNC_STATUS, "payload": events.create_sync_status_event("syncing", "Pushing")},
        {"topic": events.TOPIC_SYNC_PROGRESS, "payload": events.create_sync_progress_event(progress_payload)},
        {"topic": events.TOPIC_SYNC_EVENT,
         "payload": events.create_sync_event("push", "Pushed report.pdf", peer_name="Laptop", timestamp=0)},
        {"topic": events.TOPIC_CONFIG_CHANGED, "payload": {"port": 0}},
    ]
    path = tmp_path / "events.jsonl"
    lines = [json.dumps(record) for record in records]
    lines.insert(2, "")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestLoadRecords:

    def test_reads_records_and_skips_blank_lines(self, records_file):
        records = cli.load_records(records_file)

        assert len(records) == 5
        assert records[0][0] == events.TOPIC_PEERS_CHANGED
        assert records[3][1]["type"] == "push"

    def test_missing_payload_becomes_empty_mapping(self, tmp_path):
        path = tmp_path / "end.jsonl"
        path.write_text('{"topic": "sync.end"}\n', encoding="utf-8")

        assert cli.load_records(path) == [("sync.end", {})]

    def test_invalid_json_reports_line(self, tmp_path):
        path = tmp_path / "broken.jsonl"
        path.write_text('{"topic": "sync.end"}\n{oops\n', encoding="utf-8")

        with pytest.raises(ValueError, match=":2:"):
            cli.load_records(path)

    def test_record_without_topic(self, tmp_path):
        path = tmp_path / "notopic.jsonl"
        path.write_text('{"payload": {}}\n', encoding="utf-8")

        with pytest.raises(ValueError, match="topic"):
            cli.load_records(path)


class TestReplay:

    @pytest.mark.asyncio
    async def test_replay_builds_state(self, records_file):
        store = await cli.replay(cli.load_records(records_file))

        assert store.app.derived.status_summary.get() == "Syncing · 2.0 MB/s · 2:05 remaining"
        assert store.app.recent_events.get()[0].description == "Pushed report.pdf"
        assert store.sink.applied == 4
        assert store.sink.dropped == 1
        assert not store.sink.attached


class TestMain:

    @pytest.fixture(autouse=True)
    def quiet_logging(self, monkeypatch):
        monkeypatch.setattr(cli, "configure_logging", lambda config: None)

    def test_replay_command_renders_state(self, tmp_path, records_file):
        output = io.StringIO()
        console = Console(file=output, width=200, color_system=None)

        code = cli.main(["--config-dir", str(tmp_path), "replay", str(records_file)], console=console)

        text = output.getvalue()
        assert code == 0
        assert "2.0 MB/s" in text
        assert "2:05 remaining" in text
        assert "3 of 10 files" in text
        assert "Laptop" in text
        assert "Pushed report.pdf" in text

    def test_missing_file_fails(self, tmp_path):
        output = io.StringIO()
        console = Console(file=output, width=200, color_system=None)

        code = cli.main(["--config-dir", str(tmp_path), "replay", str(tmp_path / "nope.jsonl")], console=console)

        assert code == 1
        assert "Cannot read" in output.getvalue()
