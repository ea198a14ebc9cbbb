"""Tests for the dashboard event log ring buffer."""

import json

from src.parsers.event_log import EventLog, extract_signature

SIG = "5VERv8NMvzbJMEkV8xnrLkEaWRtSz9CosKDYjCJjBRnbJLgp8uirBgmQpjKhoR4tjF3ZpRzrFmBV6UjKdiSZkQUW"


def test_newest_first_and_capped(tmp_path) -> None:
    log = EventLog(tmp_path / "logs.json", max_entries=3)
    for i in range(5):
        log.append(f"message {i}")

    msgs = [e.msg for e in log.raw_entries()]
    assert msgs == ["message 4", "message 3", "message 2"]


def test_blank_and_ignored_messages_dropped(event_log) -> None:
    assert event_log.append("   ") is False
    assert event_log.append("[AIRDROP] batch failed: 429") is False
    assert event_log.append("Transaction was not confirmed in 60s") is False
    assert event_log.append("tx status unknown if it succeeded") is False
    assert len(event_log) == 0


def test_worker_tag_prefix(event_log) -> None:
    event_log.append("[SWAP] swapped 1 SOL", tag="worker")
    assert event_log.raw_entries()[0].msg == "[WORKER] [SWAP] swapped 1 SOL"


def test_persisted_after_every_append(tmp_path) -> None:
    path = tmp_path / "logs.json"
    log = EventLog(path, max_entries=10)
    log.append("first")
    log.append("second")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert [d["msg"] for d in data] == ["second", "first"]
    assert all(isinstance(d["time"], int) for d in data)

    restored = EventLog(path, max_entries=1)
    assert restored.load() == 1
    assert restored.raw_entries()[0].msg == "second"


def test_load_corrupt_file(tmp_path) -> None:
    path = tmp_path / "logs.json"
    path.write_text("{not json", encoding="utf-8")
    assert EventLog(path).load() == 0


class TestIngest:
    def test_allowed_tags(self, event_log) -> None:
        assert event_log.ingest("[CLAIM] claimed 3 SOL") is True
        assert event_log.ingest("  [AIRDROP] sent to 40 wallets  ") is True
        assert [e.msg for e in event_log.raw_entries()] == [
            "[WORKER] [AIRDROP] sent to 40 wallets",
            "[WORKER] [CLAIM] claimed 3 SOL",
        ]

    def test_rejected_lines(self, event_log) -> None:
        assert event_log.ingest("random chatter") is False
        assert event_log.ingest("") is False
        assert event_log.ingest("[AIRDROP] batch failed: timeout") is False
        assert len(event_log) == 0


class TestEntriesView:
    def test_strips_worker_prefix_and_links_tx(self, event_log) -> None:
        event_log.append(f"[SWAP] bought 100 $PUMP | TX: {SIG}", tag="worker")
        view = event_log.entries()[0]
        assert view["msg"] == f"[SWAP] bought 100 $PUMP | TX: {SIG}"
        assert view["signature"] == SIG
        assert view["link"] == f"https://solscan.io/tx/{SIG}"

    def test_no_signature(self, event_log) -> None:
        event_log.append("[SERVER] Started on port 4000")
        view = event_log.entries()[0]
        assert view["signature"] is None
        assert view["link"] is None

    def test_age_window_and_limit(self, event_log) -> None:
        for i in range(4):
            event_log.append(f"m{i}")
        newest = event_log.raw_entries()[0].time

        assert len(event_log.entries(limit=2)) == 2
        assert event_log.entries(max_age_sec=60, now=newest + 61_000) == []
        assert len(event_log.entries(max_age_sec=60, now=newest)) == 4


def test_extract_signature_variants() -> None:
    assert extract_signature(f"Tx: {SIG}") == SIG
    assert extract_signature(f"[AIRDROP] done | {SIG}") == SIG
    assert extract_signature(f"{SIG} confirmed") == SIG
    assert extract_signature("[UPDATE] Mcap $1.00") is None
