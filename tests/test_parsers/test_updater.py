"""Tests for the periodic update cycle."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from src.parsers.birdeye.client import BirdeyeApiError, BirdeyeClient
from src.parsers.birdeye.models import BirdeyeTokenOverview
from src.parsers.helius.client import HeliusClient
from src.parsers.helius.models import HeliusSignature
from src.parsers.ledger import BalanceAccumulator
from src.parsers.updater import MetricsUpdater

WALLET = "Bqx5ycNhbEbYtVrpA4UKuQiFZuyBEenTZJSdFz1Mb1bs"
MINT = "pumpCmXqMfrsAkQ5r49WcJnRayYRqmXz6ae8H7H9Dfn"
TOKEN = "8rsZxFLwy8oxV5Tea2zbekNeZR4iitoNR44mV4nDKHx1"


@pytest.fixture
def birdeye() -> AsyncMock:
    client = AsyncMock(spec=BirdeyeClient)
    client.get_token_overview.return_value = BirdeyeTokenOverview(marketCap=2500.0, v24hUSD=800.0)
    return client


@pytest.fixture
def updater(tmp_path, helius, ledger, event_log, birdeye) -> MetricsUpdater:
    accumulator = BalanceAccumulator(helius, ledger, event_log, wallet=WALLET, mint=MINT)
    return MetricsUpdater(
        ledger,
        accumulator,
        event_log,
        birdeye,
        None,
        token_address=TOKEN,
        cache_file=tmp_path / "cache.json",
    )


@pytest.mark.asyncio
async def test_cycle_updates_snapshot_and_persists(updater, helius, ledger, event_log, make_tx, tmp_path) -> None:
    helius.get_signatures_for_address.return_value = [HeliusSignature(signature="s1")]
    helius.get_transaction.return_value = make_tx(post=[(1, MINT, WALLET, 20.0)])

    assert await updater.run_once() is True

    snap = ledger.snapshot()
    assert snap.market_cap_usd == 2500.0
    assert snap.volume_24h_usd == 800.0
    assert snap.total_tokens_credited == 1020.0
    assert snap.total_value_usd == pytest.approx(1020.0 * 0.004)
    assert snap.last_updated_at_ms > 0

    data = json.loads((tmp_path / "cache.json").read_text(encoding="utf-8"))
    assert data["totalPumpBought"] == 1020.0
    assert data["seenSignatures"] == ["s1"]

    newest = event_log.raw_entries()[0].msg
    assert newest.startswith("[UPDATE] Mcap $2500.00 | Vol24h $800.00")
    assert "Dev $PUMP 1020.000000" in newest


@pytest.mark.asyncio
async def test_cycle_error_logged_not_raised(updater, helius, ledger, event_log, tmp_path) -> None:
    helius.get_signatures_for_address.return_value = []
    updater._cache_file = tmp_path / "missing-dir" / "cache.json"

    assert await updater.run_once() is False

    assert updater.last_error is not None
    assert event_log.raw_entries()[0].msg.startswith("[ERROR]")
    assert updater.cycle_count == 1


@pytest.mark.asyncio
async def test_market_failure_zeroes_fields_but_cycle_continues(updater, birdeye, helius, ledger, event_log) -> None:
    ledger.update_market(1.0, 1.0)
    birdeye.get_token_overview.side_effect = BirdeyeApiError("HTTP 500: /defi/token_overview")
    helius.get_signatures_for_address.return_value = []

    assert await updater.run_once() is True

    snap = ledger.snapshot()
    assert (snap.market_cap_usd, snap.volume_24h_usd) == (0.0, 0.0)
    msgs = [e.msg for e in event_log.raw_entries()]
    assert any(m.startswith("[BIRDEYE]") for m in msgs)


@pytest.mark.asyncio
async def test_malformed_signature_list_still_refreshes_market(ledger, event_log, birdeye, tmp_path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": [
            {"signature": "s1", "slot": "not-a-slot", "blockTime": None, "err": None},
        ]})

    helius = HeliusClient("https://rpc.test/", max_rps=0)
    helius._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    updater = MetricsUpdater(
        ledger,
        BalanceAccumulator(helius, ledger, event_log, wallet=WALLET, mint=MINT),
        event_log,
        birdeye,
        None,
        token_address=TOKEN,
        cache_file=tmp_path / "cache.json",
    )

    assert await updater.run_once() is True
    await helius.close()

    snap = ledger.snapshot()
    assert snap.market_cap_usd == 2500.0
    assert snap.total_tokens_credited == 1000.0
    assert snap.last_updated_at_ms > 0
    assert json.loads((tmp_path / "cache.json").read_text(encoding="utf-8"))["marketCap"] == 2500.0

    msgs = [e.msg for e in event_log.raw_entries()]
    assert any(m.startswith("[HELIUS RPC ERROR]") for m in msgs)
    assert not any(m.startswith("[ERROR]") for m in msgs)
