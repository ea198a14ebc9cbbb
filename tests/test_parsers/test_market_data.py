"""Tests for the Birdeye + DexScreener market snapshot."""

from unittest.mock import AsyncMock

import httpx
import pytest

from src.parsers.birdeye.client import BirdeyeApiError, BirdeyeClient
from src.parsers.birdeye.models import BirdeyeTokenOverview
from src.parsers.dexscreener.client import DexScreenerClient
from src.parsers.dexscreener.models import DexScreenerPair
from src.parsers.market_data import fetch_market_snapshot

TOKEN = "8rsZxFLwy8oxV5Tea2zbekNeZR4iitoNR44mV4nDKHx1"


@pytest.fixture
def birdeye() -> AsyncMock:
    return AsyncMock(spec=BirdeyeClient)


@pytest.fixture
def dexscreener() -> AsyncMock:
    return AsyncMock(spec=DexScreenerClient)


@pytest.mark.asyncio
async def test_birdeye_overview_used(birdeye, dexscreener) -> None:
    birdeye.get_token_overview.return_value = BirdeyeTokenOverview(
        marketCap=150000.0, v24hUSD=32000.0
    )

    snap = await fetch_market_snapshot(TOKEN, birdeye, dexscreener)

    assert snap.market_cap_usd == 150000.0
    assert snap.volume_24h_usd == 32000.0
    dexscreener.get_token_pairs.assert_not_awaited()


@pytest.mark.asyncio
async def test_snake_case_fields(birdeye) -> None:
    birdeye.get_token_overview.return_value = BirdeyeTokenOverview.model_validate(
        {"market_cap": 99.0, "volume24hUSD": 11.0}
    )
    snap = await fetch_market_snapshot(TOKEN, birdeye, None)
    assert (snap.market_cap_usd, snap.volume_24h_usd) == (99.0, 11.0)


@pytest.mark.asyncio
async def test_dexscreener_fallback_when_volume_missing(birdeye, dexscreener) -> None:
    birdeye.get_token_overview.return_value = BirdeyeTokenOverview(marketCap=500.0)
    dexscreener.get_token_pairs.return_value = [
        DexScreenerPair.model_validate({"volume": {"h24": 777.5}}),
        DexScreenerPair.model_validate({"volume": {"h24": 1.0}}),
    ]

    snap = await fetch_market_snapshot(TOKEN, birdeye, dexscreener)

    assert snap.market_cap_usd == 500.0
    assert snap.volume_24h_usd == 777.5
    dexscreener.get_token_pairs.assert_awaited_once_with(TOKEN)


@pytest.mark.asyncio
async def test_provider_failures_default_to_zero(birdeye, dexscreener) -> None:
    birdeye.get_token_overview.side_effect = BirdeyeApiError("HTTP 500")
    dexscreener.get_token_pairs.side_effect = httpx.ConnectError("down")
    errors: list[str] = []

    snap = await fetch_market_snapshot(TOKEN, birdeye, dexscreener, on_error=errors.append)

    assert (snap.market_cap_usd, snap.volume_24h_usd) == (0.0, 0.0)
    assert errors[0].startswith("[BIRDEYE]")
    assert errors[1].startswith("[DEXSCREENER]")


def test_pair_legacy_volume_field() -> None:
    pair = DexScreenerPair.model_validate({"volume24h": 12.0})
    assert pair.volume_24h_usd == 12.0


@pytest.mark.asyncio
async def test_birdeye_client_parses_overview() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/defi/token_overview"
        assert request.url.params["address"] == TOKEN
        assert request.headers["x-chain"] == "solana"
        return httpx.Response(200, json={"success": True, "data": {"marketCap": 10.0, "v24hUSD": 2.0}})

    client = BirdeyeClient("key", max_rps=0)
    client._client = httpx.AsyncClient(
        base_url="https://public-api.birdeye.so",
        transport=httpx.MockTransport(handler),
        headers={"x-chain": "solana"},
    )

    overview = await client.get_token_overview(TOKEN)
    await client.close()

    assert overview.market_cap_usd == 10.0
    assert overview.volume_24h_usd == 2.0


@pytest.mark.asyncio
async def test_birdeye_client_unsuccessful_payload_raises() -> None:
    client = BirdeyeClient("key", max_rps=0)
    client._client = httpx.AsyncClient(
        base_url="https://public-api.birdeye.so",
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"success": False, "message": "bad address"})
        ),
    )

    with pytest.raises(BirdeyeApiError, match="bad address"):
        await client.get_token_overview(TOKEN)
    await client.close()
