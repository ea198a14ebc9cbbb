"""Market snapshot for the tracked token: Birdeye first, DexScreener for missing volume."""

from dataclasses import dataclass

import httpx
from loguru import logger
from pydantic import ValidationError

from src.parsers.birdeye.client import BirdeyeApiError, BirdeyeClient
from src.parsers.dexscreener.client import DexScreenerClient


@dataclass
class MarketSnapshot:
    market_cap_usd: float = 0.0
    volume_24h_usd: float = 0.0


async def fetch_market_snapshot(
    token_address: str,
    birdeye: BirdeyeClient,
    dexscreener: DexScreenerClient | None = None,
    *,
    on_error=None,
) -> MarketSnapshot:
    """Read market cap and 24h volume; a failing provider contributes zeros.

    ``on_error`` receives a human-readable message for each provider failure
    (the worker routes it into the dashboard event log).
    """
    snapshot = MarketSnapshot()

    try:
        overview = await birdeye.get_token_overview(token_address)
        snapshot.market_cap_usd = overview.market_cap_usd
        snapshot.volume_24h_usd = overview.volume_24h_usd
    except (BirdeyeApiError, ValidationError) as e:
        _report(on_error, f"[BIRDEYE] token_overview failed: {e}")

    if not snapshot.volume_24h_usd and dexscreener is not None:
        try:
            pairs = await dexscreener.get_token_pairs(token_address)
            if pairs:
                snapshot.volume_24h_usd = pairs[0].volume_24h_usd
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            _report(on_error, f"[DEXSCREENER] fallback failed: {e}")

    return snapshot


def _report(on_error, message: str) -> None:
    if on_error is not None:
        on_error(message)
    else:
        logger.warning(message)
