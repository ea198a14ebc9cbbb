"""Birdeye Data Services API client.

Primary source for the tracked token's market cap and 24h volume.
Retry with fixed back-off for transient errors (timeout, 429, 5xx).
"""

import asyncio
from typing import Any

import httpx
from loguru import logger

from src.parsers.birdeye.models import BirdeyeTokenOverview
from src.parsers.rate_limiter import RateLimiter

BASE_URL = "https://public-api.birdeye.so"
MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]


class BirdeyeApiError(Exception):
    pass


class BirdeyeClient:
    """Async client for Birdeye Data Services API."""

    def __init__(
        self,
        api_key: str,
        rate_limiter: RateLimiter | None = None,
        max_rps: float = 1.0,
        timeout: float = 15.0,
    ) -> None:
        self._api_key = api_key
        self._rate_limiter = rate_limiter or RateLimiter(max_rps)
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            timeout=timeout,
            headers={
                "X-API-KEY": api_key,
                "Accept": "application/json",
                "x-chain": "solana",
            },
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Execute a rate-limited request with retry for transient errors."""
        last_exc: Exception | None = None

        for attempt in range(MAX_RETRIES + 1):
            await self._rate_limiter.acquire()
            try:
                resp = await self._client.request(method, path, **kwargs)

                if resp.status_code == 429:
                    if attempt < MAX_RETRIES:
                        delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                        logger.debug(f"[BIRDEYE] 429 rate limited, retry {attempt + 1} in {delay}s: {path}")
                        await asyncio.sleep(delay)
                        continue
                    raise BirdeyeApiError("Rate limited (429)")

                if resp.status_code == 401:
                    raise BirdeyeApiError("Invalid API key (401)")

                if resp.status_code >= 500:
                    if attempt < MAX_RETRIES:
                        delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                        logger.debug(f"[BIRDEYE] {resp.status_code} server error, retry {attempt + 1} in {delay}s: {path}")
                        await asyncio.sleep(delay)
                        continue

                resp.raise_for_status()
                data = resp.json()
                if not isinstance(data, dict):
                    raise BirdeyeApiError(f"Unexpected payload: {path}")
                if not data.get("success", True):
                    raise BirdeyeApiError(f"API error: {data.get('message', 'unknown')}")
                return data.get("data") or {}

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                last_exc = e
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[BIRDEYE] {type(e).__name__}, retry {attempt + 1} in {delay}s: {path}")
                    await asyncio.sleep(delay)
                    continue
                raise BirdeyeApiError(f"Request failed after {MAX_RETRIES + 1} attempts: {path}: {e}") from e
            except httpx.HTTPStatusError as e:
                raise BirdeyeApiError(f"HTTP {e.response.status_code}: {path} | {e.response.text[:200]}") from e
            except httpx.RequestError as e:
                raise BirdeyeApiError(f"Request failed: {path}: {e}") from e
            except ValueError as e:
                raise BirdeyeApiError(f"Invalid JSON: {path}") from e

        raise BirdeyeApiError(f"Request failed after retries: {path}") from last_exc

    async def get_token_overview(self, address: str) -> BirdeyeTokenOverview:
        """Fetch token overview (price, market cap, 24h volume)."""
        data = await self._request(
            "GET",
            "/defi/token_overview",
            params={"address": address, "ui_amount_mode": "scaled"},
        )
        return BirdeyeTokenOverview.model_validate(data)

    async def close(self) -> None:
        await self._client.aclose()
