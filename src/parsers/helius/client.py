"""Helius client: Solana JSON-RPC (signatures, parsed transactions, supply, DAS token accounts)."""

import asyncio
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from src.parsers.helius.models import HeliusSignature, ParsedTransaction, TokenAccountsPage
from src.parsers.rate_limiter import RateLimiter

MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]
MAX_DECIMALS = 255


class HeliusApiError(Exception):
    pass


class HeliusClient:
    """Async JSON-RPC client for the Helius mainnet endpoint."""

    def __init__(
        self,
        rpc_url: str,
        rate_limiter: RateLimiter | None = None,
        max_rps: float = 10.0,
        timeout: float = 15.0,
    ) -> None:
        self._rpc_url = rpc_url
        self._rate_limiter = rate_limiter or RateLimiter(max_rps)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"content-type": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _rpc(self, method: str, params: Any) -> Any:
        """POST a JSON-RPC call, retrying 429/5xx/timeouts. Returns ``result``."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        last_exc: Exception | None = None

        for attempt in range(MAX_RETRIES + 1):
            await self._rate_limiter.acquire()
            try:
                resp = await self._client.post(self._rpc_url, json=payload)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                last_exc = e
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[HELIUS] {method} {type(e).__name__}, retry {attempt + 1} in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise HeliusApiError(f"{method} failed after {MAX_RETRIES + 1} attempts: {e}") from e
            except httpx.RequestError as e:
                raise HeliusApiError(f"{method} request failed: {e}") from e

            if resp.status_code == 429 or resp.status_code >= 500:
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[HELIUS] {method} HTTP {resp.status_code}, retry {attempt + 1} in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise HeliusApiError(f"{method} HTTP {resp.status_code}: {resp.text[:200]}")

            if resp.status_code != 200:
                raise HeliusApiError(f"{method} HTTP {resp.status_code}: {resp.text[:200]}")

            try:
                data = resp.json()
            except ValueError as e:
                raise HeliusApiError(f"{method} returned invalid JSON") from e

            if not isinstance(data, dict):
                raise HeliusApiError(f"{method} returned unexpected payload")
            if data.get("error"):
                err = data["error"]
                message = err.get("message", "RPC error") if isinstance(err, dict) else str(err)
                raise HeliusApiError(message)
            return data.get("result")

        raise HeliusApiError(f"{method} failed after retries") from last_exc

    async def get_signatures_for_address(
        self, address: str, *, limit: int = 50
    ) -> list[HeliusSignature]:
        """Most recent signatures touching ``address``, newest first."""
        result = await self._rpc(
            "getSignaturesForAddress", [address, {"limit": min(limit, 1000)}]
        )
        if not isinstance(result, list):
            raise HeliusApiError("getSignaturesForAddress returned no list")
        try:
            return [
                HeliusSignature(
                    signature=sig.get("signature") or "",
                    slot=sig.get("slot") or 0,
                    timestamp=sig.get("blockTime") or 0,
                    err=sig.get("err"),
                )
                for sig in result
                if isinstance(sig, dict)
            ]
        except ValidationError as e:
            raise HeliusApiError(f"getSignaturesForAddress malformed: {e}") from e

    async def get_transaction(
        self, signature: str, *, commitment: str = "confirmed"
    ) -> ParsedTransaction | None:
        """Fetch a jsonParsed transaction. None when the node doesn't have it (yet)."""
        result = await self._rpc(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "jsonParsed",
                    "maxSupportedTransactionVersion": 0,
                    "commitment": commitment,
                },
            ],
        )
        if result is None:
            return None
        try:
            return ParsedTransaction.model_validate(result)
        except ValidationError as e:
            raise HeliusApiError(f"getTransaction {signature[:16]} malformed: {e}") from e

    async def get_token_decimals(self, mint: str) -> int:
        """Decimal count of ``mint`` via getTokenSupply."""
        result = await self._rpc("getTokenSupply", [mint])
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, dict):
            raise HeliusApiError("getTokenSupply returned no value")
        try:
            decimals = int(value.get("decimals") or 0)
        except (TypeError, ValueError) as e:
            raise HeliusApiError(f"getTokenSupply malformed decimals: {value.get('decimals')!r}") from e
        # SPL mints store decimals as u8
        if not 0 <= decimals <= MAX_DECIMALS:
            raise HeliusApiError(f"getTokenSupply decimals out of range: {decimals}")
        return decimals

    async def get_token_accounts(
        self, mint: str, *, limit: int = 1000, cursor: str | None = None
    ) -> TokenAccountsPage:
        """One page of token accounts holding ``mint`` (Helius DAS getTokenAccounts)."""
        params: dict[str, Any] = {"mint": mint, "limit": limit}
        if cursor:
            params["cursor"] = cursor

        result = await self._rpc("getTokenAccounts", params)
        if not isinstance(result, dict):
            raise HeliusApiError("getTokenAccounts returned no result")
        accounts = result.get("token_accounts") or []
        if not isinstance(accounts, list):
            raise HeliusApiError("getTokenAccounts returned malformed token_accounts")
        return TokenAccountsPage(
            accounts=[a for a in accounts if isinstance(a, dict)],
            cursor=result.get("cursor") or None,
        )
