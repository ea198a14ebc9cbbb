"""Running ledger of tokens credited to the tracked wallet.

The accumulator polls the wallet's most recent signatures, fetches every
signature it has not processed yet and credits the positive token-balance
increase for the tracked mint. A signature is processed at most once:

- credited > 0  → total += credited, value recomputed, signature marked seen
- credited <= 0 → signature marked seen, totals untouched
- fetch failed  → skipped, NOT marked seen (retried next cycle)

If the signature list itself can't be fetched the whole cycle is abandoned
and the previous total is returned.
"""

import asyncio
from collections import OrderedDict
from collections.abc import Iterable

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from src.parsers.event_log import EventLog, now_ms
from src.parsers.helius.client import HeliusApiError, HeliusClient
from src.parsers.helius.models import ParsedTransaction


class RunningTotals(BaseModel):
    """Dashboard snapshot. Aliases are the on-disk cache keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    market_cap_usd: float = Field(0.0, alias="marketCap")
    volume_24h_usd: float = Field(0.0, alias="volume")
    total_tokens_credited: float = Field(0.0, alias="totalPumpBought")
    total_value_usd: float = Field(0.0, alias="totalValue")
    last_updated_at_ms: int = Field(0, alias="lastUpdated")


class SeenSignatures:
    """Insertion-ordered signature set that forgets the oldest entries past ``max_size``.

    ``max_size`` must stay well above the per-cycle batch size, otherwise a
    signature could be evicted while still inside the polled window.
    """

    def __init__(self, signatures: Iterable[str] = (), *, max_size: int = 1000) -> None:
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._max_size = max_size
        self._items: OrderedDict[str, None] = OrderedDict()
        for sig in signatures:
            self.add(sig)

    def __contains__(self, signature: object) -> bool:
        return signature in self._items

    def __len__(self) -> int:
        return len(self._items)

    def add(self, signature: str) -> None:
        self._items[signature] = None
        self._items.move_to_end(signature)
        while len(self._items) > self._max_size:
            self._items.popitem(last=False)

    def to_list(self) -> list[str]:
        return list(self._items)


class Ledger:
    """Single-writer owner of RunningTotals and the seen-signature set.

    Only the update cycle mutates it; request handlers read via ``snapshot()``.
    """

    def __init__(
        self,
        totals: RunningTotals,
        *,
        value_multiplier: float,
        seen: SeenSignatures | None = None,
    ) -> None:
        self._totals = totals
        self._value_multiplier = value_multiplier
        self.seen = seen if seen is not None else SeenSignatures()
        self._totals.total_value_usd = self._totals.total_tokens_credited * value_multiplier
        self.startup_baseline = self._totals.total_tokens_credited

    @property
    def total_tokens_credited(self) -> float:
        return self._totals.total_tokens_credited

    @property
    def value_multiplier(self) -> float:
        return self._value_multiplier

    @property
    def value_distributed_since_start(self) -> float:
        return (self._totals.total_tokens_credited - self.startup_baseline) * self._value_multiplier

    def credit(self, signature: str, amount: float) -> None:
        """Apply a positive credit for ``signature`` and mark it seen."""
        if amount <= 0:
            raise ValueError(f"credit must be positive, got {amount}")
        self._totals.total_tokens_credited += amount
        self._totals.total_value_usd = self._totals.total_tokens_credited * self._value_multiplier
        self.seen.add(signature)

    def mark_seen(self, signature: str) -> None:
        self.seen.add(signature)

    def update_market(self, market_cap_usd: float, volume_24h_usd: float) -> None:
        self._totals.market_cap_usd = market_cap_usd
        self._totals.volume_24h_usd = volume_24h_usd
        self._totals.total_value_usd = self._totals.total_tokens_credited * self._value_multiplier
        self._totals.last_updated_at_ms = now_ms()

    def snapshot(self) -> RunningTotals:
        return self._totals.model_copy()


def extract_credit(tx: ParsedTransaction, *, wallet: str, mint: str) -> float:
    """Sum of positive balance increases of ``mint`` owned by ``wallet`` in ``tx``.

    Post balances are matched to pre balances by account index; a missing pre
    balance counts as zero. Decreases and other mints/owners contribute nothing.
    """
    if tx.meta is None:
        return 0.0

    pre_by_index = {b.accountIndex: b for b in tx.meta.preTokenBalances}
    credited = 0.0
    for post in tx.meta.postTokenBalances:
        if post.mint != mint or post.owner != wallet:
            continue
        pre = pre_by_index.get(post.accountIndex)
        delta = post.ui_amount - (pre.ui_amount if pre else 0.0)
        if delta > 0:
            credited += delta
    return credited


class BalanceAccumulator:
    """Credits new token receipts of one wallet/mint pair into a Ledger."""

    def __init__(
        self,
        helius: HeliusClient,
        ledger: Ledger,
        event_log: EventLog,
        *,
        wallet: str,
        mint: str,
        batch_size: int = 50,
        commitment: str = "confirmed",
    ) -> None:
        self._helius = helius
        self._ledger = ledger
        self._event_log = event_log
        self._wallet = wallet
        self._mint = mint
        self._batch_size = batch_size
        self._commitment = commitment
        self._lock = asyncio.Lock()

    async def accumulate(self) -> float:
        """Process unseen signatures sequentially. Returns the updated total."""
        async with self._lock:
            try:
                signatures = await self._helius.get_signatures_for_address(
                    self._wallet, limit=self._batch_size
                )
            except (HeliusApiError, httpx.HTTPError) as e:
                self._event_log.append(f"[HELIUS RPC ERROR] {e}")
                return self._ledger.total_tokens_credited

            for entry in signatures:
                sig = entry.signature
                if not sig or sig in self._ledger.seen:
                    continue

                try:
                    tx = await self._helius.get_transaction(sig, commitment=self._commitment)
                except (HeliusApiError, httpx.HTTPError) as e:
                    logger.debug(f"[LEDGER] getTransaction {sig[:16]} failed, retry next cycle: {e}")
                    continue
                if tx is None:
                    continue

                credited = extract_credit(tx, wallet=self._wallet, mint=self._mint)
                if credited > 0:
                    self._ledger.credit(sig, credited)
                    self._event_log.append(
                        f"[BUY] Dev wallet received {credited:.6f} $PUMP | TX: {sig}"
                    )
                else:
                    self._ledger.mark_seen(sig)

            return self._ledger.total_tokens_credited
