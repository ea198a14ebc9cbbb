"""Periodic update cycle: market data + ledger accumulation + snapshot persistence.

Cycles never overlap: each one holds the cycle lock until the snapshot is
written, and the loop only sleeps after the previous cycle returned.
"""

import asyncio
from pathlib import Path

from loguru import logger

from src.parsers.birdeye.client import BirdeyeClient
from src.parsers.dexscreener.client import DexScreenerClient
from src.parsers.event_log import EventLog
from src.parsers.ledger import BalanceAccumulator, Ledger
from src.parsers.market_data import fetch_market_snapshot
from src.parsers.persistence import save_ledger


class MetricsUpdater:
    """Runs the update cycle that feeds the dashboard snapshot."""

    def __init__(
        self,
        ledger: Ledger,
        accumulator: BalanceAccumulator,
        event_log: EventLog,
        birdeye: BirdeyeClient,
        dexscreener: DexScreenerClient | None,
        *,
        token_address: str,
        cache_file: str | Path,
    ) -> None:
        self._ledger = ledger
        self._accumulator = accumulator
        self._event_log = event_log
        self._birdeye = birdeye
        self._dexscreener = dexscreener
        self._token_address = token_address
        self._cache_file = cache_file
        self._lock = asyncio.Lock()
        self.cycle_count: int = 0
        self.last_error: str | None = None

    async def run_once(self) -> bool:
        """One full cycle. Failures are logged to the event log, never raised."""
        async with self._lock:
            self.cycle_count += 1
            try:
                market = await fetch_market_snapshot(
                    self._token_address,
                    self._birdeye,
                    self._dexscreener,
                    on_error=self._event_log.append,
                )
                await self._accumulator.accumulate()

                self._ledger.update_market(market.market_cap_usd, market.volume_24h_usd)
                save_ledger(self._ledger, self._cache_file)
            except Exception as e:
                self.last_error = str(e)
                self._event_log.append(f"[ERROR] {e}")
                return False

            self.last_error = None
            snap = self._ledger.snapshot()
            self._event_log.append(
                f"[UPDATE] Mcap ${snap.market_cap_usd:.2f} | "
                f"Vol24h ${snap.volume_24h_usd:.2f} | "
                f"Dev $PUMP {snap.total_tokens_credited:.6f} | "
                f"Value Distributed ${snap.total_value_usd:.2f}"
            )
            return True

    async def run_loop(self, interval_sec: float = 10.0) -> None:
        """Run a cycle now, then every ``interval_sec`` until cancelled."""
        logger.info(f"[UPDATER] Update loop started, interval={interval_sec}s")
        while True:
            await self.run_once()
            await asyncio.sleep(interval_sec)
