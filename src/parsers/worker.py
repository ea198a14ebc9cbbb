"""Monitor wiring: builds clients and state, runs the update loop and the dashboard API."""

import asyncio

from loguru import logger

from config.settings import settings
from src.api.metrics_registry import registry
from src.api.server import run_dashboard_server
from src.parsers.birdeye.client import BirdeyeClient
from src.parsers.dexscreener.client import DexScreenerClient
from src.parsers.event_log import EventLog
from src.parsers.helius.client import HeliusClient
from src.parsers.holders import HolderAggregator
from src.parsers.ledger import BalanceAccumulator
from src.parsers.persistence import load_ledger
from src.parsers.updater import MetricsUpdater


async def run_monitor() -> None:
    """Run until cancelled. Provider clients are closed on the way out."""
    event_log = EventLog(settings.log_file, max_entries=settings.log_buffer_size)
    event_log.load()

    ledger = load_ledger(
        settings.cache_file,
        initial_airdrop=settings.initial_airdrop,
        value_multiplier=settings.value_multiplier,
        seen_max=max(settings.seen_signatures_max, settings.signature_batch_size * 4),
    )

    if not settings.helius_api_key and not settings.helius_rpc_url:
        logger.warning("[MONITOR] HELIUS_API_KEY not set, RPC calls will be rejected")
    if not settings.birdeye_api_key:
        logger.warning("[MONITOR] BIRDEYE_API_KEY not set, market cap will read 0")

    helius = HeliusClient(
        settings.rpc_url,
        max_rps=settings.helius_max_rps,
        timeout=settings.http_timeout_sec,
    )
    birdeye = BirdeyeClient(
        settings.birdeye_api_key,
        max_rps=settings.birdeye_max_rps,
        timeout=settings.http_timeout_sec,
    )
    dexscreener = DexScreenerClient(
        max_rps=settings.dexscreener_max_rps,
        timeout=settings.http_timeout_sec,
    )

    accumulator = BalanceAccumulator(
        helius,
        ledger,
        event_log,
        wallet=settings.dev_wallet,
        mint=settings.pump_mint,
        batch_size=settings.signature_batch_size,
        commitment=settings.tx_commitment,
    )
    holders = HolderAggregator(
        helius,
        mint=settings.token_ca,
        page_size=settings.holders_page_size,
        max_pages=settings.holders_max_pages,
        min_amount=settings.holders_min_amount,
        max_amount=settings.holders_max_amount,
        enforce_max=settings.holders_enforce_max,
    )
    updater = MetricsUpdater(
        ledger,
        accumulator,
        event_log,
        birdeye,
        dexscreener,
        token_address=settings.token_ca,
        cache_file=settings.cache_file,
    )

    registry.ledger = ledger
    registry.event_log = event_log
    registry.holders = holders
    registry.updater = updater

    logger.info(
        f"[MONITOR] wallet={settings.dev_wallet[:8]}.. mint={settings.pump_mint[:8]}.. "
        f"token={settings.token_ca[:8]}.. baseline={ledger.startup_baseline:.6f} "
        f"whale_cap={'on' if settings.holders_enforce_max else 'off'}"
    )

    tasks = [
        asyncio.create_task(updater.run_loop(settings.update_interval_sec), name="update_loop"),
        asyncio.create_task(run_dashboard_server(), name="dashboard_api"),
    ]
    event_log.append(f"[SERVER] Started on port {settings.dashboard_port}")

    try:
        await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await helius.close()
        await birdeye.close()
        await dexscreener.close()
        logger.info("[MONITOR] Provider clients closed")
