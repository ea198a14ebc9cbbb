"""Singleton registry for runtime objects shared between the update loop and the API.

Populated once during ``run_monitor()`` initialization. FastAPI endpoints
read these references directly. This is safe because everything runs in a
single asyncio event loop and only the update loop mutates the ledger.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.parsers.event_log import EventLog
    from src.parsers.holders import HolderAggregator
    from src.parsers.ledger import Ledger
    from src.parsers.updater import MetricsUpdater


class MetricsRegistry:
    """Holds references to runtime objects for API access."""

    ledger: Ledger | None = None
    event_log: EventLog | None = None
    holders: HolderAggregator | None = None
    updater: MetricsUpdater | None = None


registry = MetricsRegistry()
