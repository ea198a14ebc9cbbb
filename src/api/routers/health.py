"""Health check: freshness of the last update cycle."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from config.settings import settings
from src.api.metrics_registry import registry
from src.parsers.event_log import now_ms

router = APIRouter(prefix="/api", tags=["health"])

# Snapshot older than this many update intervals counts as stale
STALE_AFTER_INTERVALS = 3


class HealthResponse(BaseModel):
    status: str
    version: str
    cycles: int
    last_updated_at_ms: int
    seconds_since_update: float | None
    last_error: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report whether the update loop is producing fresh snapshots."""
    last_updated = registry.ledger.snapshot().last_updated_at_ms if registry.ledger else 0
    cycles = registry.updater.cycle_count if registry.updater else 0
    last_error = registry.updater.last_error if registry.updater else None

    age = (now_ms() - last_updated) / 1000 if last_updated else None
    fresh = age is not None and age <= settings.update_interval_sec * STALE_AFTER_INTERVALS

    return HealthResponse(
        status="ok" if fresh and not last_error else "degraded",
        version="0.1.0",
        cycles=cycles,
        last_updated_at_ms=last_updated,
        seconds_since_update=round(age, 1) if age is not None else None,
        last_error=last_error,
    )
