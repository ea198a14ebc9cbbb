"""Stats endpoint: the running totals snapshot."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.dependencies import get_ledger
from src.parsers.ledger import Ledger

router = APIRouter(prefix="/api", tags=["stats"])


class StatsResponse(BaseModel):
    market_cap_usd: float
    volume_24h_usd: float
    total_tokens_credited: float
    total_value_usd: float
    last_updated_at_ms: int
    baseline_tokens_credited: float
    value_distributed_since_start: float


@router.get("/stats", response_model=StatsResponse)
async def get_stats(ledger: Ledger = Depends(get_ledger)) -> StatsResponse:
    """Last snapshot plus the value distributed since this process started."""
    snap = ledger.snapshot()
    return StatsResponse(
        market_cap_usd=snap.market_cap_usd,
        volume_24h_usd=snap.volume_24h_usd,
        total_tokens_credited=snap.total_tokens_credited,
        total_value_usd=snap.total_value_usd,
        last_updated_at_ms=snap.last_updated_at_ms,
        baseline_tokens_credited=ledger.startup_baseline,
        value_distributed_since_start=ledger.value_distributed_since_start,
    )
