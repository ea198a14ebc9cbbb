"""Holder leaderboard endpoint: computed per request, no caching."""

from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.api.dependencies import get_event_log, get_holder_aggregator, limiter
from src.parsers.event_log import EventLog
from src.parsers.holders import HolderAggregator

router = APIRouter(prefix="/api", tags=["holders"])


@router.get("/holders")
@limiter.limit(settings.holders_rate_limit)
async def get_holders(
    request: Request,
    wallet: str = Query("", max_length=100),
    aggregator: HolderAggregator = Depends(get_holder_aggregator),
    event_log: EventLog = Depends(get_event_log),
) -> Any:
    """Eligible holders; with ``wallet`` also that wallet's rank among all owners."""
    try:
        snapshot = await aggregator.compute_holders(wallet.strip() or None)
    except Exception as e:
        # Any provider or payload failure fails the whole request, no partial list
        event_log.append(f"[HOLDERS ERROR] {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})

    body: dict[str, Any] = {}
    if snapshot.lookup is not None:
        body.update(
            rank=snapshot.lookup.rank,
            wallet=snapshot.lookup.wallet,
            amount=snapshot.lookup.amount,
        )
    body["holders"] = [
        {"rank": h.rank, "wallet": h.wallet, "amount": h.amount} for h in snapshot.holders
    ]
    return body
