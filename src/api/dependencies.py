"""FastAPI dependency injection: runtime objects from the registry, shared rate limiter."""

from __future__ import annotations

from fastapi import HTTPException, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.api.metrics_registry import registry
from src.parsers.event_log import EventLog
from src.parsers.holders import HolderAggregator
from src.parsers.ledger import Ledger

# Rate limiter (shared instance, attached to app.state in create_app)
limiter = Limiter(key_func=get_remote_address)


def _not_ready(component: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"{component} not initialized",
    )


def get_ledger() -> Ledger:
    if registry.ledger is None:
        raise _not_ready("ledger")
    return registry.ledger


def get_event_log() -> EventLog:
    if registry.event_log is None:
        raise _not_ready("event log")
    return registry.event_log


def get_holder_aggregator() -> HolderAggregator:
    if registry.holders is None:
        raise _not_ready("holder aggregator")
    return registry.holders
