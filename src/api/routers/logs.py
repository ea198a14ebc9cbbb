"""Event log endpoints: dashboard feed and worker ingestion."""

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from config.settings import settings
from src.api.dependencies import get_event_log, limiter
from src.parsers.event_log import EventLog

router = APIRouter(prefix="/api", tags=["logs"])


class LogEntryView(BaseModel):
    msg: str
    time: int
    signature: str | None = None
    link: str | None = None


class IngestRequest(BaseModel):
    msg: str | None = Field(None, max_length=2000)


class IngestResponse(BaseModel):
    ok: bool


@router.get("/logs", response_model=list[LogEntryView])
async def get_logs(
    event_log: EventLog = Depends(get_event_log),
    max_age_sec: float | None = Query(None, ge=0, description="Only entries newer than this"),
    limit: int | None = Query(None, ge=1, le=1000),
) -> list[dict]:
    """Newest-first feed with transaction links resolved."""
    return event_log.entries(max_age_sec=max_age_sec, limit=limit)


@router.post("/ingest-log", response_model=IngestResponse)
@limiter.limit(settings.ingest_rate_limit)
async def ingest_log(
    request: Request,
    body: IngestRequest,
    event_log: EventLog = Depends(get_event_log),
) -> IngestResponse:
    """Accept a [CLAIM]/[SWAP]/[AIRDROP] line from the airdrop worker."""
    return IngestResponse(ok=event_log.ingest(body.msg or ""))
