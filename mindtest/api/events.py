from fastapi import APIRouter, Query

from mindtest.core.datetime_utils import day_range
from mindtest.core.pagination import Page
from mindtest.dependencies import (
    AppSettings,
    ClientIP,
    Ingest,
    JsonBody,
    SessionId,
    StorageDep,
)
from mindtest.schemas.event import EventIngestResponse, EventOut

router = APIRouter()


@router.get("/events", response_model=list[EventOut])
async def list_events(
    storage: StorageDep,
    settings: AppSettings,
    start: str | None = Query(default=None, description="First calendar day (inclusive)"),
    end: str | None = Query(default=None, description="Last calendar day (inclusive)"),
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
) -> list[EventOut]:
    """
    List events, newest first.

    ``start``/``end`` cover whole days in the server timezone. ``pageSize`` is
    capped at 500.
    """
    window_start, window_end = day_range(start, end, settings.timezone)
    paging = Page.from_params(page, page_size, settings.default_page_size, settings.max_page_size)

    events = await storage.query_events(
        start=window_start,
        end=window_end,
        limit=paging.limit,
        offset=paging.offset,
    )
    return [EventOut.from_model(event) for event in events]


@router.post("/events", response_model=EventIngestResponse)
async def create_events(
    ingest: Ingest,
    session_id: SessionId,
    client_ip: ClientIP,
    body: JsonBody,
) -> EventIngestResponse:
    """
    Record one event or a batch.

    A batch (``{"batch": [...]}``) is written atomically: all items or none.
    """
    inserted = await ingest.record_events(body, session_id=session_id, source_ip=client_ip)
    return EventIngestResponse(ok=True, inserted=inserted)
