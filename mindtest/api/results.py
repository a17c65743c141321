from fastapi import APIRouter, Query

from mindtest.core.datetime_utils import day_range
from mindtest.core.pagination import Page
from mindtest.dependencies import (
    AppSettings,
    Ingest,
    JsonBody,
    MirrorDep,
    PresentedSessionId,
    SessionId,
    StorageDep,
)
from mindtest.schemas.common import OkResponse
from mindtest.schemas.result import ResultOut, UserResultsResponse
from mindtest.services.user_results import fetch_session_results

router = APIRouter()


@router.get("/results", response_model=list[ResultOut])
async def list_results(
    storage: StorageDep,
    settings: AppSettings,
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
) -> list[ResultOut]:
    """List quiz results, newest first."""
    window_start, window_end = day_range(start, end, settings.timezone)
    paging = Page.from_params(page, page_size, settings.default_page_size, settings.max_page_size)

    results = await storage.query_results(
        start=window_start,
        end=window_end,
        limit=paging.limit,
        offset=paging.offset,
    )
    return [ResultOut.from_model(result) for result in results]


@router.post("/results", response_model=OkResponse)
async def create_result(
    ingest: Ingest,
    session_id: SessionId,
    body: JsonBody,
) -> OkResponse:
    """Record the visitor's computed quiz outcome."""
    await ingest.record_result(body, session_id=session_id)
    return OkResponse(ok=True)


@router.get("/user-results", response_model=UserResultsResponse)
async def list_user_results(
    session_id: PresentedSessionId,
    storage: StorageDep,
    mirror: MirrorDep,
) -> UserResultsResponse:
    """
    Results recorded under the caller's own session cookie.

    Requires the client to present its ``session_id`` cookie.
    """
    items = await fetch_session_results(session_id, storage, mirror.store)
    return UserResultsResponse(session_id=session_id, results=items, total=len(items))
