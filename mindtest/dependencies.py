import json
from typing import Annotated, Any

from fastapi import Depends, Request

from mindtest.config import Settings, get_settings
from mindtest.core.errors import SessionRequiredError
from mindtest.core.logging import get_logger
from mindtest.core.storage import Storage
from mindtest.services.analytics import AnalyticsService
from mindtest.services.ingest import IngestService
from mindtest.services.mirror import MirrorForwarder

logger = get_logger(__name__)

AppSettings = Annotated[Settings, Depends(get_settings)]


def get_storage(request: Request) -> Storage:
    """The process-wide Storage built in the application lifespan."""
    return request.app.state.storage


def get_mirror(request: Request) -> MirrorForwarder:
    return request.app.state.mirror


StorageDep = Annotated[Storage, Depends(get_storage)]
MirrorDep = Annotated[MirrorForwarder, Depends(get_mirror)]


def get_ingest_service(storage: StorageDep, mirror: MirrorDep) -> IngestService:
    return IngestService(storage, mirror)


def get_analytics_service(storage: StorageDep, settings: AppSettings) -> AnalyticsService:
    return AnalyticsService(storage, timezone=settings.timezone)


def get_session_id(request: Request) -> str:
    """Session token resolved by SessionCookieMiddleware."""
    return request.state.session_id


def require_presented_session(request: Request) -> str:
    """Session token the client actually sent; raise 400 if it sent none."""
    if getattr(request.state, "session_is_new", True):
        raise SessionRequiredError()
    return request.state.session_id


def get_client_ip(request: Request) -> str:
    """Best-effort client origin, as given by the proxy or the transport."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded
    return request.client.host if request.client else ""


async def get_json_body(request: Request) -> Any:
    """
    Decoded request body, or None when it is empty or not valid JSON.

    Write endpoints normalize whatever they receive, so an unreadable body is
    handled like a missing one instead of being rejected.
    """
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.bind(path=request.url.path, size=len(raw)).debug("unparseable_json_body")
        return None


# Type aliases for dependency injection
Ingest = Annotated[IngestService, Depends(get_ingest_service)]
Analytics = Annotated[AnalyticsService, Depends(get_analytics_service)]
SessionId = Annotated[str, Depends(get_session_id)]
PresentedSessionId = Annotated[str, Depends(require_presented_session)]
ClientIP = Annotated[str, Depends(get_client_ip)]
JsonBody = Annotated[Any, Depends(get_json_body)]
