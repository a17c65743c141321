from typing import Any

from pydantic import BaseModel, Field

from mindtest.core.datetime_utils import isoformat_utc
from mindtest.models import Event


class EventIngestResponse(BaseModel):
    """Response after recording one event or a batch."""

    ok: bool = True
    inserted: int


class EventOut(BaseModel):
    """Stored event as listed to the admin UI."""

    id: str
    timestamp: str
    event_name: str
    user_id: str | None
    session_id: str | None
    page: str
    properties: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_model(cls, event: Event) -> "EventOut":
        return cls(
            id=event.id,
            timestamp=isoformat_utc(event.ts),
            event_name=event.event_type,
            user_id=event.session_id,
            session_id=event.session_id,
            page=event.page or "",
            properties=event.properties,
        )
