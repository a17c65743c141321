"""
Event and quiz-result ingestion.

Client payloads are loosely shaped: the same field can arrive under several
names, or nested inside ``properties``. Each field is resolved through an
explicit precedence list and falls back to a default, so no payload is ever
rejected for its shape.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from mindtest.core.datetime_utils import utc_now
from mindtest.core.logging import get_logger
from mindtest.core.security import generate_record_id
from mindtest.core.storage import Storage
from mindtest.models import Event, Result
from mindtest.models.event import dump_json
from mindtest.services.mirror import MirrorForwarder

logger = get_logger(__name__)

DEFAULT_EVENT_TYPE = "custom"
UNKNOWN_RESULT_NAME = ""

# Dotted paths are looked up inside nested mappings
PAGE_FIELDS = ("page", "properties.page", "payload.page")
EVENT_TYPE_FIELDS = ("type", "event", "event_name", "properties.event")
PROPERTIES_FIELDS = ("payload", "properties")


@dataclass(frozen=True)
class NormalizedEvent:
    page: str = ""
    event_type: str = DEFAULT_EVENT_TYPE
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NormalizedResult:
    result_name: str = UNKNOWN_RESULT_NAME
    scores: dict[str, Any] = field(default_factory=dict)


def _lookup(item: Mapping[str, Any], path: str) -> Any:
    value: Any = item
    for key in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def _first_text(item: Mapping[str, Any], paths: Sequence[str], default: str) -> str:
    """First non-empty scalar among ``paths``, as a string."""
    for path in paths:
        value = _lookup(item, path)
        if value is None or isinstance(value, (Mapping, list)):
            continue
        text = str(value)
        if text:
            return text
    return default


def _first_mapping(item: Mapping[str, Any], paths: Sequence[str]) -> dict[str, Any]:
    """First non-empty mapping among ``paths``."""
    for path in paths:
        value = _lookup(item, path)
        if isinstance(value, Mapping) and value:
            return dict(value)
    return {}


def normalize_event(item: Any) -> NormalizedEvent:
    """Resolve page, event type and properties for one incoming event."""
    if not isinstance(item, Mapping):
        return NormalizedEvent()
    return NormalizedEvent(
        page=_first_text(item, PAGE_FIELDS, ""),
        event_type=_first_text(item, EVENT_TYPE_FIELDS, DEFAULT_EVENT_TYPE),
        properties=_first_mapping(item, PROPERTIES_FIELDS),
    )


def normalize_result(body: Any) -> NormalizedResult:
    """Resolve the result name and score mapping of a quiz result."""
    if not isinstance(body, Mapping):
        return NormalizedResult()
    return NormalizedResult(
        result_name=_first_text(body, ("result_name",), UNKNOWN_RESULT_NAME),
        scores=_first_mapping(body, ("scores",)),
    )


def unpack_batch(body: Any) -> list[Any]:
    """
    Split a request body into event items.

    Accepts ``{"batch": [...]}``, a bare JSON list, or a single event object.
    """
    if isinstance(body, list):
        return body
    if isinstance(body, Mapping) and isinstance(body.get("batch"), list):
        return body["batch"]
    return [body if body is not None else {}]


class IngestService:
    """Writes client events and results, then hands them to the mirror."""

    def __init__(self, storage: Storage, mirror: MirrorForwarder) -> None:
        self.storage = storage
        self.mirror = mirror

    async def record_events(
        self,
        body: Any,
        session_id: str | None,
        source_ip: str = "",
    ) -> int:
        """
        Persist one event or a batch atomically.

        All items share a single server timestamp, session and origin.

        Returns:
            Number of events inserted
        """
        now = utc_now()
        events = []
        for item in unpack_batch(body):
            normalized = normalize_event(item)
            events.append(
                Event(
                    id=generate_record_id(),
                    ts=now,
                    session_id=session_id,
                    source_ip=source_ip,
                    page=normalized.page,
                    event_type=normalized.event_type,
                    payload=dump_json(normalized.properties),
                )
            )

        inserted = await self.storage.insert_events_batch(events)
        logger.bind(count=inserted, session_id=session_id).debug("events_recorded")

        for event in events:
            self.mirror.submit("events", event.to_mirror_row())
        return inserted

    async def record_result(self, body: Any, session_id: str | None) -> Result:
        """Persist a single quiz result."""
        normalized = normalize_result(body)
        result = Result(
            id=generate_record_id(),
            ts=utc_now(),
            session_id=session_id,
            result_name=normalized.result_name,
            score_json=dump_json(normalized.scores),
        )
        await self.storage.insert_result(result)
        logger.bind(result_name=result.result_name, session_id=session_id).info("result_recorded")

        self.mirror.submit("results", result.to_mirror_row())
        return result
