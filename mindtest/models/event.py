import json
from datetime import datetime
from typing import Any

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mindtest.core.datetime_utils import isoformat_utc
from mindtest.core.security import generate_record_id
from mindtest.models.base import Base


def dump_json(value: dict[str, Any]) -> str:
    return json.dumps(value, ensure_ascii=False)


def load_json(text: str | None) -> dict[str, Any]:
    """Decode a stored JSON payload; anything that is not an object reads as {}."""
    if not text:
        return {}
    try:
        value = json.loads(text)
    except ValueError:
        return {}
    return value if isinstance(value, dict) else {}


class Event(Base):
    """Behavioral event sent by the quiz front-end."""

    __tablename__ = "events"
    __table_args__ = (
        Index("idx_events_ts", "ts"),
        Index("idx_events_type", "type"),
        Index("idx_events_session_id", "session_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_record_id)
    ts: Mapped[datetime]
    session_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    source_ip: Mapped[str] = mapped_column("ip", Text, default="")
    page: Mapped[str] = mapped_column(Text, default="")
    event_type: Mapped[str] = mapped_column("type", String(100), default="custom")
    payload: Mapped[str] = mapped_column(Text, default="{}")

    @property
    def properties(self) -> dict[str, Any]:
        return load_json(self.payload)

    def to_mirror_row(self) -> dict[str, Any]:
        """Row in the hosted mirror schema (jsonb payload, timestamptz ts)."""
        return {
            "id": self.id,
            "ts": isoformat_utc(self.ts),
            "session_id": self.session_id,
            "ip": self.source_ip,
            "page": self.page,
            "type": self.event_type,
            "payload": self.properties,
        }

    def __repr__(self) -> str:
        return f"<Event {self.event_type} @ {self.ts}>"
