from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, String
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from mindtest.core.datetime_utils import to_naive_utc

# Millisecond ISO text with a Z suffix, the layout existing SQLite databases hold
SQLITE_TS_FORMAT = "%Y-%m-%dT%H:%M:%S"


def format_sqlite_ts(value: datetime) -> str:
    value = to_naive_utc(value)
    return f"{value.strftime(SQLITE_TS_FORMAT)}.{value.microsecond // 1000:03d}Z"


def parse_stored_ts(value: str) -> datetime:
    """Read ``2026-10-17T14:30:00.000Z`` as well as ``2026-10-17 14:30:00.000000``."""
    return to_naive_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))


class UTCTimestamp(TypeDecorator):
    """
    Naive-UTC timestamp column.

    On SQLite the value is stored as ISO text so that range comparisons and
    ordering work on plain string comparison against rows written by earlier
    deployments. Other dialects use their native timestamp type.
    """

    impl = DateTime
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> Any:
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(32))
        return dialect.type_descriptor(DateTime())

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> Any:
        if value is None:
            return None
        if dialect.name == "sqlite":
            return format_sqlite_ts(value)
        return to_naive_utc(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if isinstance(value, str):
            return parse_stored_ts(value)
        return to_naive_utc(value)


class Base(DeclarativeBase):
    """Declarative base shared by the events and results tables."""

    type_annotation_map: dict[type, Any] = {datetime: UTCTimestamp()}
