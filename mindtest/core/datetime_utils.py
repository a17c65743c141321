"""Centralized datetime utilities for consistent timezone handling.

Timestamps are stored as naive UTC datetimes. Calendar-day logic ("today",
``start``/``end`` date filters) happens in the configured server timezone and is
converted back to naive UTC before it reaches a query.

Usage:
    from mindtest.core.datetime_utils import utc_now, get_cutoff, day_range

    # Trailing window
    cutoff = get_cutoff(minutes=5)
    stmt = select(Event).where(Event.ts >= cutoff)

    # Whole calendar days, inclusive on both ends
    start, end = day_range("2026-10-01", "2026-10-17", tz_name="Asia/Taipei")
"""

from datetime import UTC, date, datetime, time, timedelta, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

from mindtest.core.logging import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    """Get current UTC time as naive datetime.

    Returns naive datetime for database compatibility.
    """
    return datetime.now(UTC).replace(tzinfo=None)


def get_cutoff(minutes: int = 0, hours: int = 0, days: int = 0, now: datetime | None = None) -> datetime:
    """Get cutoff datetime for filtering queries.

    Args:
        minutes: Minutes to subtract from now
        hours: Hours to subtract from now
        days: Days to subtract from now
        now: Reference instant (naive UTC), defaults to the current time

    Returns:
        Naive UTC datetime representing the cutoff point
    """
    delta = timedelta(minutes=minutes, hours=hours, days=days)
    return (now or utc_now()) - delta


def to_naive_utc(dt: datetime) -> datetime:
    """Convert a datetime to naive UTC.

    Args:
        dt: Datetime to convert (can be aware or naive)

    Returns:
        Naive UTC datetime for database compatibility
    """
    if dt.tzinfo is None:
        # Already naive, assume it's UTC
        return dt
    # Convert to UTC and strip timezone
    return dt.astimezone(UTC).replace(tzinfo=None)


def as_aware_utc(dt: datetime) -> datetime:
    """Attach UTC to a stored naive timestamp so it serializes with a ``Z``."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def isoformat_utc(dt: datetime) -> str:
    """Render a timestamp as ISO 8601 with a ``Z`` suffix."""
    return as_aware_utc(dt).isoformat().replace("+00:00", "Z")


def is_valid_timezone(tz_name: str) -> bool:
    """Check if a timezone name is valid IANA identifier.

    Args:
        tz_name: Timezone string (e.g., "America/New_York")

    Returns:
        True if valid IANA timezone
    """
    try:
        ZoneInfo(tz_name)
        return True
    except (KeyError, ValueError):
        return False


@lru_cache(maxsize=32)
def _server_zone(tz_name: str) -> tzinfo | None:
    """Resolve the server zone; None means the host's local zone."""
    if not tz_name:
        return None
    if not is_valid_timezone(tz_name):
        logger.bind(timezone=tz_name).warning("invalid_timezone_fallback_utc")
        return ZoneInfo("UTC")
    return ZoneInfo(tz_name)


def _localize(naive_local: datetime, tz_name: str) -> datetime:
    zone = _server_zone(tz_name)
    if zone is None:
        # astimezone() on a naive value interprets it as host local time
        return naive_local.astimezone()
    return naive_local.replace(tzinfo=zone)


def local_today(tz_name: str = "", now: datetime | None = None) -> date:
    """Get the current calendar date in the server zone."""
    aware_now = as_aware_utc(now or utc_now())
    zone = _server_zone(tz_name)
    local = aware_now.astimezone(zone) if zone is not None else aware_now.astimezone()
    return local.date()


def start_of_day(day: date, tz_name: str = "") -> datetime:
    """Local midnight of ``day`` as naive UTC."""
    return to_naive_utc(_localize(datetime.combine(day, time.min), tz_name))


def end_of_day(day: date, tz_name: str = "") -> datetime:
    """Last microsecond of ``day`` in the server zone as naive UTC."""
    return to_naive_utc(_localize(datetime.combine(day, time.max), tz_name))


def start_of_today(tz_name: str = "", now: datetime | None = None) -> datetime:
    """Local midnight of the current day as naive UTC."""
    return start_of_day(local_today(tz_name, now), tz_name)


def parse_day(value: str | None) -> date | None:
    """Parse a date filter value.

    Accepts an ISO date (``2026-10-17``) or an ISO datetime; only the calendar
    date is kept. Anything else is treated as absent.
    """
    if not value:
        return None
    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def day_range(
    start: str | None,
    end: str | None,
    tz_name: str = "",
) -> tuple[datetime | None, datetime | None]:
    """Expand ``start``/``end`` date strings to an inclusive naive UTC range.

    ``start`` becomes local midnight of its day and ``end`` the last instant of
    its day, so filtering by calendar date returns every row on that date.
    """
    start_day = parse_day(start)
    end_day = parse_day(end)
    return (
        start_of_day(start_day, tz_name) if start_day else None,
        end_of_day(end_day, tz_name) if end_day else None,
    )
