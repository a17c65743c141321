"""
Dashboard and real-time aggregates.

Both views are computed fresh on every call. Each number is its own read
statement, not one transaction, so under concurrent writes the parts of one
response may reflect slightly different moments. That is acceptable for
advisory analytics and is not something callers should rely on.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import Select, desc, distinct, extract, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mindtest.core.datetime_utils import get_cutoff, isoformat_utc, start_of_today, utc_now
from mindtest.core.errors import StorageError
from mindtest.core.logging import get_logger
from mindtest.core.storage import Storage
from mindtest.models import Event, Result
from mindtest.schemas.analytics import (
    DashboardSummary,
    EventTypeCount,
    HourCount,
    PageViewCount,
    RealtimeSnapshot,
    RecentEvent,
    ResultNameCount,
)
from mindtest.schemas.common import CountRow

logger = get_logger(__name__)

TOP_EVENTS_LIMIT = 6
PAGE_VIEWS_LIMIT = 10
RECENT_EVENTS_LIMIT = 20
REALTIME_WINDOW_MINUTES = 5
PAGE_VIEW_EVENT = "page_view"


def _window(stmt: Select, start: datetime | None, end: datetime) -> Select:
    if start is not None:
        stmt = stmt.where(Event.ts >= start)
    return stmt.where(Event.ts <= end)


async def _scalar(session: AsyncSession, stmt: Select) -> int:
    return int((await session.execute(stmt)).scalar() or 0)


async def _rows(session: AsyncSession, stmt: Select) -> list[Any]:
    return list((await session.execute(stmt)).all())


class AnalyticsService:
    """Read-only aggregate views over the events and results tables."""

    def __init__(self, storage: Storage, timezone: str = "") -> None:
        self.storage = storage
        self.timezone = timezone

    async def dashboard(self, now: datetime | None = None) -> DashboardSummary:
        """
        Compute the dashboard summary.

        "Today" runs from local midnight in the configured timezone to ``now``.
        The hourly histogram is keyed by the two-digit hour of the stored (UTC)
        timestamp and lists only hours that have events.
        """
        now = now or utc_now()
        today = start_of_today(self.timezone, now)

        event_count = select(func.count()).select_from(Event)
        session_count = select(func.count(distinct(Event.session_id)))
        event_type_counts = (
            select(Event.event_type, func.count().label("count"))
            .group_by(Event.event_type)
            .order_by(desc("count"), Event.event_type)
            .limit(TOP_EVENTS_LIMIT)
        )
        page_view_counts = (
            select(Event.page, func.count().label("count"))
            .where(Event.event_type == PAGE_VIEW_EVENT)
            .group_by(Event.page)
            .order_by(desc("count"), Event.page)
            .limit(PAGE_VIEWS_LIMIT)
        )
        result_counts = (
            select(Result.result_name, func.count().label("count"))
            .group_by(Result.result_name)
            .order_by(desc("count"), Result.result_name)
        )
        # Buckets are UTC hours even though the window starts at local midnight,
        # so in zones ahead of UTC the early local hours show up as late UTC hours.
        hour = extract("hour", Event.ts)
        hourly_counts = _window(
            select(hour.label("hour"), func.count().label("count")), today, now
        ).group_by(hour).order_by(hour)

        try:
            async with self.storage.session() as session:
                total_events = await _scalar(session, event_count)
                total_sessions = await _scalar(session, session_count)
                today_events = await _scalar(session, _window(event_count, today, now))
                today_sessions = await _scalar(session, _window(session_count, today, now))
                top_events = await _rows(session, event_type_counts)
                page_views = await _rows(session, page_view_counts)
                quiz_results = await _rows(session, result_counts)
                hourly = await _rows(session, hourly_counts)
        except SQLAlchemyError as e:
            logger.bind(error=str(e)).error("dashboard_query_failed")
            raise StorageError(
                "Failed to fetch dashboard data.", operation="dashboard", original_error=e
            ) from e

        return DashboardSummary(
            totalEvents=[CountRow(count=total_events)],
            totalUsers=[CountRow(count=total_sessions)],
            totalSessions=[CountRow(count=total_sessions)],
            todayEvents=[CountRow(count=today_events)],
            todayUsers=[CountRow(count=today_sessions)],
            topEvents=[
                EventTypeCount(event_name=row.event_type or "", count=row.count)
                for row in top_events
            ],
            pageViews=[PageViewCount(page=row.page or "", count=row.count) for row in page_views],
            quizResults=[
                ResultNameCount(result=row.result_name or "", count=row.count)
                for row in quiz_results
            ],
            hourlyEvents=[
                HourCount(hour=f"{int(row.hour):02d}", count=row.count) for row in hourly
            ],
        )

    async def realtime(self, now: datetime | None = None) -> RealtimeSnapshot:
        """
        Activity in the trailing five minutes plus the latest events.

        The window is inclusive: a row stamped exactly ``now - 5 minutes`` counts.
        """
        now = now or utc_now()
        since = get_cutoff(minutes=REALTIME_WINDOW_MINUTES, now=now)

        recent = (
            select(Event)
            .where(Event.ts <= now)
            .order_by(Event.ts.desc(), Event.id.desc())
            .limit(RECENT_EVENTS_LIMIT)
        )

        try:
            async with self.storage.session() as session:
                recent_events = await _scalar(
                    session, _window(select(func.count()).select_from(Event), since, now)
                )
                online_users = await _scalar(
                    session, _window(select(func.count(distinct(Event.session_id))), since, now)
                )
                latest = list((await session.execute(recent)).scalars().all())
        except SQLAlchemyError as e:
            logger.bind(error=str(e)).error("realtime_query_failed")
            raise StorageError(
                "Failed to fetch realtime data.", operation="realtime", original_error=e
            ) from e

        return RealtimeSnapshot(
            recentEvents=[CountRow(count=recent_events)],
            onlineUsers=[CountRow(count=online_users)],
            recentEventList=[
                RecentEvent(
                    event_name=event.event_type,
                    timestamp=isoformat_utc(event.ts),
                    user_id=event.session_id,
                    page=event.page or "",
                )
                for event in latest
            ],
        )
