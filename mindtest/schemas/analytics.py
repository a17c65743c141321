from pydantic import BaseModel, Field

from mindtest.schemas.common import CountRow


class EventTypeCount(BaseModel):
    event_name: str
    count: int


class PageViewCount(BaseModel):
    page: str
    count: int


class ResultNameCount(BaseModel):
    result: str
    count: int


class HourCount(BaseModel):
    hour: str  # "00".."23"
    count: int


class DashboardSummary(BaseModel):
    """All-time and today's aggregates for the dashboard."""

    totalEvents: list[CountRow]
    totalUsers: list[CountRow]
    totalSessions: list[CountRow]
    todayEvents: list[CountRow]
    todayUsers: list[CountRow]
    topEvents: list[EventTypeCount] = Field(default_factory=list)
    pageViews: list[PageViewCount] = Field(default_factory=list)
    quizResults: list[ResultNameCount] = Field(default_factory=list)
    hourlyEvents: list[HourCount] = Field(default_factory=list)


class RecentEvent(BaseModel):
    event_name: str
    timestamp: str
    user_id: str | None
    page: str


class RealtimeSnapshot(BaseModel):
    """Trailing-window activity."""

    recentEvents: list[CountRow]
    onlineUsers: list[CountRow]
    recentEventList: list[RecentEvent] = Field(default_factory=list)
