from mindtest.schemas.analytics import DashboardSummary, RealtimeSnapshot
from mindtest.schemas.common import CountRow, ErrorResponse, HealthResponse, OkResponse
from mindtest.schemas.event import EventIngestResponse, EventOut
from mindtest.schemas.result import ResultOut, UserResultItem, UserResultsResponse

__all__ = [
    "CountRow",
    "DashboardSummary",
    "ErrorResponse",
    "EventIngestResponse",
    "EventOut",
    "HealthResponse",
    "OkResponse",
    "RealtimeSnapshot",
    "ResultOut",
    "UserResultItem",
    "UserResultsResponse",
]
