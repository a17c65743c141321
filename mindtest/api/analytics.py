from fastapi import APIRouter

from mindtest.dependencies import Analytics
from mindtest.schemas.analytics import DashboardSummary, RealtimeSnapshot

router = APIRouter()


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(analytics: Analytics) -> DashboardSummary:
    """Totals, today's activity, rankings and the hourly histogram."""
    return await analytics.dashboard()


@router.get("/realtime", response_model=RealtimeSnapshot)
async def get_realtime(analytics: Analytics) -> RealtimeSnapshot:
    """Activity in the last five minutes and the latest events."""
    return await analytics.realtime()
