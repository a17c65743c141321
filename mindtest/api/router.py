from fastapi import APIRouter

from mindtest.api.analytics import router as analytics_router
from mindtest.api.events import router as events_router
from mindtest.api.health import router as health_router
from mindtest.api.results import router as results_router
from mindtest.schemas.common import ErrorResponse

api_router = APIRouter(responses={500: {"model": ErrorResponse}})

# API routes at /api/*
api_router.include_router(health_router, prefix="/api", tags=["health"])
api_router.include_router(events_router, prefix="/api", tags=["events"])
api_router.include_router(results_router, prefix="/api", tags=["results"])
api_router.include_router(analytics_router, prefix="/api", tags=["analytics"])
