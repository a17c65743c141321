from fastapi import APIRouter

from mindtest.core.datetime_utils import isoformat_utc, utc_now
from mindtest.dependencies import StorageDep
from mindtest.schemas.common import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(storage: StorageDep) -> HealthResponse:
    """Liveness check for load balancers."""
    connected = await storage.ping()
    return HealthResponse(
        status="ok",
        timestamp=isoformat_utc(utc_now()),
        database="connected" if connected else "unavailable",
    )
