"""
Health check endpoints.
"""

import time

from fastapi import APIRouter, Depends

from cafe_ledger.api.dependencies import get_app_settings
from cafe_ledger.application.dto.responses import HealthResponse
from cafe_ledger.config import Settings, get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """
    Liveness plus database reachability.

    Reports the ledger policy in force so operators can see whether negative
    stock is currently allowed.
    """
    from cafe_ledger.infrastructure.storage.sqlite import get_connection_pool

    database = "ok"
    try:
        pool = await get_connection_pool()
        if not await pool.ping():
            database = "unavailable"
    except Exception as e:
        logger.warning("health_db_check_failed", error=str(e))
        database = "unavailable"

    return HealthResponse(
        status="healthy" if database == "ok" else "unhealthy",
        version=settings.app_version,
        uptime_seconds=time.time() - _start_time,
        database=database,
        allow_negative_stock=settings.ledger.allow_negative_stock,
        default_timezone=settings.ledger.default_timezone,
    )
