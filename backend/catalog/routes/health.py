"""
Catalog API — Health Check Route
================================

What:  Liveness/readiness probe for Docker and load balancers.
How:   SELECT 1 against the database. The image store and mail provider are
       reported as configured or not; they are never called, since a probe
       every few seconds must not upload files or send mail.

Status levels:
    - healthy:   database reachable
    - unhealthy: database unreachable (still HTTP 200; the body carries the verdict)
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from catalog import __version__
from catalog.database import engine
from catalog.schemas.common import HealthResponse
from catalog.services.image_store import get_image_store
from catalog.services.notification import get_notification_sink

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


def _configured(flag: bool) -> str:
    return "configured" if flag else "not_configured"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        image_store=_configured(get_image_store().configured),
        email=_configured(get_notification_sink().configured),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
