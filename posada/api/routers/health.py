"""
Health check endpoints for monitoring and orchestration.

- /health, /health/live: liveness (always 200 while the process runs)
- /health/db: database connectivity
- /health/ready: readiness (database reachable and webhook secret configured)
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from posada.api.deps import get_db_session
from posada.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "posada-reservations"


@router.get("/health")
async def health_check():
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/live")
async def health_check_live():
    """Alias for /health; some orchestrators prefer the /health/live naming."""
    return {"status": "ok", "service": SERVICE_NAME}


async def _database_ok(session: AsyncSession) -> bool:
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
    except Exception as e:
        logger.error("Database health check failed", exc_info=e)
        return False
    return True


@router.get("/health/db")
async def health_check_db(session: AsyncSession = Depends(get_db_session)):
    if not await _database_ok(session):
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "component": "database",
                "error": "Database connection failed",
            },
        )
    return {"status": "healthy", "component": "database"}


@router.get("/health/ready")
async def health_check_ready(
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """
    Readiness probe.

    Returns 503 when the database is unreachable or when no webhook secret is
    configured, since payment notifications would be rejected.
    """
    checks = {
        "database": "healthy" if await _database_ok(session) else "unhealthy",
        "stripe_webhook_secret": "configured" if settings.stripe_webhook_secret else "missing",
    }
    ready = checks["database"] == "healthy" and checks["stripe_webhook_secret"] == "configured"
    content = {"status": "ready" if ready else "not_ready", "checks": checks}
    if not ready:
        return JSONResponse(status_code=503, content=content)
    return content
