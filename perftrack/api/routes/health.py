from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from perftrack.api.deps import get_db_session
from perftrack.core.config import get_settings
from perftrack.infrastructure.db.session import STORAGE_ERRORS

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_database(session: AsyncSession) -> dict:
    try:
        await session.execute(text("SELECT 1"))
    except STORAGE_ERRORS as e:
        return {"status": "error", "message": str(e)[:100]}
    return {"status": "ok"}


@router.get("/health", summary="Service health check")
async def health_check(session: AsyncSession = Depends(get_db_session)) -> dict:
    """Return basic service and datastore status information."""
    settings = get_settings()
    database_status = await check_database(session)

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": "ok" if database_status.get("status") == "ok" else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": {"database": database_status},
    }
    logger.info("health_check", **payload)
    return payload
