"""Health check endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.core.config import Settings, get_settings
from rbac_portal.app.core.database import get_db

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Basic health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness check - fails when the database cannot be reached.
    """
    health_status = {"status": "ready", "checks": {"database": "unknown"}}

    try:
        await db.execute(text("SELECT 1"))
        health_status["checks"]["database"] = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        health_status["checks"]["database"] = "failed"
        health_status["status"] = "not_ready"
        return JSONResponse(content=health_status, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    return health_status
