"""
Health check endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from adwarden.core.deps import get_db, get_connection_counter
from adwarden.core.config import settings
from adwarden.services.realtime import ConnectionCounter

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


@router.get("/health/db")
async def database_health(db: AsyncSession = Depends(get_db)):
    """Database health check"""
    try:
        await db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "database": "connected"
        }
    except (SQLAlchemyError, OSError) as e:
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e) if not settings.is_production else None
        }


@router.get("/health/redis")
async def redis_health(counter: ConnectionCounter = Depends(get_connection_counter)):
    """Redis health check (realtime features degrade without it)"""
    if await counter.is_available():
        return {"status": "healthy", "redis": "connected"}
    return {"status": "degraded", "redis": "unavailable"}
