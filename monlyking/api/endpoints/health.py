"""Health check endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from redis import asyncio as aioredis

from monlyking.core.config import settings
from monlyking.core.database import get_db
from monlyking.core.redis import get_redis, RedisClient

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {"status": "healthy", "version": settings.APP_VERSION}


@router.get("/health/ready")
async def readiness_check(
    db: AsyncSession = Depends(get_db),
    redis: RedisClient = Depends(get_redis),
):
    """
    Readiness check - verify the database and Redis answer.
    Redis is skipped when it is disabled in settings.
    """
    checks = {"database": "unknown"}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except SQLAlchemyError as e:
        checks["database"] = f"unhealthy: {str(e)}"

    if settings.REDIS_ENABLED:
        try:
            if redis.redis:
                await redis.redis.ping()
                checks["redis"] = "healthy"
            else:
                checks["redis"] = "unhealthy: not connected"
        except aioredis.RedisError as e:
            checks["redis"] = f"unhealthy: {str(e)}"

    is_healthy = all(status == "healthy" for status in checks.values())

    return {
        "status": "healthy" if is_healthy else "unhealthy",
        "checks": checks,
    }


@router.get("/health/live")
async def liveness_check():
    """Liveness check - the process is serving requests."""
    return {"status": "alive"}
