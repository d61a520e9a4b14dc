"""
Health check endpoints for the ProcessHub API.

This module provides health monitoring and status endpoints.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, Union

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from tortoise.exceptions import BaseORMException

from ... import __version__
from ...core.database import ensure_connection, ping_database
from ...core.logging import get_logger
from ...core.redis import redis_manager
from ..models import HealthResponse

router = APIRouter(prefix="/health", tags=["health"])
logger = get_logger("api.health")

SERVICE_NAME = "ProcessHub API"
_started_at = time.time()


@router.get(
    "",
    response_model=HealthResponse,
    summary="Basic Health Check",
    description="Returns the basic health status of the ProcessHub API service",
)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Lightweight enough for load balancer checks; no dependencies are
    contacted.
    """
    return HealthResponse(status="healthy", service=SERVICE_NAME, version=__version__)


@router.get(
    "/detailed",
    response_model=HealthResponse,
    summary="Detailed Health Check",
    description="Returns health status including database and Redis checks",
)
async def detailed_health_check() -> HealthResponse:
    """
    Detailed health check endpoint.

    **Components Checked:**
    - API service status
    - Database connection (``SELECT 1``)
    - Redis connection (``PING``)

    The database is required; Redis only backs sign-up codes, so a Redis
    failure degrades the service without making it unhealthy.

    Returns:
        HealthResponse: Health status with components and metrics
    """
    start_time = time.time()

    database_ok = await ping_database()
    redis_ok = await redis_manager.ping()

    components = {
        "api": "healthy",
        "database": "healthy" if database_ok else "unhealthy",
        "redis": "healthy" if redis_ok else "unhealthy",
    }

    overall_status = "healthy"
    if not database_ok:
        overall_status = "unhealthy"
    elif not redis_ok:
        overall_status = "degraded"

    response_time = time.time() - start_time
    metrics = {
        "response_time_ms": round(response_time * 1000, 2),
        "uptime_seconds": int(time.time() - _started_at),
    }

    logger.info(
        "Health check completed",
        status=overall_status,
        response_time_ms=metrics["response_time_ms"],
    )
    return HealthResponse(
        status=overall_status,
        service=SERVICE_NAME,
        version=__version__,
        components=components,
        metrics=metrics,
    )


@router.get("/ready", response_model=None)
async def readiness_check() -> Union[Dict[str, Any], JSONResponse]:
    """
    Readiness check endpoint.

    The service is ready once the database answers. A stale connection
    pool is rebuilt first.

    Returns:
        Readiness status, or 503 when the database is unreachable
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        await ensure_connection()
    except (BaseORMException, OSError) as e:
        logger.warning("Database reconnect failed", error=str(e))
    if not await ping_database():
        logger.warning("Readiness check failed", reason="database unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "timestamp": timestamp,
                "service": SERVICE_NAME,
                "checks": {"database": "unavailable"},
            },
        )

    return {
        "status": "ready",
        "timestamp": timestamp,
        "service": SERVICE_NAME,
        "checks": {"database": "ready"},
    }


@router.get("/live", response_model=Dict[str, Any])
async def liveness_check() -> Dict[str, Any]:
    """Liveness check endpoint."""
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
    }
