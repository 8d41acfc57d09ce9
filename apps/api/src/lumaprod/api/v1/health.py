"""
Health check endpoints.

Provides system health information for monitoring and load balancers.
"""

from datetime import UTC, datetime
from typing import Any

import redis
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from lumaprod import __version__
from lumaprod.core.config import Settings, get_settings
from lumaprod.core.database import get_db
from lumaprod.schemas.common import HealthResponse

router = APIRouter()


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health Check",
    description="Returns the health status of the API and its dependencies.",
)
async def health_check(
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> HealthResponse:
    """
    Perform health check on the API and its dependencies.

    Checks:
    - Database connectivity
    - Redis connectivity (Celery broker)

    A Redis failure degrades the service (emails and bulk generation wait)
    but does not make it unhealthy.
    """
    checks: dict[str, dict[str, Any]] = {
        "database": check_database(db),
        "redis": check_redis(settings),
    }

    if checks["database"]["status"] != "healthy":
        overall_status = "unhealthy"
    elif all(c["status"] == "healthy" for c in checks.values()):
        overall_status = "healthy"
    else:
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=__version__,
        environment=settings.environment,
        timestamp=datetime.now(UTC),
        checks=checks,
    )


@router.get(
    "/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness Probe",
    description="Simple liveness check for Kubernetes probes.",
)
async def liveness() -> dict[str, str]:
    """Returns OK while the process is up; dependencies are not checked."""
    return {"status": "ok"}


@router.get(
    "/ready",
    status_code=status.HTTP_200_OK,
    summary="Readiness Probe",
    description="Readiness check for Kubernetes probes.",
)
async def readiness(
    db: Session = Depends(get_db),
) -> Any:
    """Ready once the database answers; 503 otherwise."""
    if check_database(db)["status"] == "healthy":
        return {"status": "ready"}

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": "database_unavailable"},
    )


def check_database(db: Session) -> dict[str, Any]:
    """
    Check database connectivity.

    Args:
        db: Database session

    Returns:
        Health check result for database
    """
    try:
        db.execute(text("SELECT 1")).fetchone()
    except Exception as e:
        return {
            "status": "unhealthy",
            "message": f"Database connection failed: {str(e)}",
        }
    return {
        "status": "healthy",
        "message": "Database connection successful",
    }


def check_redis(settings: Settings) -> dict[str, Any]:
    """
    Check Redis connectivity.

    Args:
        settings: Application settings

    Returns:
        Health check result for Redis
    """
    try:
        client = redis.from_url(settings.redis_url, socket_connect_timeout=2)
        try:
            client.ping()
        finally:
            client.close()
    except Exception as e:
        return {
            "status": "unhealthy",
            "message": f"Redis connection failed: {str(e)}",
        }
    return {
        "status": "healthy",
        "message": "Redis connection successful",
    }
