"""
Health Check Endpoints.

Endpoints:
- /health: Liveness check (process running)
- /health/ready: Readiness check (database, and Redis when tasks are queued)
- /health/detailed: Component status, integrations and pool metrics
"""

import asyncio
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy import text

from modules.backend.core.config import get_app_config, get_redis_url
from modules.backend.core.database import get_session_factory
from modules.backend.core.dependencies import DbSession, bearer_scheme, get_current_user
from modules.backend.core.exceptions import AuthorizationError
from modules.backend.core.logging import get_logger
from modules.backend.core.utils import utc_now
from modules.backend.models.user import UserRole

router = APIRouter()
logger = get_logger(__name__)


async def check_database() -> dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict with status, latency, and optional error message
    """
    try:
        start = utc_now()
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
        latency_ms = int((utc_now() - start).total_seconds() * 1000)
        return {"status": "healthy", "latency_ms": latency_ms}
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}


async def check_redis() -> dict[str, Any]:
    """Check Redis connectivity. Redis is only used as the task broker."""
    if not get_app_config().features.background_tasks_enabled:
        return {"status": "not_configured"}

    import redis.asyncio as redis

    try:
        start = utc_now()
        client = redis.from_url(get_redis_url())
        await client.ping()
        await client.aclose()
        latency_ms = int((utc_now() - start).total_seconds() * 1000)
        return {"status": "healthy", "latency_ms": latency_ms}
    except Exception as e:
        logger.warning("Redis health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}


async def _run_checks(timeout: float | None = None) -> dict[str, dict[str, Any]]:
    db_result: dict[str, Any] = {"status": "error", "error": "check did not run"}
    redis_result: dict[str, Any] = {"status": "error", "error": "check did not run"}

    try:
        async with asyncio.timeout(timeout):
            async with asyncio.TaskGroup() as tg:
                db_task = tg.create_task(check_database())
                redis_task = tg.create_task(check_redis())
            db_result = db_task.result()
            redis_result = redis_task.result()
    except* Exception as eg:
        for exc in eg.exceptions:
            logger.warning("Health check task failed", extra={"error": str(exc)})

    return {"database": db_result, "redis": redis_result}


async def require_detailed_access(
    session: DbSession,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> None:
    """Admin token required when observability.yaml asks for it."""
    if not get_app_config().observability.health_checks.detailed_auth_required:
        return
    user = await get_current_user(session, credentials)
    if user.role != UserRole.ADMIN.value:
        raise AuthorizationError("Insufficient permissions")


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns 200 if the process is running. No dependency checks.
    """
    return {"status": "healthy"}


@router.get("/health/ready", response_model=None)
async def readiness_check() -> dict[str, Any] | JSONResponse:
    """
    Readiness check.

    Returns 503 if any critical dependency is unhealthy.
    """
    timeout = get_app_config().observability.health_checks.ready_timeout_seconds
    checks = await _run_checks(timeout)

    unhealthy_checks = [
        name for name, check in checks.items()
        if check.get("status") in ("unhealthy", "error")
    ]
    if unhealthy_checks:
        logger.warning(
            "Readiness check failed",
            extra={"unhealthy": unhealthy_checks, "checks": checks},
        )
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "checks": checks,
                "timestamp": utc_now().isoformat(),
            },
        )

    return {
        "status": "healthy",
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }


@router.get("/health/detailed", dependencies=[Depends(require_detailed_access)])
async def detailed_health_check() -> dict[str, Any]:
    """
    Detailed health check.

    Dependency checks, enabled integrations and pool metrics.
    """
    checks = await _run_checks()

    app_config = get_app_config()
    app_settings = app_config.application
    features = app_config.features

    statuses = [check.get("status") for check in checks.values()]
    overall_status = "unhealthy" if "unhealthy" in statuses or "error" in statuses else "healthy"

    return {
        "status": overall_status,
        "application": {
            "name": app_settings.name,
            "env": app_settings.environment,
            "debug": app_settings.debug,
            "version": app_settings.version,
        },
        "checks": checks,
        "integrations": {
            "microsoft_graph": features.integration_microsoft_graph_enabled,
            "bunny": features.integration_bunny_enabled,
            "notifications": features.notifications_enabled,
            "background_tasks": features.background_tasks_enabled,
        },
        "pools": _get_pool_status(),
        "timestamp": utc_now().isoformat(),
    }


def _get_pool_status() -> dict[str, Any]:
    """Collect current pool and semaphore metrics for health reporting."""
    from modules.backend.core.concurrency import _io_pool, _semaphore_capacities, _semaphores

    pools: dict[str, Any] = {}

    if _io_pool is not None:
        pools["thread_pool"] = {"max_workers": _io_pool._max_workers}

    if _semaphores:
        pools["semaphores"] = {
            name: {
                "capacity": _semaphore_capacities.get(name, "unknown"),
                "available": sem._value,
            }
            for name, sem in _semaphores.items()
        }

    return pools
