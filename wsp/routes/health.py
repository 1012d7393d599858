# wsp/routes/health.py
"""
Health check endpoints with database pool and Redis monitoring.
"""

import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from wsp.config import settings
from wsp.db.client import DataClient, get_data_client
from wsp.db.helpers import DatabaseError
from wsp.db.pool import db_pool
from wsp.services.redis_client import fast_redis

router = APIRouter()

SERVICE_NAME = "wsp-planner"


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": SERVICE_NAME}


async def _check_database(client: DataClient) -> dict:
    t0 = time.time()
    if client.backend == "local":
        try:
            await client.table("companies").select().limit(1).execute()
            return {"ok": True, "backend": "local", "latency_ms": round((time.time() - t0) * 1000, 1)}
        except DatabaseError as e:
            return {"ok": False, "backend": "local", "error": str(e)}

    db_health = await db_pool.health_check()
    check = {
        "ok": db_health.get("healthy", False),
        "backend": "postgres",
        "latency_ms": round((time.time() - t0) * 1000, 1),
    }
    if "pool_stats" in db_health:
        pool_stats = db_health["pool_stats"]
        check.update(
            {
                "pool_size": pool_stats.get("pool_size", 0),
                "pool_available": pool_stats.get("pool_available", 0),
                "pool_utilization_percent": pool_stats.get("pool_utilization_percent", 0),
                "connection_time_ms": db_health.get("connection_time_ms", 0),
            }
        )
    if not check["ok"]:
        check["error"] = db_health.get("error", "Database unhealthy")
        if "error_type" in db_health:
            check["error_type"] = db_health["error_type"]
    return check


@router.get("/readyz")
async def readyz(client: DataClient = Depends(get_data_client)):
    """
    Readiness check across the data backend, Redis and configuration.
    Redis is optional; it only counts when REDIS_URL is set.
    """
    checks = {}

    # 1) Data backend
    checks["database"] = await _check_database(client)
    overall_ok = checks["database"]["ok"]

    # 2) Redis
    if fast_redis.configured:
        t0 = time.time()
        redis_ok = await fast_redis.ping()
        checks["redis"] = {"ok": redis_ok, "latency_ms": round((time.time() - t0) * 1000, 1)}
        overall_ok = overall_ok and redis_ok
    else:
        checks["redis"] = {"ok": True, "enabled": False}

    # 3) Configuration
    config_issues = []
    if settings.DATA_BACKEND == "postgres":
        if not settings.SUPABASE_DB_URL:
            config_issues.append("SUPABASE_DB_URL not set")
        if not settings.SUPABASE_URL:
            config_issues.append("SUPABASE_URL not set")
        if not settings.SUPABASE_SERVICE_ROLE_KEY:
            config_issues.append("SUPABASE_SERVICE_ROLE_KEY not set")
    checks["config"] = {"ok": not config_issues, "issues": config_issues}
    overall_ok = overall_ok and not config_issues

    body = {"status": "ready" if overall_ok else "not_ready", "checks": checks}
    return JSONResponse(status_code=200 if overall_ok else 503, content=body)
