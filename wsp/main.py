# wsp/main.py
"""
Planner API with data backend and Redis lifecycle management.
"""

import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request

from wsp.config import settings
from wsp.db.pool import db_pool
from wsp.infrastructure.observability.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from wsp.routes import (
    calendar,
    dashboard,
    focus,
    health,
    management,
    protected,
    tasks,
    unplanned,
    view_state,
    workspace,
)
from wsp.services.redis_client import fast_redis

# Setup logging before creating the app
setup_logging(log_level=settings.log_level, json_logs=settings.environment != "development")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""

    logger.info(
        "Application starting",
        environment=settings.environment,
        debug=settings.debug,
        data_backend=settings.DATA_BACKEND,
    )

    startup_tasks = []

    try:
        # Database pool first; the local backend needs none
        if settings.DATA_BACKEND == "postgres":
            logger.info("Initializing database pool")
            await db_pool.initialize()
            startup_tasks.append("database_pool")

        # Redis is optional: view state is simply not persisted without it
        if fast_redis.configured:
            logger.info("Initializing Redis connection")
            await fast_redis.initialize()
            startup_tasks.append("redis")
        else:
            logger.info("REDIS_URL not set, view state will not be persisted")

        logger.info("All services initialized successfully", services=startup_tasks)

    except Exception as e:
        logger.error("Failed to initialize services", error=str(e), completed_tasks=startup_tasks)

        # Clean up any successfully initialized services in reverse order
        if "redis" in startup_tasks:
            await fast_redis.close()
        if "database_pool" in startup_tasks:
            await db_pool.close()

        raise

    yield

    # Shutdown sequence (reverse order)
    logger.info("Application shutting down")

    if "redis" in startup_tasks:
        logger.info("Closing Redis connection")
        await fast_redis.close()

    if "database_pool" in startup_tasks:
        logger.info("Closing database pool")
        await db_pool.close()

    logger.info("All services closed")


app = FastAPI(
    title="WSP Weekly Planner",
    description="Multi-tenant weekly task planner API",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(protected.router)
app.include_router(calendar.router)
app.include_router(workspace.router)
app.include_router(tasks.router)
app.include_router(unplanned.router)
app.include_router(focus.router)
app.include_router(dashboard.router)
app.include_router(management.router)
app.include_router(view_state.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing; every entry inside carries the request id."""
    request.state.request_id = request.headers.get("X-Request-ID") or str(uuid4())
    bind_request_context(request.state.request_id)
    start_time = time.time()
    try:
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000

        response.headers["X-Request-ID"] = request.state.request_id
        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "HTTP request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(process_time, 2),
        )
        return response
    finally:
        clear_request_context()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
