"""
Temp File Host - Main Application

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import structlog
from datetime import datetime, timezone

from config import settings, check_store, close_content_store
from services.sweep_service import SweepScheduler, get_sweep_service

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.log_level)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Report configuration, start the cleanup sweep schedule
    Shutdown: Stop sweeps, close the store client
    """
    # Startup
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug,
        owner=settings.github_owner,
        repo=settings.github_repo,
        branch=settings.github_branch,
        token_set=bool(settings.github_token)
    )

    if not settings.store_configured:
        # Still serve /health so the missing settings are visible
        logger.error(
            "store_not_configured",
            missing=settings.missing_store_settings
        )

    scheduler = SweepScheduler(
        get_sweep_service(),
        settings.sweep_trigger,
        run_immediately=settings.sweep_on_startup
    )
    scheduler.start()
    app.state.sweep_scheduler = scheduler

    yield

    # Shutdown
    logger.info("application_shutting_down")
    await scheduler.stop()
    await close_content_store()


# Create FastAPI app
app = FastAPI(
    title="Temp File Host",
    description="Uploads files to a GitHub repository and deletes them after 24 hours",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check(deep: bool = False):
    """
    Health check endpoint.

    Args:
        deep: Also call the GitHub API to verify the repository is reachable

    Returns:
        Liveness, which store settings are present, and the last sweep outcome
    """
    last_report = get_sweep_service().last_report

    body = {
        "status": "healthy" if settings.store_configured else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "config": {
            "token": bool(settings.github_token),
            "owner": bool(settings.github_owner),
            "repo": bool(settings.github_repo),
            "branch": bool(settings.github_branch),
        },
        "sweep": last_report.model_dump(mode="json", by_alias=True) if last_report else None,
    }

    if deep:
        store_status = await check_store()
        body["store"] = store_status
        if store_status["status"] != "healthy":
            body["status"] = "degraded"

    return body


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.files import router as files_router
from routes.pages import router as pages_router

app.include_router(files_router)
app.include_router(pages_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
