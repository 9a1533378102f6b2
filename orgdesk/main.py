"""OrgDesk — FastAPI application entry point."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager

from sqlalchemy import text

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from orgdesk.config import DEFAULT_JWT_SECRET, settings
from orgdesk.database import engine, init_db
from orgdesk.logging_config import setup_logging

from orgdesk.api.rpc import router as rpc_router
from orgdesk.observability.metrics import metrics

logger = logging.getLogger("orgdesk")

VERSION = "0.3.0"

# Rate limiter
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit_default])


def _startup_checks() -> None:
    """Log warnings for misconfigured or missing settings."""
    startup_errors: list[str] = []

    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        msg = "JWT_SECRET is using the default value — set a strong secret for production"
        logger.warning(f"⚠  {msg}")
        if settings.is_production:
            startup_errors.append(msg)

    if settings.is_production and not settings.cors_origins_list:
        msg = "APP_ENV=production but CORS_ORIGINS is empty"
        logger.warning(f"⚠  {msg}")
        startup_errors.append(msg)

    if settings.is_production and "sqlite" in settings.database_url:
        msg = "APP_ENV=production with SQLite; use PostgreSQL for concurrent writers"
        logger.warning(f"⚠  {msg}")
        startup_errors.append(msg)

    if settings.strict_startup_validation and startup_errors:
        raise RuntimeError("Startup validation failed: " + " | ".join(startup_errors))

    if "sqlite" in settings.database_url:
        logger.info("○ Using SQLite — consider PostgreSQL for production workloads")
    if not settings.auto_create_schema:
        logger.info("○ Schema auto-creation disabled; run `alembic upgrade head`")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    setup_logging(settings.log_level)
    _startup_checks()

    await init_db()
    logger.info("✦ OrgDesk API started")
    logger.info(f"  Database: {settings.database_url}")

    yield

    await engine.dispose()
    logger.info("✦ OrgDesk API shutting down")


app = FastAPI(
    title="OrgDesk",
    description="Multi-tenant back office — organizations, LMS, blog and notes",
    version=VERSION,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request tracing + access log middleware
@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.perf_counter()

    response: Response = await call_next(request)

    duration_ms = round((time.perf_counter() - start) * 1000, 2)
    response.headers["X-Request-ID"] = request_id
    metrics.observe_request(request.url.path, response.status_code, duration_ms)
    logger.info(
        "request completed",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


# Security headers middleware
@app.middleware("http")
async def security_headers(request: Request, call_next):
    response: Response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if settings.is_production:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


# Routers
app.include_router(rpc_router)


@app.get("/")
async def root():
    return JSONResponse(
        {
            "service": "orgdesk-api",
            "status": "ok",
            "endpoints": {
                "health": "/api/health",
                "rpc": "/api/rpc",
                "docs": "/docs",
            },
        }
    )


async def _db_ready() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("database readiness check failed")
        return False


@app.get("/api/health")
async def health_check():
    database_ready = await _db_ready()
    return {
        "status": "healthy" if database_ready else "degraded",
        "service": "orgdesk",
        "version": VERSION,
        "database_ready": database_ready,
    }


@app.get("/api/health/live")
async def liveness_check():
    return {"status": "alive", "service": "orgdesk"}


@app.get("/api/metrics")
async def get_metrics():
    return {
        "service": "orgdesk",
        "version": VERSION,
        "metrics": metrics.snapshot(),
    }


@app.get("/api/health/ready")
async def readiness_check(response: Response):
    database_ready = await _db_ready()
    if not database_ready:
        response.status_code = 503

    return {
        "status": "ready" if database_ready else "not_ready",
        "checks": {"database": database_ready},
    }
