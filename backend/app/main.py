import re as _re
import time as _time
import uuid as _uuid
from contextlib import asynccontextmanager

import sentry_sdk
import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.auth.routes import router as auth_router
from app.bookings.routes import router as bookings_router
from app.config import settings
from app.database import async_session
from app.invoices.routes import router as invoices_router
from app.middleware import SecurityHeadersMiddleware
from app.providers.routes import router as providers_router
from app.services.email_service import close_email_client
from app.utils.rate_limit import limiter
from app.vehicles.routes import router as vehicles_router

# Configure structlog: JSON in production, console in development
processors = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]
if settings.is_production:
    processors.append(structlog.processors.format_exc_info)
    processors.append(structlog.processors.JSONRenderer())
else:
    processors.append(structlog.dev.ConsoleRenderer())

structlog.configure(
    processors=processors,
    wrapper_class=structlog.make_filtering_bound_logger(0),
)

logger = structlog.get_logger()

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=0.1,
        environment=settings.APP_ENV,
        send_default_pii=False,
    )


async def _check_alembic_migration_version() -> None:
    """Warn when the database is not at the alembic head revision. Never raises."""
    try:
        from alembic.config import Config as AlembicConfig
        from alembic.script import ScriptDirectory

        script = ScriptDirectory.from_config(AlembicConfig("alembic.ini"))
        head_rev = script.get_current_head()

        async with async_session() as session:
            conn = await session.connection()

            def _get_current_rev(connection):
                if not connection.dialect.has_table(connection, "alembic_version"):
                    return None
                row = connection.execute(text("SELECT version_num FROM alembic_version")).fetchone()
                return row[0] if row else None

            current_rev = await conn.run_sync(_get_current_rev)

        if current_rev is None:
            logger.warning("alembic_version_check", status="no_alembic_version_table")
        elif current_rev != head_rev:
            logger.warning(
                "alembic_version_mismatch",
                current=current_rev,
                head=head_rev,
                message="Run 'alembic upgrade head'.",
            )
        else:
            logger.info("alembic_version_ok", version=current_rev)
    except Exception as exc:
        logger.warning("alembic_version_check_failed", error=str(exc))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("vse_startup", env=settings.APP_ENV)
    await _check_alembic_migration_version()
    yield
    await close_email_client()
    logger.info("vse_shutdown")


app = FastAPI(
    title="Vehicle Service Ecosystem API",
    description="Vehicle owners book garages, carriers and detailers; providers run bookings and issue invoices",
    version="0.1.0",
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json",
)

app.state.limiter = limiter


# Every error leaves the API as {"error": "<message>"}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        # Drop the leading "body"/"query"/"path" segment
        field = ".".join(str(part) for part in err.get("loc", ())[1:])
        messages.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "; ".join(messages) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": _format_validation_errors(exc)})


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("rate_limit_exceeded", path=request.url.path, limit=str(exc.detail))
    return JSONResponse(status_code=429, content={"error": f"Rate limit exceeded: {exc.detail}"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Unexpected failures are logged with their traceback and reported opaquely."""
    logger.exception("unhandled_exception", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Middleware is LIFO: CORS is added first so it runs last.
if settings.is_production:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )
    if not settings.cors_origins_list:
        logger.warning("cors_origins_empty_in_production", app_env=settings.APP_ENV)
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list or ["http://localhost:5173", "http://localhost:3000"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(SecurityHeadersMiddleware, is_production=settings.is_production)


_REQUEST_ID_RE = _re.compile(r"^[a-zA-Z0-9\-]{1,64}$")


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Attach a request ID to the log context and response, and flag slow requests."""
    # Client-supplied IDs are only reused when they cannot inject into logs
    client_id = request.headers.get("X-Request-ID")
    request_id = client_id if client_id and _REQUEST_ID_RE.match(client_id) else str(_uuid.uuid4())
    structlog.contextvars.bind_contextvars(request_id=request_id)
    start = _time.monotonic()
    try:
        response = await call_next(request)
        duration_ms = (_time.monotonic() - start) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{duration_ms:.1f}ms"
        if duration_ms > 1000:
            logger.warning(
                "slow_request",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 1),
                status_code=response.status_code,
            )
        return response
    finally:
        structlog.contextvars.clear_contextvars()


# Custom instrumentation instead of metrics.default(), which fails on
# non-numeric Content-Length headers.
def _safe_metrics(info) -> None:
    from prometheus_client import Counter, Histogram

    if not hasattr(_safe_metrics, "_total"):
        _safe_metrics._total = Counter(
            "vse_http_requests_total", "Total HTTP requests",
            ["method", "status", "handler"],
        )
        _safe_metrics._latency = Histogram(
            "vse_http_request_duration_seconds", "Request latency",
            ["method", "handler"],
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30),
        )
    _safe_metrics._total.labels(info.method, info.modified_status, info.modified_handler).inc()
    _safe_metrics._latency.labels(info.method, info.modified_handler).observe(info.modified_duration)


Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/health", "/metrics"],
).add(_safe_metrics).instrument(app)


@app.get("/metrics", include_in_schema=False)
async def metrics_endpoint(request: Request):
    """Prometheus metrics, guarded by X-Metrics-Key when METRICS_API_KEY is set."""
    from prometheus_client import generate_latest
    from starlette.responses import Response as StarletteResponse

    if settings.is_production and not settings.METRICS_API_KEY:
        raise HTTPException(status_code=503, detail="Metrics not available")

    if settings.METRICS_API_KEY:
        api_key = request.headers.get("x-metrics-key", "")
        if api_key != settings.METRICS_API_KEY:
            raise HTTPException(status_code=403, detail="Invalid metrics API key")

    return StarletteResponse(
        content=generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(bookings_router, prefix="/api/bookings", tags=["bookings"])
app.include_router(invoices_router, prefix="/api/invoices", tags=["invoices"])
app.include_router(providers_router, prefix="/api/providers", tags=["providers"])
app.include_router(vehicles_router, prefix="/api/vehicles", tags=["vehicles"])


async def _redis_available() -> bool:
    import redis.asyncio as aioredis
    from redis.exceptions import RedisError

    r = aioredis.from_url(settings.REDIS_URL, socket_connect_timeout=2)
    try:
        await r.ping()
        return True
    except (RedisError, OSError):
        return False
    finally:
        await r.aclose()


@app.get("/health")
@limiter.limit("60/minute")
async def health_check(request: Request):
    """Database connectivity is required; Redis is optional (lockout falls back to memory)."""
    try:
        async with async_session() as db:
            await db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("health_check_database_failed")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "disconnected", "redis": "unknown"},
        )

    redis_ok = await _redis_available()
    if settings.is_production and not redis_ok:
        return {"status": "degraded", "database": "connected", "redis": "unavailable"}
    return {
        "status": "ok",
        "database": "connected",
        "redis": "connected" if redis_ok else "unavailable",
    }
