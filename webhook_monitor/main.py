"""Webhook Monitor - FastAPI application entry point."""

import logging
import time
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from webhook_monitor.config import Settings, config_summary, get_settings, validate_config
from webhook_monitor.errors import format_validation_errors
from webhook_monitor.events.store import EventStore
from webhook_monitor.logging_config import configure_logging
from webhook_monitor.metrics import APP_VERSION, MetricsCollector
from webhook_monitor.rate_limit import bind_settings, limiter, unbind_settings
from webhook_monitor.routers import health, metrics, status, webhooks

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


async def route_not_found(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "error": "Route not found",
            "message": f"Cannot {request.method} {request.url.path}",
            "available_endpoints": status.available_endpoints(),
            "request_id": _request_id(request),
        },
    )


async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Starlette raises a bare 404 when no route matches and a bare 405 when the
    # path exists under another method; both get the endpoint directory
    if (exc.status_code, exc.detail) in ((404, "Not Found"), (405, "Method Not Allowed")):
        logger.warning(
            "Route not found",
            extra={"request_id": _request_id(request), "method": request.method, "path": request.url.path},
        )
        return await route_not_found(request, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail, "request_id": _request_id(request)},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "message": "Invalid request",
            "errors": format_validation_errors(exc),
            "request_id": _request_id(request),
        },
    )


async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled application error",
        exc_info=exc,
        extra={"request_id": _request_id(request), "method": request.method, "path": request.url.path},
    )
    settings: Settings = request.app.state.settings
    request_id = _request_id(request)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": str(exc) if settings.debug else "Something went wrong",
            "request_id": request_id,
        },
        headers={"X-Request-ID": request_id} if request_id else None,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info("Webhook Monitor started", extra=config_summary(settings))
    yield
    logger.info("Webhook Monitor shutting down", extra={"stored_events": len(app.state.store)})


def create_app(
    settings: Settings | None = None,
    store: EventStore | None = None,
    metrics_collector: MetricsCollector | None = None,
) -> FastAPI:
    """Build the application with its own settings, event store and metrics."""
    settings = settings or get_settings()

    validation = validate_config(settings)
    for warning in validation.warnings:
        logger.warning(f"Configuration warning: {warning}")
    if not validation.valid:
        raise ValueError(f"Invalid configuration: {'; '.join(validation.errors)}")

    app = FastAPI(
        title="Webhook Monitor",
        description="GitHub webhook ingestion with event queries, health and metrics",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store if store is not None else EventStore()
    app.state.metrics = metrics_collector if metrics_collector is not None else MetricsCollector()

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(StarletteHTTPException, http_error)
    app.add_exception_handler(RequestValidationError, request_validation_error)
    app.add_exception_handler(Exception, unhandled_error)

    @app.middleware("http")
    async def track_requests(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        collector: MetricsCollector = request.app.state.metrics
        collector.record_request()
        started = time.perf_counter()
        token = bind_settings(request.app.state.settings)

        try:
            response = await call_next(request)
        except Exception:
            collector.record_error()
            raise
        finally:
            unbind_settings(token)

        if response.status_code >= 400:
            collector.record_error()
        response.headers["X-Request-ID"] = request_id
        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "request_id": request_id,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers (status holds "/" and the /api/status, /api/github routes)
    app.include_router(status.router)
    app.include_router(health.router)
    app.include_router(metrics.router)
    app.include_router(webhooks.router, prefix="/api", tags=["webhooks"])

    return app


app = create_app()


def run() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    settings = get_settings()
    configure_logging(settings.effective_log_level)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
