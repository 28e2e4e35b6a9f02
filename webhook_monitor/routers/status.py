"""Status endpoints - service dashboard, API status and GitHub integration info."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from webhook_monitor.config import Settings
from webhook_monitor.dependencies import get_app_settings, get_metrics, get_store
from webhook_monitor.events.store import EventStore
from webhook_monitor.metrics import APP_VERSION, MetricsCollector
from webhook_monitor.rate_limit import get_rate_limit_string, limiter, rate_limit_exempt


router = APIRouter(tags=["status"])
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


class EndpointInfo(BaseModel):
    method: str
    path: str
    description: str


ENDPOINTS = [
    EndpointInfo(method="GET", path="/", description="Service status dashboard"),
    EndpointInfo(method="GET", path="/health", description="Health checks"),
    EndpointInfo(method="GET", path="/metrics", description="Process and request metrics"),
    EndpointInfo(method="GET", path="/api/status", description="API status and rate limits"),
    EndpointInfo(method="GET", path="/api/github", description="GitHub integration info"),
    EndpointInfo(method="POST", path="/api/webhook", description="GitHub webhook receiver"),
    EndpointInfo(method="GET", path="/api/events", description="Stored webhook events"),
    EndpointInfo(method="GET", path="/api/stats", description="Webhook event counts"),
    EndpointInfo(method="POST", path="/api/webhook/test", description="Webhook delivery test"),
]


def available_endpoints() -> list[str]:
    return [f"{e.method} {e.path}" for e in ENDPOINTS]


class EndpointState(BaseModel):
    status: str
    path: str


class RateLimitInfo(BaseModel):
    enabled: bool
    requests_per_window: int
    window_duration: str
    current_usage: int


class ApiStatusResponse(BaseModel):
    api_version: str
    status: str
    endpoints: dict[str, EndpointState]
    rate_limits: RateLimitInfo
    last_webhook_test: str | None = None
    total_webhook_tests: int
    total_webhooks_received: int
    stored_events: int
    request_id: str | None = None
    timestamp: str


@router.get("/")
async def dashboard(
    request: Request,
    metrics: MetricsCollector = Depends(get_metrics),
    settings: Settings = Depends(get_app_settings),
):
    """Service status dashboard."""
    logger.info(
        "Status dashboard accessed",
        extra={"request_id": request.state.request_id, "user_agent": request.headers.get("user-agent")},
    )
    return {
        "application": "Webhook Monitor",
        "version": APP_VERSION,
        "environment": settings.environment,
        "status": "operational",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": int(metrics.uptime_seconds),
        "request_id": request.state.request_id,
        "features": [
            "Webhook ingestion",
            "Event queries and statistics",
            "Health monitoring",
            "Performance metrics",
            "Webhook delivery testing",
        ],
        "endpoints": {
            "health": "/health",
            "metrics": "/metrics",
            "github": "/api/github",
            "webhook": "/api/webhook",
            "events": "/api/events",
            "stats": "/api/stats",
            "webhook_test": "/api/webhook/test",
        },
    }


@router.get("/api/status", response_model=ApiStatusResponse)
@limiter.limit(get_rate_limit_string, exempt_when=rate_limit_exempt)
async def api_status(
    request: Request,
    store: EventStore = Depends(get_store),
    metrics: MetricsCollector = Depends(get_metrics),
    settings: Settings = Depends(get_app_settings),
):
    test_state = "active" if settings.feature_webhook_testing else "disabled"
    counters = metrics.counters()
    last_test = metrics.last_webhook_test

    return ApiStatusResponse(
        api_version=API_VERSION,
        status="operational",
        endpoints={
            "health": EndpointState(status="active", path="/health"),
            "metrics": EndpointState(
                status="active" if settings.feature_metrics_collection else "disabled", path="/metrics"
            ),
            "github": EndpointState(status="active", path="/api/github"),
            "webhook": EndpointState(status="active", path="/api/webhook"),
            "events": EndpointState(status="active", path="/api/events"),
            "stats": EndpointState(status="active", path="/api/stats"),
            "webhook_test": EndpointState(status=test_state, path="/api/webhook/test"),
        },
        rate_limits=RateLimitInfo(
            enabled=settings.rate_limit_enabled,
            requests_per_window=settings.rate_limit_max,
            window_duration=f"{settings.rate_limit_window_minutes} minutes",
            current_usage=counters["total_requests"] % settings.rate_limit_max,
        ),
        last_webhook_test=last_test.isoformat() if last_test else None,
        total_webhook_tests=counters["webhook_tests"],
        total_webhooks_received=counters["webhooks_received"],
        stored_events=len(store),
        request_id=request.state.request_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/api/github")
@limiter.limit(get_rate_limit_string, exempt_when=rate_limit_exempt)
async def github_info(request: Request):
    """What the GitHub side of the integration is expected to send."""
    return {
        "purpose": "GitHub webhook ingestion and CI/CD integration testing",
        "supported_events": ["push", "pull_request"],
        "workflows": [
            "Continuous Integration",
            "Production Deployment",
            "Webhook Integration Testing",
        ],
        "features": {
            "push_events": True,
            "pull_request_events": True,
            "merge_detection": True,
            "signature_verification": False,
        },
        "webhook_endpoint": "/api/webhook",
        "webhook_test_endpoint": "/api/webhook/test",
        "request_id": request.state.request_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
