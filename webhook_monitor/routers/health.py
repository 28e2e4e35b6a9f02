from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from webhook_monitor.config import Settings
from webhook_monitor.dependencies import get_app_settings, get_metrics, get_store
from webhook_monitor.events.store import EventStore
from webhook_monitor.metrics import APP_VERSION, MEMORY_WARN_MB, MetricsCollector, process_memory_mb


router = APIRouter(tags=["health"])


class HealthChecks(BaseModel):
    application: str
    memory: str
    event_store: str


class HealthMetrics(BaseModel):
    total_requests: int
    errors: int
    health_checks: int
    webhook_tests: int
    webhooks_received: int


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: int
    version: str
    environment: str
    request_id: str | None = None
    checks: HealthChecks
    metrics: HealthMetrics


def _check_memory() -> str:
    return "pass" if process_memory_mb() < MEMORY_WARN_MB else "warn"


def _check_store(store: EventStore) -> str:
    try:
        len(store)
    except Exception:
        return "fail"
    return "pass"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    response: Response,
    store: EventStore = Depends(get_store),
    metrics: MetricsCollector = Depends(get_metrics),
    settings: Settings = Depends(get_app_settings),
):
    metrics.record_health_check()

    checks = HealthChecks(
        application="pass",
        memory=_check_memory(),
        event_store=_check_store(store),
    )
    healthy = all(value == "pass" for value in checks.model_dump().values())
    if not healthy:
        response.status_code = 503

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime=int(metrics.uptime_seconds),
        version=APP_VERSION,
        environment=settings.environment,
        request_id=request.state.request_id,
        checks=checks,
        metrics=HealthMetrics(**metrics.counters()),
    )
