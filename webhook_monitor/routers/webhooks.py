"""Webhook ingestion endpoint - normalizes GitHub webhooks into stored events."""

import json
import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from webhook_monitor.config import Settings, is_feature_enabled
from webhook_monitor.dependencies import get_app_settings, get_metrics, get_store, verify_api_key
from webhook_monitor.errors import EventValidationError
from webhook_monitor.events.models import EventStats, WebhookEvent
from webhook_monitor.events.normalizer import normalize_event
from webhook_monitor.events.store import DEFAULT_LIMIT, EventStore
from webhook_monitor.events.validation import validate_test_payload
from webhook_monitor.metrics import MetricsCollector
from webhook_monitor.rate_limit import get_rate_limit_string, limiter, rate_limit_exempt
from webhook_monitor.sender import send_webhook

router = APIRouter()
logger = logging.getLogger(__name__)


def _parse_int(value: str | None, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _invalid(errors: list[str]) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": "Invalid webhook data", "errors": errors})


@router.post("/webhook")
@limiter.limit(get_rate_limit_string, exempt_when=rate_limit_exempt)
async def receive_webhook(
    request: Request,
    x_github_event: str | None = Header(default=None),
    x_github_delivery: str | None = Header(default=None),
    x_hub_signature_256: str | None = Header(default=None),
    store: EventStore = Depends(get_store),
    metrics: MetricsCollector = Depends(get_metrics),
):
    """Receive a GitHub webhook, normalize it and store the resulting event."""
    request_id = x_github_delivery or str(uuid.uuid4())
    metrics.record_webhook_received()
    # Signatures are not verified; presence is logged for troubleshooting only
    logger.info(
        "Webhook received",
        extra={
            "event_kind": x_github_event,
            "delivery_id": request_id,
            "signed": x_hub_signature_256 is not None,
        },
    )

    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _invalid(["payload: Request body is not valid JSON"])

    try:
        candidate = normalize_event(x_github_event, payload, request_id)
    except EventValidationError as e:
        logger.warning(
            "Rejected webhook payload",
            extra={"event_kind": x_github_event, "delivery_id": request_id, "errors": e.errors},
        )
        return _invalid(e.errors)

    if candidate is None:
        return {"message": "Event type not supported"}

    event = store.create(candidate)
    logger.info(
        "Stored webhook event",
        extra={"event_id": event.id, "action": event.action.value, "repository": event.repository},
    )
    return {"message": "Webhook received", "event": event.model_dump(mode="json")}


@router.get("/events", response_model=list[WebhookEvent], dependencies=[Depends(verify_api_key)])
@limiter.limit(get_rate_limit_string, exempt_when=rate_limit_exempt)
async def list_events(
    request: Request,
    limit: str | None = Query(default=None, description=f"Page size (default {DEFAULT_LIMIT})"),
    offset: str | None = Query(default=None, description="Events to skip (default 0)"),
    event_type: str | None = Query(
        default=None, alias="type", description="'push', 'pull_request', 'merge' or 'all'"
    ),
    store: EventStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """List stored events, most recent first."""
    page_size = _parse_int(limit, DEFAULT_LIMIT)
    if page_size <= 0:
        page_size = DEFAULT_LIMIT
    skip = max(_parse_int(offset, 0), 0)

    try:
        return store.list(limit=page_size, offset=skip, action_filter=event_type)
    except Exception as e:
        logger.exception("Failed to fetch events")
        detail = f"Failed to fetch events: {e}" if settings.debug else "Failed to fetch events"
        raise HTTPException(500, detail) from e


@router.get("/stats", response_model=EventStats, dependencies=[Depends(verify_api_key)])
@limiter.limit(get_rate_limit_string, exempt_when=rate_limit_exempt)
async def get_stats(
    request: Request,
    store: EventStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """Aggregate counts per event action.

    Keys are snake_case: total, push_count, pull_request_count, merge_count.
    """
    try:
        return store.stats()
    except Exception as e:
        logger.exception("Failed to fetch stats")
        detail = f"Failed to fetch stats: {e}" if settings.debug else "Failed to fetch stats"
        raise HTTPException(500, detail) from e


# ---------------------------------------------------------------------------
# Webhook testing
# ---------------------------------------------------------------------------


class WebhookTestRequest(BaseModel):
    target_url: str | None = None
    event_type: str = "push"
    payload: dict = {}
    dispatch: bool = False


def _default_test_payload() -> dict:
    return {
        "repository": {
            "name": "webhook-monitor",
            "full_name": "webhook-monitor/webhook-monitor",
        },
        "pusher": {"name": "GitHub Actions Bot"},
        "head_commit": {
            "id": uuid.uuid4().hex,
            "message": "Automated test from webhook-monitor",
            "author": {"name": "GitHub Actions", "email": "actions@github.com"},
        },
        "ref": "refs/heads/main",
    }


@router.post("/webhook/test", dependencies=[Depends(verify_api_key)])
@limiter.limit(get_rate_limit_string, exempt_when=rate_limit_exempt)
async def test_webhook(
    request: Request,
    body: WebhookTestRequest,
    metrics: MetricsCollector = Depends(get_metrics),
    settings: Settings = Depends(get_app_settings),
):
    """Validate a test payload and simulate (or actually send) its delivery."""
    if not is_feature_enabled(settings, "webhook_testing"):
        raise HTTPException(404, "Webhook testing is disabled")

    metrics.record_webhook_test()
    request_id = request.state.request_id

    webhook_payload = {**_default_test_payload(), **body.payload}
    errors = validate_test_payload(webhook_payload, body.event_type)
    if errors:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid webhook payload", "details": errors, "request_id": request_id},
        )

    target_url = body.target_url or settings.webhook_url
    logger.info(
        "Webhook test initiated",
        extra={
            "request_id": request_id,
            "target_url": target_url,
            "event_type": body.event_type,
            "dispatch": body.dispatch,
        },
    )

    if body.dispatch:
        result = await send_webhook(
            target_url,
            webhook_payload,
            body.event_type,
            timeout=settings.api_timeout_seconds,
        )
        return {
            **result,
            "event_type": body.event_type,
            "target_url": target_url,
            "simulation": False,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return {
        "success": True,
        "message": "Webhook test completed successfully",
        "event_type": body.event_type,
        "payload": webhook_payload,
        "target_url": target_url,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
        "simulation": True,
    }
