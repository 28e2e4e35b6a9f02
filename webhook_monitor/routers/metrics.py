"""Metrics endpoint for monitoring."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from webhook_monitor.config import Settings, is_feature_enabled
from webhook_monitor.dependencies import get_app_settings, get_metrics
from webhook_monitor.metrics import MetricsCollector

router = APIRouter(tags=["metrics"])
logger = logging.getLogger(__name__)


@router.get("/metrics")
async def metrics_snapshot(
    request: Request,
    metrics: MetricsCollector = Depends(get_metrics),
    settings: Settings = Depends(get_app_settings),
):
    """Process, usage and health metrics as JSON."""
    if not is_feature_enabled(settings, "metrics_collection"):
        raise HTTPException(404, "Metrics collection is disabled")

    snapshot = metrics.snapshot(settings.environment)
    logger.debug("Metrics requested", extra={"request_id": request.state.request_id})
    return snapshot
