"""Request-scoped dependencies: settings, store, metrics and API key check."""

import secrets

from fastapi import Header, HTTPException, Request

from webhook_monitor.config import Settings
from webhook_monitor.events.store import EventStore
from webhook_monitor.metrics import MetricsCollector


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> EventStore:
    return request.app.state.store


def get_metrics(request: Request) -> MetricsCollector:
    return request.app.state.metrics


async def verify_api_key(request: Request, x_api_key: str | None = Header(default=None)):
    """Require X-API-Key when an API key is configured; no-op otherwise."""
    expected = get_app_settings(request).api_key
    if not expected:
        return
    if not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(401, "Invalid or missing API key")
