"""
Webhook Events

Normalization of inbound GitHub webhooks and the in-memory event store.
"""

from .models import EventStats, WebhookAction, WebhookEvent, WebhookEventCreate
from .normalizer import normalize_event
from .store import EventStore

__all__ = [
    "EventStats",
    "EventStore",
    "WebhookAction",
    "WebhookEvent",
    "WebhookEventCreate",
    "normalize_event",
]
