"""In-memory event store.

Events live for the lifetime of the process. Every `list` call sorts, filters
and slices the full collection, which is fine at demo scale but O(n log n)
per read; a real deployment would want an indexed, persisted store with
eviction.
"""

import threading
import uuid
from datetime import datetime, timezone

from webhook_monitor.events.models import EventStats, WebhookAction, WebhookEvent, WebhookEventCreate

DEFAULT_LIMIT = 50
ALL_ACTIONS = "all"


class EventStore:
    def __init__(self):
        self._events: dict[str, WebhookEvent] = {}
        self._lock = threading.Lock()
        self._last_timestamp: datetime | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def _next_timestamp(self) -> datetime:
        now = datetime.now(timezone.utc)
        # Clock adjustments must not reorder events
        if self._last_timestamp is not None and now < self._last_timestamp:
            now = self._last_timestamp
        self._last_timestamp = now
        return now

    def create(self, candidate: WebhookEventCreate) -> WebhookEvent:
        """Assign id and timestamp, store the event and return it."""
        with self._lock:
            event = WebhookEvent(
                **candidate.model_dump(),
                id=str(uuid.uuid4()),
                timestamp=self._next_timestamp(),
            )
            self._events[event.id] = event
        return event

    def list(
        self,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
        action_filter: str | None = None,
    ) -> list[WebhookEvent]:
        """Most recent first, optionally filtered to one action, then paginated.

        `action_filter` is matched case-insensitively; None or "all" disables it.
        """
        with self._lock:
            events = list(self._events.values())

        # Newest insertion first so equal timestamps keep that order after the stable sort
        events.reverse()
        if action_filter and action_filter.lower() != ALL_ACTIONS:
            wanted = action_filter.upper()
            events = [e for e in events if e.action.value == wanted]
        events.sort(key=lambda e: e.timestamp, reverse=True)
        offset = max(offset, 0)
        return events[offset:offset + max(limit, 0)]

    def stats(self) -> EventStats:
        with self._lock:
            events = list(self._events.values())

        return EventStats(
            total=len(events),
            push_count=sum(1 for e in events if e.action == WebhookAction.PUSH),
            pull_request_count=sum(1 for e in events if e.action == WebhookAction.PULL_REQUEST),
            merge_count=sum(1 for e in events if e.action == WebhookAction.MERGE),
        )
