"""Normalized webhook event model."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class WebhookAction(str, Enum):
    PUSH = "PUSH"
    PULL_REQUEST = "PULL_REQUEST"
    MERGE = "MERGE"


class WebhookEventCreate(BaseModel):
    """A normalized event before the store assigns id and timestamp."""

    model_config = ConfigDict(frozen=True)

    request_id: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    action: WebhookAction
    from_branch: str | None = None
    to_branch: str = Field(..., min_length=1)
    repository: str = Field(..., min_length=1)
    message: str | None = None
    commit_id: str | None = None
    pr_number: int | None = None
    pr_title: str | None = None
    merge_commit: str | None = None


class WebhookEvent(WebhookEventCreate):
    """A stored event. Immutable once created."""

    id: str
    timestamp: datetime


class EventStats(BaseModel):
    total: int = 0
    push_count: int = 0
    pull_request_count: int = 0
    merge_count: int = 0
