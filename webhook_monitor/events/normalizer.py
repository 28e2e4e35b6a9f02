"""Maps raw GitHub webhook payloads onto the normalized event model.

The event kind comes from the X-GitHub-Event header. A `pull_request`
delivery whose PR is merged is classified as MERGE; the merged check runs
before the plain pull request mapping so it is reachable.
"""

import logging
from typing import Any

from pydantic import ValidationError

from webhook_monitor.errors import EventValidationError, format_validation_errors
from webhook_monitor.events.models import WebhookAction, WebhookEventCreate

logger = logging.getLogger(__name__)

EVENT_PUSH = "push"
EVENT_PULL_REQUEST = "pull_request"

BRANCH_REF_PREFIX = "refs/heads/"
SHORT_SHA_LENGTH = 7

DEFAULT_AUTHOR = "Unknown"
DEFAULT_BRANCH = "main"
DEFAULT_REPOSITORY = "unknown"


def _get(payload: dict, *path: str) -> Any:
    """Walk nested dicts, returning None as soon as a step is missing."""
    value: Any = payload
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _short_sha(value: Any) -> Any:
    if not value:
        return ""
    # Non-string ids are left for model validation to reject
    return value[:SHORT_SHA_LENGTH] if isinstance(value, str) else value


def _branch_from_ref(ref: Any) -> Any:
    if isinstance(ref, str):
        ref = ref.removeprefix(BRANCH_REF_PREFIX)
    return ref or DEFAULT_BRANCH


def _map_push(payload: dict, request_id: str) -> dict:
    return {
        "request_id": request_id,
        "author": _get(payload, "pusher", "name")
        or _get(payload, "head_commit", "author", "name")
        or DEFAULT_AUTHOR,
        "action": WebhookAction.PUSH,
        "to_branch": _branch_from_ref(payload.get("ref")),
        "repository": _get(payload, "repository", "name") or DEFAULT_REPOSITORY,
        "message": _get(payload, "head_commit", "message") or "No commit message",
        "commit_id": _short_sha(_get(payload, "head_commit", "id")),
    }


def _map_pull_request(payload: dict, request_id: str) -> dict:
    pr_action = payload.get("action") or "updated"
    return {
        "request_id": request_id,
        "author": _get(payload, "pull_request", "user", "login") or DEFAULT_AUTHOR,
        "action": WebhookAction.PULL_REQUEST,
        "from_branch": _get(payload, "pull_request", "head", "ref") or "",
        "to_branch": _get(payload, "pull_request", "base", "ref") or DEFAULT_BRANCH,
        "repository": _get(payload, "repository", "name") or DEFAULT_REPOSITORY,
        "pr_number": _get(payload, "pull_request", "number") or 0,
        "pr_title": _get(payload, "pull_request", "title") or "No title",
        "message": f"{pr_action} pull request",
    }


def _map_merge(payload: dict, request_id: str) -> dict:
    return {
        "request_id": request_id,
        "author": _get(payload, "pull_request", "merged_by", "login")
        or _get(payload, "pull_request", "user", "login")
        or DEFAULT_AUTHOR,
        "action": WebhookAction.MERGE,
        "from_branch": _get(payload, "pull_request", "head", "ref") or "",
        "to_branch": _get(payload, "pull_request", "base", "ref") or DEFAULT_BRANCH,
        "repository": _get(payload, "repository", "name") or DEFAULT_REPOSITORY,
        "pr_number": _get(payload, "pull_request", "number") or 0,
        "pr_title": _get(payload, "pull_request", "title") or "No title",
        "merge_commit": _short_sha(_get(payload, "pull_request", "merge_commit_sha")),
        "message": _get(payload, "pull_request", "title") or "No merge message",
    }


def _is_merged(payload: dict) -> bool:
    return bool(_get(payload, "pull_request", "merged"))


def normalize_event(event_kind: str | None, payload: Any, request_id: str) -> WebhookEventCreate | None:
    """Normalize one webhook delivery.

    Returns None for event kinds we do not track. Raises EventValidationError
    when a tracked kind carries a payload that does not produce a valid event.
    """
    if event_kind == EVENT_PUSH:
        mapper = _map_push
    elif event_kind == EVENT_PULL_REQUEST and isinstance(payload, dict) and _is_merged(payload):
        mapper = _map_merge
    elif event_kind == EVENT_PULL_REQUEST:
        mapper = _map_pull_request
    else:
        logger.debug("Ignoring unsupported webhook event", extra={"event_kind": event_kind})
        return None

    if not isinstance(payload, dict):
        raise EventValidationError(["payload: Input should be a JSON object"])

    try:
        return WebhookEventCreate(**mapper(payload, request_id))
    except ValidationError as e:
        raise EventValidationError(format_validation_errors(e)) from e
