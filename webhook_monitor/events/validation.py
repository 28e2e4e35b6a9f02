"""Structural checks for payloads sent through the webhook test endpoint."""

import logging

logger = logging.getLogger(__name__)


def validate_test_payload(payload: dict, event_type: str) -> list[str]:
    """Return the problems found in a GitHub-format payload; empty when valid."""
    errors: list[str] = []

    if event_type == "push":
        if not payload.get("repository"):
            errors.append("Push events require repository information")
        if not payload.get("ref"):
            errors.append("Push events require ref (branch) information")
    elif event_type == "pull_request":
        if not payload.get("pull_request"):
            errors.append("Pull request events require pull_request object")
        if not payload.get("action"):
            errors.append("Pull request events require action field")
    elif event_type == "issues":
        if not payload.get("issue"):
            errors.append("Issue events require issue object")
    else:
        logger.warning("Unknown event type for validation", extra={"event_type": event_type})

    repository = payload.get("repository")
    if repository and (
        not isinstance(repository, dict) or not repository.get("name") or not repository.get("full_name")
    ):
        errors.append("Repository object must include name and full_name")

    logger.debug(
        "Webhook payload validation completed",
        extra={"event_type": event_type, "valid": not errors, "error_count": len(errors)},
    )
    return errors
