"""Outbound webhook delivery for the webhook test endpoint."""

import json
import logging
import uuid

import httpx

from webhook_monitor.metrics import APP_NAME, APP_VERSION

logger = logging.getLogger(__name__)

USER_AGENT = f"{APP_NAME}/{APP_VERSION}"


async def send_webhook(
    url: str,
    payload: dict,
    event_type: str = "ping",
    *,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """POST a GitHub-style webhook to `url`.

    Never raises for transport or HTTP failures; the outcome is reported in
    the returned dict instead.
    """
    request_id = str(uuid.uuid4())
    headers = {
        "User-Agent": USER_AGENT,
        "X-Request-ID": request_id,
        "X-GitHub-Event": event_type,
        "X-GitHub-Delivery": request_id,
    }
    logger.info(
        "Sending webhook",
        extra={"request_id": request_id, "url": url, "payload_size": len(json.dumps(payload))},
    )

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            resp = await client.post(url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        logger.error("Webhook sending failed", extra={"request_id": request_id, "url": url, "error": str(e)})
        return {"success": False, "status": 0, "error": str(e), "request_id": request_id}

    try:
        data = resp.json()
    except ValueError:
        data = resp.text

    if not resp.is_success:
        logger.warning(
            "Webhook rejected by receiver",
            extra={"request_id": request_id, "url": url, "status": resp.status_code},
        )
        return {
            "success": False,
            "status": resp.status_code,
            "error": f"Receiver returned {resp.status_code}",
            "data": data,
            "request_id": request_id,
        }

    logger.info("Webhook sent successfully", extra={"request_id": request_id, "status": resp.status_code})
    return {"success": True, "status": resp.status_code, "data": data, "request_id": request_id}
