"""Tests for outbound webhook delivery."""

import httpx
import pytest

from webhook_monitor.sender import send_webhook


@pytest.mark.asyncio
async def test_sends_github_headers():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"message": "Webhook received"})

    result = await send_webhook(
        "http://receiver.test/api/webhook",
        {"ref": "refs/heads/main"},
        "push",
        transport=httpx.MockTransport(handler),
    )

    assert result["success"] is True
    assert result["status"] == 200
    assert result["data"] == {"message": "Webhook received"}
    request = seen[0]
    assert request.headers["X-GitHub-Event"] == "push"
    assert request.headers["X-GitHub-Delivery"] == result["request_id"]
    assert request.headers["X-Request-ID"] == result["request_id"]


@pytest.mark.asyncio
async def test_receiver_error_is_reported():
    transport = httpx.MockTransport(lambda request: httpx.Response(400, text="bad payload"))

    result = await send_webhook("http://receiver.test/hook", {}, transport=transport)

    assert result["success"] is False
    assert result["status"] == 400
    assert result["data"] == "bad payload"


@pytest.mark.asyncio
async def test_connection_failure_is_reported():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await send_webhook("http://receiver.test/hook", {}, transport=httpx.MockTransport(handler))

    assert result["success"] is False
    assert result["status"] == 0
    assert "connection refused" in result["error"]
