"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment before importing the app
os.environ["ENVIRONMENT"] = "development"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["API_KEY"] = ""

from webhook_monitor.config import Settings
from webhook_monitor.events.store import EventStore
from webhook_monitor.main import create_app
from webhook_monitor.metrics import MetricsCollector


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, rate_limit_enabled=False)


@pytest.fixture
def store() -> EventStore:
    return EventStore()


@pytest.fixture
def metrics() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def app(settings, store, metrics):
    return create_app(settings=settings, store=store, metrics_collector=metrics)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to an isolated app instance."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def push_payload() -> dict:
    return {
        "repository": {"name": "demo", "full_name": "octo/demo"},
        "pusher": {"name": "Bot"},
        "head_commit": {"id": "abcdef1234", "message": "test"},
        "ref": "refs/heads/main",
    }


@pytest.fixture
def pull_request_payload() -> dict:
    return {
        "action": "opened",
        "repository": {"name": "demo", "full_name": "octo/demo"},
        "pull_request": {
            "number": 42,
            "title": "Add webhook receiver",
            "merged": False,
            "user": {"login": "octocat"},
            "head": {"ref": "feature/webhooks"},
            "base": {"ref": "develop"},
        },
    }


@pytest.fixture
def merged_pull_request_payload(pull_request_payload) -> dict:
    pr = {
        **pull_request_payload["pull_request"],
        "merged": True,
        "merged_by": {"login": "maintainer"},
        "merge_commit_sha": "9f8e7d6c5b4a3210",
    }
    return {**pull_request_payload, "action": "closed", "pull_request": pr}
