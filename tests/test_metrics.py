"""Tests for MetricsCollector."""

import threading

import pytest

from webhook_monitor.metrics import MetricsCollector, determine_health_status


@pytest.mark.parametrize(
    "error_rate, memory_mb, expected",
    [
        (0.0, 100, "healthy"),
        (0.05, 500, "healthy"),
        (0.06, 100, "degraded"),
        (0.0, 600, "degraded"),
        (0.11, 100, "unhealthy"),
        (0.0, 1500, "unhealthy"),
    ],
)
def test_determine_health_status(error_rate, memory_mb, expected):
    assert determine_health_status(error_rate, memory_mb) == expected


def test_collectors_are_isolated():
    first, second = MetricsCollector(), MetricsCollector()

    first.record_request()
    first.record_error()

    assert first.counters()["total_requests"] == 1
    assert second.counters() == {
        "total_requests": 0,
        "errors": 0,
        "health_checks": 0,
        "webhook_tests": 0,
        "webhooks_received": 0,
    }


def test_error_rate():
    collector = MetricsCollector()
    assert collector.error_rate == 0.0

    for _ in range(4):
        collector.record_request()
    collector.record_error()

    assert collector.error_rate == 0.25


def test_webhook_test_records_time():
    collector = MetricsCollector()

    collector.record_webhook_test()

    assert collector.webhook_tests == 1
    assert collector.last_webhook_test is not None


def test_snapshot_sections():
    collector = MetricsCollector()
    collector.record_request()

    snapshot = collector.snapshot("staging")

    assert snapshot["application"]["environment"] == "staging"
    assert snapshot["usage"]["total_requests"] == 1
    assert snapshot["usage"]["error_rate"] == 0.0
    assert snapshot["health"]["status"] in {"healthy", "degraded", "unhealthy"}
    assert snapshot["timestamps"]["last_webhook_test"] is None


def test_concurrent_increments():
    collector = MetricsCollector()

    def worker():
        for _ in range(1000):
            collector.record_request()

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert collector.requests == 8000
