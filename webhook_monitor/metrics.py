"""Process-level request metrics.

A MetricsCollector is owned by the application (app.state.metrics) and handed
to endpoints through a dependency, so each app instance counts on its own.
"""

import os
import platform
import threading
import time
from datetime import datetime, timezone

import psutil

APP_NAME = "webhook-monitor"
APP_VERSION = "1.0.0"

_MB = 1024 * 1024
MEMORY_WARN_MB = 500
MEMORY_CRITICAL_MB = 1000
ERROR_RATE_WARN = 0.05
ERROR_RATE_CRITICAL = 0.10


def determine_health_status(error_rate: float, memory_mb: float) -> str:
    if error_rate > ERROR_RATE_CRITICAL or memory_mb > MEMORY_CRITICAL_MB:
        return "unhealthy"
    if error_rate > ERROR_RATE_WARN or memory_mb > MEMORY_WARN_MB:
        return "degraded"
    return "healthy"


def process_memory_mb() -> float:
    return psutil.Process().memory_info().rss / _MB


class MetricsCollector:
    def __init__(self):
        self._lock = threading.Lock()
        self.start_time = datetime.now(timezone.utc)
        self._started = time.monotonic()
        self.requests = 0
        self.errors = 0
        self.health_checks = 0
        self.webhook_tests = 0
        self.webhooks_received = 0
        self.last_webhook_test: datetime | None = None

    def record_request(self) -> None:
        with self._lock:
            self.requests += 1

    def record_error(self) -> None:
        with self._lock:
            self.errors += 1

    def record_health_check(self) -> None:
        with self._lock:
            self.health_checks += 1

    def record_webhook_received(self) -> None:
        with self._lock:
            self.webhooks_received += 1

    def record_webhook_test(self) -> None:
        with self._lock:
            self.webhook_tests += 1
            self.last_webhook_test = datetime.now(timezone.utc)

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self._started

    @property
    def error_rate(self) -> float:
        with self._lock:
            return self.errors / self.requests if self.requests else 0.0

    def counters(self) -> dict:
        with self._lock:
            return {
                "total_requests": self.requests,
                "errors": self.errors,
                "health_checks": self.health_checks,
                "webhook_tests": self.webhook_tests,
                "webhooks_received": self.webhooks_received,
            }

    def snapshot(self, environment: str) -> dict:
        """Full metrics document served by GET /metrics."""
        proc = psutil.Process()
        mem = proc.memory_info()
        cpu = proc.cpu_times()
        memory_mb = mem.rss / _MB
        error_rate = self.error_rate
        uptime = self.uptime_seconds
        last_test = self.last_webhook_test.isoformat() if self.last_webhook_test else None
        counters = self.counters()

        return {
            "application": {
                "name": APP_NAME,
                "version": APP_VERSION,
                "environment": environment,
                "python_version": platform.python_version(),
                "platform": platform.system().lower(),
                "architecture": platform.machine(),
                "pid": os.getpid(),
            },
            "performance": {
                "uptime": int(uptime),
                "start_time": self.start_time.isoformat(),
                "memory": {
                    "rss": round(memory_mb),
                    "vms": round(mem.vms / _MB),
                },
                "cpu": {
                    "user": cpu.user,
                    "system": cpu.system,
                },
            },
            "usage": {
                **counters,
                "error_rate": round(error_rate * 100, 2),
                "last_webhook_test": last_test,
            },
            "health": {
                "status": determine_health_status(error_rate, memory_mb),
                "memory_healthy": memory_mb < MEMORY_WARN_MB,
                "uptime_healthy": uptime > 60,
                "error_rate_healthy": error_rate < ERROR_RATE_WARN,
            },
            "timestamps": {
                "generated": datetime.now(timezone.utc).isoformat(),
                "start_time": self.start_time.isoformat(),
                "last_webhook_test": last_test,
            },
        }
