"""
Helium — Telemetry Service
============================

What:  Records events, document store dependency calls (duration, success,
       request-unit cost) and HTTP request metrics.
Why:   Store latency and RU cost are the numbers that matter when operating a
       Cosmos-backed API; they are collected at the single place every store
       call goes through.
How:   prometheus_client metrics registered in a per-instance CollectorRegistry,
       rendered in the Prometheus text format by GET /metrics.
Who:   Owned by the ServiceContainer; used by the store client, services and
       the request logging middleware.

Why a per-instance registry:
    The default global registry rejects duplicate metric names, so building a
    second application in the same process (tests) would fail.
"""

import logging
from typing import Optional, Tuple

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# Request units per operation; point reads cost ~1 RU, fan-out queries far more
RU_BUCKETS = (1, 2, 5, 10, 25, 50, 100, 250, 500, 1000)


class TelemetryService:
    """Prometheus-backed telemetry for one application instance."""

    def __init__(self, instrumentation_key: Optional[str] = None):
        self.instrumentation_key = instrumentation_key
        self.registry = CollectorRegistry()

        if self.instrumentation_key:
            logger.info("Telemetry instrumentation key configured")
        else:
            logger.info("Telemetry instrumentation key not configured; metrics stay local")

        self.events = Counter(
            "helium_events_total",
            "Named application events",
            ["name"],
            registry=self.registry,
        )
        self.dependency_calls = Counter(
            "helium_dependency_calls_total",
            "Calls to external dependencies",
            ["dependency", "operation", "success"],
            registry=self.registry,
        )
        self.dependency_duration = Histogram(
            "helium_dependency_duration_seconds",
            "Duration of calls to external dependencies",
            ["dependency", "operation"],
            registry=self.registry,
        )
        self.request_charge = Histogram(
            "helium_cosmosdb_request_charge",
            "Cosmos DB request units consumed per operation",
            ["operation"],
            buckets=RU_BUCKETS,
            registry=self.registry,
        )
        self.http_requests = Counter(
            "helium_http_requests_total",
            "HTTP requests handled",
            ["method", "route", "status"],
            registry=self.registry,
        )
        self.http_duration = Histogram(
            "helium_http_request_duration_seconds",
            "HTTP request handling time",
            ["method", "route"],
            registry=self.registry,
        )

    def track_event(self, name: str) -> None:
        self.events.labels(name=name).inc()

    def track_dependency(
        self,
        dependency: str,
        target: str,
        operation: str,
        success: bool,
        duration_seconds: float,
        result_code: str = "",
    ) -> None:
        """Record one dependency call and its duration."""
        self.dependency_calls.labels(
            dependency=dependency,
            operation=operation,
            success=str(success).lower(),
        ).inc()
        self.dependency_duration.labels(dependency=dependency, operation=operation).observe(
            max(0.0, duration_seconds)
        )
        logger.debug(
            "%s %s on %s: success=%s code=%s %.1fms",
            dependency,
            operation,
            target,
            success,
            result_code,
            duration_seconds * 1000,
        )

    def track_request_charge(self, operation: str, charge: float) -> None:
        self.request_charge.labels(operation=operation).observe(charge)

    def track_request(self, method: str, route: str, status: int, duration_seconds: float) -> None:
        self.http_requests.labels(method=method, route=route, status=str(status)).inc()
        self.http_duration.labels(method=method, route=route).observe(max(0.0, duration_seconds))

    def render(self) -> Tuple[bytes, str]:
        """Return the exposition payload and its content type."""
        return generate_latest(self.registry), CONTENT_TYPE_LATEST
