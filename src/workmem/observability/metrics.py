"""Prometheus metrics for the benchmark query.

Each QueryMetrics owns its own CollectorRegistry so that several
applications (or tests) in one process never collide on metric names.

Usage:
    metrics = QueryMetrics()
    metrics.observe("degraded", 0.132)
    body = metrics.render()
"""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Degraded runs spill to disk and can take seconds under load
QUERY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class QueryMetrics:
    """Latency and failure metrics per execution mode."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()

        self.query_duration_seconds = Histogram(
            "workmem_query_duration_seconds",
            "Benchmark query latency in seconds",
            ["mode"],
            buckets=QUERY_BUCKETS,
            registry=self.registry,
        )
        self.query_failures_total = Counter(
            "workmem_query_failures_total",
            "Benchmark query failures",
            ["mode", "reason"],
            registry=self.registry,
        )

    def observe(self, mode: str, seconds: float) -> None:
        self.query_duration_seconds.labels(mode=mode).observe(seconds)

    def record_failure(self, mode: str, reason: str) -> None:
        self.query_failures_total.labels(mode=mode, reason=reason).inc()

    def render(self) -> bytes:
        """Prometheus text exposition of this registry."""
        return generate_latest(self.registry)
