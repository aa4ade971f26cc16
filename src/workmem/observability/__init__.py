"""Observability for the benchmark service.

- Structured logging with request IDs
- Prometheus query metrics
"""

from workmem.observability.logging import configure_logging, request_id_var
from workmem.observability.metrics import QueryMetrics

__all__ = [
    "configure_logging",
    "request_id_var",
    "QueryMetrics",
]
