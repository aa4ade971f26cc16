"""API routers for the benchmark service."""

from workmem.api.routers import benchmark, health, metrics

__all__ = ["benchmark", "health", "metrics"]
