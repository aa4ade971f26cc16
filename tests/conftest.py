"""Global pytest configuration and fixtures."""

from __future__ import annotations


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: requires Docker and a PostgreSQL container"
    )
