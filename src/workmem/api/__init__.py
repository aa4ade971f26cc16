"""HTTP surface of the benchmark harness."""

from workmem.api.app import create_app

__all__ = ["create_app"]
