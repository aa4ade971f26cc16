"""Error taxonomy for the work_mem benchmark harness.

- ConfigError: configuration missing or unusable (fatal at startup)
- StoreConnectionError: a pooled connection could not be acquired
- QueryError: the store rejected a statement of the benchmark query

Nothing here is retried. The HTTP layer turns StoreConnectionError and
QueryError into 500 responses; the CLI turns ConfigError into exit code 1.
"""

from __future__ import annotations


class WorkMemError(Exception):
    """Base class for harness errors."""


class ConfigError(WorkMemError):
    """Configuration is missing or cannot be used."""


class StoreConnectionError(WorkMemError):
    """The connection pool could not hand out a connection."""

    def __init__(self, message: str, mode: str | None = None) -> None:
        self.mode = mode
        super().__init__(message)


class QueryError(WorkMemError):
    """The store rejected the query or a statement in its transaction."""

    def __init__(self, message: str, mode: str | None = None) -> None:
        self.mode = mode
        super().__init__(message)
