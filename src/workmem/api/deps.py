"""Shared FastAPI dependencies.

Application-owned objects live on app.state and are handed to routes
through these functions; tests replace them with dependency_overrides.
"""

from __future__ import annotations

from fastapi import Request

from workmem.config import Settings
from workmem.observability.metrics import QueryMetrics
from workmem.persistence.db import Database
from workmem.persistence.executor import QueryExecutor


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_executor(request: Request) -> QueryExecutor:
    return request.app.state.executor


def get_metrics(request: Request) -> QueryMetrics | None:
    return getattr(request.app.state, "metrics", None)
