"""FastAPI application factory for the benchmark service.

Creates the application with:
- Benchmark routes (/default-work-mem, /low-work-mem, /work-mem, /plans)
- Health and Prometheus endpoints
- Lifecycle management for the connection pool
- Plain-text 500 responses for store failures
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from starlette.types import ExceptionHandler

from workmem import __version__
from workmem.api.errors import EXCEPTION_HANDLERS
from workmem.api.middleware import CorrelationMiddleware
from workmem.api.routers import benchmark, health
from workmem.api.routers import metrics as metrics_router
from workmem.config import Settings, load_settings
from workmem.observability import QueryMetrics, configure_logging
from workmem.persistence.db import Database
from workmem.persistence.executor import QueryExecutor
from workmem.persistence.queries import top_players

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup:
    - Configure structured logging
    - Build the connection pool and warm its idle connections
    - Build the query executor and its metrics

    On shutdown:
    - Dispose of the connection pool
    """
    settings: Settings = app.state.settings

    configure_logging(
        json_format=settings.env != "dev",
        level=settings.log_level,
    )

    logger.info(f"Starting {settings.app_name} ({settings.env})")
    database = Database.from_settings(settings)
    if database.target is not None:
        logger.info(
            f"Connection pool: min={database.target.pool_min} max={database.target.pool_max}"
        )
    if settings.pool_warmup:
        await database.warm()

    metrics = QueryMetrics() if settings.enable_metrics else None
    app.state.database = database
    app.state.metrics = metrics
    app.state.executor = QueryExecutor(
        database,
        template=top_players(settings.query_limit),
        metrics=metrics,
    )
    logger.info(f"Low work_mem route uses work_mem={settings.degraded_work_mem}")
    logger.info(f"Startup complete, listening on {settings.listen_addr}")

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await database.close()
    logger.info("Shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Settings are resolved from the environment when not given; the
    connection pool is created by the lifespan, not here.
    """
    settings = settings or load_settings()

    app = FastAPI(
        title="workmem-bench",
        description="Same query, two work_mem settings",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(CorrelationMiddleware)

    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, cast(ExceptionHandler, handler))

    app.include_router(benchmark.router)
    app.include_router(health.router)
    app.include_router(metrics_router.router)

    return app
