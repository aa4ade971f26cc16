"""Async database engine and connection pool.

Provides PostgreSQL async connectivity using the SQLAlchemy 2.0 asyncio
extension with the asyncpg driver. A Database is constructed explicitly
and owned by whoever creates it (the FastAPI app, the CLI, a test), so
every owner gets an isolated pool.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from workmem.config import DatabaseTarget, Settings
from workmem.errors import StoreConnectionError

logger = logging.getLogger(__name__)

# Errors raised while checking a connection out of the pool
ACQUIRE_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    PoolTimeoutError,
    DBAPIError,
    asyncio.TimeoutError,
)


def create_engine(
    target: DatabaseTarget,
    pool_timeout: float = 30.0,
    command_timeout: float | None = None,
    echo: bool = False,
) -> AsyncEngine:
    """Create an async engine whose pool honours the target's bounds.

    pool_timeout bounds connection acquisition; command_timeout (asyncpg)
    bounds each statement, so a slow query cannot pin a connection forever.
    """
    connect_args: dict[str, Any] = {}
    if command_timeout is not None:
        connect_args["command_timeout"] = command_timeout

    return create_async_engine(
        target.url,
        pool_size=target.pool_size,
        max_overflow=target.max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=1800,  # Recycle connections after 30 minutes
        pool_pre_ping=True,  # Verify connection health
        connect_args=connect_args,
        echo=echo,
    )


class Database:
    """Owner of the engine and its connection pool."""

    def __init__(self, engine: AsyncEngine, target: DatabaseTarget | None = None) -> None:
        self.engine = engine
        self.target = target

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        target = settings.database_target()
        engine = create_engine(
            target,
            pool_timeout=settings.pool_timeout,
            command_timeout=settings.command_timeout,
        )
        return cls(engine, target)

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[AsyncConnection]:
        """Check a connection out of the pool and return it on exit.

        Raises:
            StoreConnectionError: If no connection could be acquired
        """
        conn = self.engine.connect()
        try:
            await conn.start()
        except ACQUIRE_ERRORS as e:
            raise StoreConnectionError(f"Unable to acquire connection: {e}") from e
        try:
            yield conn
        finally:
            await conn.close()

    async def warm(self) -> int:
        """Open the pool's minimum connections so they sit idle for reuse.

        Returns the number of connections opened. Failures are logged and
        left for the first request to report.
        """
        if self.target is None or self.target.pool_min == 0:
            return 0

        conns: list[AsyncConnection] = []
        results = await asyncio.gather(
            *(self._checkout(conns) for _ in range(self.target.pool_min)),
            return_exceptions=True,
        )
        for conn in conns:
            await conn.close()

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.warning(
                f"Pool warm-up opened {len(conns)}/{self.target.pool_min} connections: "
                f"{failures[0]}"
            )
        else:
            logger.info(f"Pool warm-up opened {len(conns)} connections")
        return len(conns)

    async def _checkout(self, sink: list[AsyncConnection]) -> None:
        conn = self.engine.connect()
        await conn.start()
        sink.append(conn)

    async def health_check(self) -> bool:
        """Check store connectivity."""
        try:
            async with self.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (StoreConnectionError, SQLAlchemyError):
            return False

    async def close(self) -> None:
        """Dispose of every pooled connection."""
        await self.engine.dispose()
