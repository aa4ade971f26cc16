"""Benchmark query execution under two work_mem regimes.

- baseline: the query runs with whatever work_mem new connections get
  (server, database or role default)
- degraded: a transaction-scoped override lowers work_mem first, forcing
  sorts and hashes to spill to disk

Both regimes go through the same code path so they differ only in the
override statement.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from workmem.errors import QueryError, StoreConnectionError
from workmem.observability.metrics import QueryMetrics
from workmem.persistence.db import Database
from workmem.persistence.queries import QueryTemplate, top_players

logger = logging.getLogger(__name__)

# set_config(..., is_local => true) is SET LOCAL with a bind parameter
SET_LOCAL_WORK_MEM = text("SELECT set_config('work_mem', :work_mem, true)")
SHOW_WORK_MEM = text("SHOW work_mem")

EXECUTION_ERRORS: tuple[type[BaseException], ...] = (SQLAlchemyError, asyncio.TimeoutError)


class Mode(str, Enum):
    """Execution regime of the benchmark query."""

    BASELINE = "baseline"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class QueryResult:
    """Outcome of one benchmark run. Rows are consumed, then discarded."""

    mode: Mode
    work_mem: str | None
    row_count: int
    elapsed_ms: float


class QueryExecutor:
    """Runs the benchmark template on connections from a Database pool."""

    def __init__(
        self,
        database: Database,
        template: QueryTemplate | None = None,
        metrics: QueryMetrics | None = None,
    ) -> None:
        self.database = database
        self.template = template or top_players()
        self.metrics = metrics

    async def run_baseline(self) -> QueryResult:
        """Run the query under the default work_mem."""
        return await self._run(Mode.BASELINE, None)

    async def run_degraded(self, work_mem: str) -> QueryResult:
        """Run the query with work_mem lowered for this transaction only."""
        return await self._run(Mode.DEGRADED, work_mem)

    async def fetch_rows(self, work_mem: str | None = None) -> list[tuple[Any, ...]]:
        """Rows of the template under either regime, for comparing results."""
        mode = Mode.BASELINE if work_mem is None else Mode.DEGRADED
        rows, _ = await self._timed(mode, work_mem)
        return rows

    async def _run(self, mode: Mode, work_mem: str | None) -> QueryResult:
        rows, elapsed = await self._timed(mode, work_mem)
        return QueryResult(
            mode=mode,
            work_mem=work_mem,
            row_count=len(rows),
            elapsed_ms=elapsed * 1000,
        )

    async def _timed(
        self, mode: Mode, work_mem: str | None
    ) -> tuple[list[tuple[Any, ...]], float]:
        start = time.perf_counter()
        try:
            async with self.database.connect() as conn:
                rows = await self._execute(conn, work_mem)
        except StoreConnectionError as e:
            e.mode = mode.value
            self._record_failure(mode, "connection")
            logger.error(f"Query {self.template.key} ({mode.value}) could not connect: {e}")
            raise
        except EXECUTION_ERRORS as e:
            self._record_failure(mode, "query")
            logger.error(
                f"Query {self.template.key} ({mode.value}) failed",
                exc_info=True,
                extra={"mode": mode.value},
            )
            raise QueryError(_describe(e), mode=mode.value) from e

        elapsed = time.perf_counter() - start
        if self.metrics is not None:
            self.metrics.observe(mode.value, elapsed)

        logger.info(
            f"Successfully executed query with work_mem={work_mem or 'default'}",
            extra={"mode": mode.value, "rows": len(rows), "elapsed_ms": round(elapsed * 1000, 2)},
        )
        return rows, elapsed

    async def _execute(
        self, conn: AsyncConnection, work_mem: str | None
    ) -> list[tuple[Any, ...]]:
        # begin() commits on normal exit and rolls back on any exception
        async with conn.begin():
            if work_mem is not None:
                await conn.execute(SET_LOCAL_WORK_MEM, {"work_mem": work_mem})
            result = await conn.execute(self.template.statement)
            return [tuple(row) for row in result.fetchall()]

    async def current_work_mem(self) -> str:
        """work_mem as seen by a freshly acquired connection."""
        try:
            async with self.database.connect() as conn:
                result = await conn.execute(SHOW_WORK_MEM)
                return str(result.scalar_one())
        except EXECUTION_ERRORS as e:
            logger.error("SHOW work_mem failed", exc_info=True)
            raise QueryError(_describe(e)) from e

    async def explain(self, work_mem: str | None = None) -> list[str]:
        """EXPLAIN ANALYZE the template, optionally under the override.

        Returns the plan as text lines; sort nodes report either an
        in-memory method or "external merge  Disk".
        """
        mode = Mode.BASELINE if work_mem is None else Mode.DEGRADED
        explain = text(f"EXPLAIN (ANALYZE, BUFFERS) {self.template.sql()}")
        try:
            async with self.database.connect() as conn:
                async with conn.begin():
                    if work_mem is not None:
                        await conn.execute(SET_LOCAL_WORK_MEM, {"work_mem": work_mem})
                    result = await conn.execute(explain)
                    return [str(row[0]) for row in result.fetchall()]
        except EXECUTION_ERRORS as e:
            logger.error(
                f"EXPLAIN of {self.template.key} ({mode.value}) failed",
                exc_info=True,
                extra={"mode": mode.value},
            )
            raise QueryError(_describe(e), mode=mode.value) from e

    def _record_failure(self, mode: Mode, reason: str) -> None:
        if self.metrics is not None:
            self.metrics.record_failure(mode.value, reason)


def _describe(exc: BaseException) -> str:
    """Store-side message of a driver error, without SQLAlchemy's wrapping."""
    orig: Any = getattr(exc, "orig", None)
    if orig is not None:
        return str(orig)
    return str(exc) or type(exc).__name__
