"""Benchmark routes.

Each route runs the same query template; they differ only in the work_mem
in effect:

- GET /default-work-mem - store default work_mem
- GET /low-work-mem     - work_mem lowered for the request's transaction
- GET /work-mem         - work_mem as seen by a fresh pooled connection
- GET /plans/{mode}     - EXPLAIN ANALYZE output under either regime

Successful runs answer 200 with an empty body. Store failures are turned
into 500 responses by the handlers in workmem.api.errors.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse

from workmem.api.deps import get_executor, get_settings
from workmem.config import Settings
from workmem.persistence.executor import QueryExecutor

router = APIRouter(tags=["benchmark"])

DEFAULT_ROUTE = "/default-work-mem"
LOW_ROUTE = "/low-work-mem"
# Name used by earlier load scripts for the default-work_mem route
LEGACY_DEFAULT_ROUTE = "/optimized-work-mem"


class PlanMode(str, Enum):
    DEFAULT = "default"
    LOW = "low"


ExecutorDep = Annotated[QueryExecutor, Depends(get_executor)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


@router.get(DEFAULT_ROUTE, response_class=Response)
@router.get(LEGACY_DEFAULT_ROUTE, response_class=Response, include_in_schema=False)
async def default_work_mem(executor: ExecutorDep) -> Response:
    """Run the benchmark query under the store's default work_mem."""
    await executor.run_baseline()
    return Response(status_code=200)


@router.get(LOW_ROUTE, response_class=Response)
async def low_work_mem(executor: ExecutorDep, settings: SettingsDep) -> Response:
    """Run the benchmark query with work_mem lowered for this transaction."""
    await executor.run_degraded(settings.degraded_work_mem)
    return Response(status_code=200)


@router.get("/work-mem")
async def current_work_mem(executor: ExecutorDep) -> dict[str, str]:
    return {"work_mem": await executor.current_work_mem()}


@router.get("/plans/{mode}", response_class=PlainTextResponse)
async def query_plan(mode: PlanMode, executor: ExecutorDep, settings: SettingsDep) -> str:
    """EXPLAIN (ANALYZE, BUFFERS) of the benchmark query."""
    work_mem = settings.degraded_work_mem if mode is PlanMode.LOW else None
    lines = await executor.explain(work_mem)
    return "\n".join(lines) + "\n"
