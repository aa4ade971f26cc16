"""Health check endpoints.

Provides Kubernetes-compatible liveness and readiness probes:
- /health/live  - Liveness probe (always returns OK if process is running)
- /health/ready - Readiness probe (checks store connectivity)
"""

from __future__ import annotations

import asyncio
import time
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from workmem.api.deps import get_database
from workmem.persistence.db import Database

router = APIRouter(prefix="/health", tags=["health"])

READY_TIMEOUT = 5.0  # seconds


@router.get("/live")
async def liveness() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(database: Annotated[Database, Depends(get_database)]) -> JSONResponse:
    """Report whether the store answers within READY_TIMEOUT."""
    start = time.monotonic()
    message: str | None = None
    try:
        healthy = await asyncio.wait_for(database.health_check(), timeout=READY_TIMEOUT)
        if not healthy:
            message = "Database check failed"
    except asyncio.TimeoutError:
        healthy = False
        message = "Database check timed out"

    body: dict[str, Any] = {
        "status": "healthy" if healthy else "unhealthy",
        "database": {
            "latency_ms": round((time.monotonic() - start) * 1000, 2),
        },
    }
    if message:
        body["database"]["message"] = message
    return JSONResponse(body, status_code=200 if healthy else 503)
