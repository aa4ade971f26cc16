"""Prometheus scrape endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response

from workmem.api.deps import get_metrics
from workmem.observability.metrics import QueryMetrics

router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
async def metrics(metrics: Annotated[QueryMetrics | None, Depends(get_metrics)]) -> Response:
    if metrics is None:
        raise HTTPException(status_code=404, detail="Metrics are disabled")
    return Response(content=metrics.render(), media_type=metrics.content_type)
