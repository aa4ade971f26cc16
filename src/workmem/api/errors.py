"""Error responses for the benchmark routes.

Harness failures are reported as plain text so a load driver or curl shows
the store's message directly:

    HTTP/1.1 500 Internal Server Error
    Query error: connection refused
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import PlainTextResponse

from workmem.errors import QueryError, StoreConnectionError, WorkMemError

logger = logging.getLogger(__name__)


def error_text(exc: WorkMemError) -> str:
    return f"Query error: {exc}"


async def store_connection_exception_handler(
    request: Request, exc: StoreConnectionError
) -> PlainTextResponse:
    """Pool could not hand out a connection (500)."""
    return PlainTextResponse(error_text(exc), status_code=500)


async def query_exception_handler(request: Request, exc: QueryError) -> PlainTextResponse:
    """Store rejected the query (500)."""
    return PlainTextResponse(error_text(exc), status_code=500)


async def generic_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Exception handler for unexpected errors."""
    logger.exception(f"Unhandled error on {request.url.path}")
    return PlainTextResponse("Internal server error", status_code=500)


EXCEPTION_HANDLERS = {
    StoreConnectionError: store_connection_exception_handler,
    QueryError: query_exception_handler,
    Exception: generic_exception_handler,
}
