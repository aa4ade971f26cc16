"""Request ID middleware.

Propagates a request ID to logging and back to the client.
"""

from __future__ import annotations

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from workmem.observability.logging import request_id_var

REQUEST_ID_HEADER = "x-request-id"


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Extracts or generates x-request-id for every request.

    The ID is stored on request.state, set on the logging context variable
    and echoed in the response headers.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        try:
            request.state.request_id = request_id
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)
