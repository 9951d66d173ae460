"""
FastAPI middleware for correlation ids and request context.

- Reads X-Correlation-ID from the request or generates a new id
- Exposes it to log records through context variables
- Echoes it and the handling time in the response headers
- Clears the context when the request finishes
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from infrastructure.logging.structured_logger import (
    clear_correlation_id,
    clear_request_context,
    set_correlation_id,
    set_request_context,
)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tags every request with a correlation id for log tracing."""

    CORRELATION_ID_HEADER = "X-Correlation-ID"
    RESPONSE_TIME_HEADER = "X-Response-Time-ms"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        cid = request.headers.get(self.CORRELATION_ID_HEADER) or str(uuid.uuid4())
        set_correlation_id(cid)
        set_request_context(method=request.method, path=request.url.path)

        start_time = time.monotonic()
        try:
            response = await call_next(request)
            response.headers[self.CORRELATION_ID_HEADER] = cid
            duration_ms = (time.monotonic() - start_time) * 1000
            response.headers[self.RESPONSE_TIME_HEADER] = f"{duration_ms:.2f}"
            return response
        finally:
            clear_correlation_id()
            clear_request_context()
