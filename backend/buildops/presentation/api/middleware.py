"""HTTP middleware."""

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from buildops.core.logging import clear_context, get_logger, log_context

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Binds a correlation id to the logging context for each request.

    The id comes from the ``X-Correlation-ID`` request header or is
    generated, and is echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        clear_context()
        log_context(correlation_id=correlation_id)
        start_time = time.perf_counter()
        try:
            response: Response = await call_next(request)
        finally:
            clear_context()

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
            correlation_id=correlation_id,
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


__all__ = ["CORRELATION_HEADER", "CorrelationIdMiddleware"]
