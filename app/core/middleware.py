"""
HTTP middleware - request IDs and access logging.

Every request gets an X-Request-ID (the caller's, if it sent one) which is
echoed back on the response and included in the access log line.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger("family_calendar.http")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assign a request ID and log method, path, status and latency."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                f"{request.method} {request.url.path} failed after {elapsed_ms:.1f}ms",
                extra={"request_id": request_id},
            )
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id

        # Query strings are left out: the OAuth callback carries the code and state
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)",
            extra={"request_id": request_id},
        )
        return response
