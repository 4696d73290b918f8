"""
VocabList Backend - Access Log Middleware
===========================================

What:  One log line per HTTP request: method, path, status, duration, request id
       and the owner id (when present).
How:   Measures wall time around the downstream app. The level follows the
       status class: 5xx → ERROR, 4xx → WARNING, everything else → INFO.
       /health is skipped; monitors hit it every few seconds.

What is NOT logged: request bodies, share codes in bodies, uploaded bytes.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from vocablist.middleware.request_id import request_id_var

logger = logging.getLogger("vocablist.access")

_SKIP_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        status = response.status_code
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        rid = request_id_var.get("")
        owner = request.headers.get("X-Owner-Id", "-")
        logger.log(
            level,
            "%s %s %d %.1fms [%s] owner=%s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            owner,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "owner_id": owner,
            },
        )
        return response
