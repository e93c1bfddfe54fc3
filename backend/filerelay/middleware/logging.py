"""
FileRelay — Request Logging Middleware
=======================================

What:  One access log line per HTTP request.
Why:   Relay requests vary from milliseconds (rejected input) to tens of
       seconds (slow extraction); duration and status per request are the
       first thing to look at when a caller reports a problem.
How:   Measures time around the downstream handler and logs method, path,
       status, duration and request ID. Level follows the status class.

Not logged: request bodies (the fileUrl may be a signed URL with
credentials in its query string) and response bodies.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from filerelay.middleware.request_id import request_id_var

logger = logging.getLogger("filerelay.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logged information:
        - Request: method, path, client IP
        - Response: status code, duration in milliseconds
        - Correlation: request ID from RequestIDMiddleware

    5xx → ERROR, 4xx → WARNING, everything else → INFO.
    """

    SKIPPED_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
