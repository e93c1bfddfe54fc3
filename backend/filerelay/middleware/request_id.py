"""
FileRelay — Request ID Middleware
==================================

What:  Assigns an ID to each incoming request and returns it in a header.
Why:   Correlates the access log line, the pipeline logs, and the error log
       of a single relay request, even when many run concurrently.
How:   Reuses the caller's X-Request-ID or generates a short UUID, stores it
       in a ContextVar and request.state, and echoes it in the response.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the client's X-Request-ID header when present
        2. Otherwise generate an 8-character ID
        3. Store it in `request_id_var` and `request.state.request_id`
        4. Add it to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
