"""
Scout Query Service — Request ID Middleware
=============================================

What:  Assigns a correlation ID to each HTTP request and echoes it back.
How:   Reuses the caller's X-Request-ID header when present, otherwise
       generates a short UUID; stores it in a ContextVar (for loggers and
       scout.responses) and on request.state (for handlers).
When:  Outermost middleware, so every later log line can carry the ID.

The same ID appears in:
    - the X-Request-ID response header
    - `request_id` of every success envelope and error body
    - the access log line written by RequestLoggingMiddleware
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


def new_request_id() -> str:
    """8 hex chars: short enough for log lines, unique enough for correlation."""
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagates or creates the per-request correlation ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or new_request_id()

        # Left set after the call: the catch-all 500 handler runs outside this middleware
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
