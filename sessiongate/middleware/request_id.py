"""
SessionGate — Request ID Middleware
====================================

What:  Assigns a short ID to each request, returns it in `X-Request-ID`, and
       stamps it on every log record emitted while the request is handled.
Why:   A redirect or a 401 from the gate is only useful to debug if the gate's
       log line, the access log line, and the client's report share an ID.
How:   Stores the ID in a ContextVar; RequestIDLogFilter copies it onto log
       records so the log format can include `%(request_id)s`.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDLogFilter(logging.Filter):
    """Adds `record.request_id` ("-" outside of a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get("") or "-"
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Uses the client's X-Request-ID when present, otherwise generates one.

    Also exposed as `request.state.request_id` for route handlers.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
