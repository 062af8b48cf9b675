"""
SessionGate — Request Logging Middleware
=========================================

What:  One access log line per request, including what the gate decided.
Why:   "Why was I sent to the login page?" is the most common support question
       for a session gate. The access log answers it directly.
How:   Measures duration around `call_next` and reads `request.state.gate_outcome`,
       which the AuthenticationMiddleware sets for every gated request.

Logged: method, path, status, duration, request ID, client IP, gate outcome.
Not logged: cookies, session contents, principal values.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from sessiongate.middleware.request_id import request_id_var

logger = logging.getLogger("sessiongate.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request at a level matching its status code.

    5xx → ERROR, 4xx → WARNING, everything else (redirects included) → INFO.
    Health checks are skipped.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        rid = request_id_var.get("")
        outcome = getattr(request.state, "gate_outcome", None)
        gate = outcome.value if outcome is not None else "ungated"

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms gate=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            gate,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "gate_outcome": gate,
                "client_ip": client_ip,
            },
        )

        return response
