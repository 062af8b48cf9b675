"""
SessionGate — Middleware Package
=================================

What:  Cross-cutting request handling, including the authentication gate's
       HTTP binding.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Session] → [CORS] → [Authentication] → Route

    1. Request ID:     correlation ID for every log line of the request
    2. Logging:        access log, including the gate outcome
    3. Session:        Starlette SessionMiddleware; decodes the signed cookie
                       into `request.session` and writes it back
    4. CORS:           preflight handling and CORS headers
    5. Authentication: accept / redirect / 401 for controller actions

    Session must be outside Authentication so the gate can read the session,
    and outside the routes so a login endpoint's writes reach the cookie.
"""
