"""
SessionGate — Authentication Middleware
========================================

What:  The dispatcher seam: maps each HTTP request to a registered controller
       action and runs the AuthenticationGate for it.
Why:   The gate itself is framework-agnostic. This module supplies the
       Starlette pieces it needs: the session (from SessionMiddleware), a
       pipeline that continues to the route, and responses for blocked
       requests.
How:   1. Match the request against the gated controllers' own routes
       2. Look up the matched route name in the ActionExemptionRegistry
       3. Not a controller action → pass through untouched
       4. Otherwise → AuthenticationGate.intercept(...)

Route resolution:
    The middleware keeps its own list of the controllers' APIRoutes instead of
    walking `request.app.routes`. How an application stores included routers
    differs between FastAPI releases (flattened copies in some, wrapper routes
    without a name in others), and an action that fails to resolve would be
    served ungated.

Middleware order:
    SessionMiddleware must run BEFORE this middleware (be added after it),
    otherwise `request.session` is unavailable. create_app() takes care of it.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from fastapi.routing import APIRoute
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.routing import Match

from sessiongate.config import settings
from sessiongate.controller import Controller
from sessiongate.middleware.request_id import request_id_var
from sessiongate.models.action import Action
from sessiongate.services.gate import AuthenticationGate, GateOutcome
from sessiongate.services.gate_base import GateResults, Pipeline
from sessiongate.services.registry import ActionExemptionRegistry
from sessiongate.services.session_store import SessionStateStore

logger = logging.getLogger(__name__)


class CallNextPipeline(Pipeline):
    """Continues to the route via Starlette's `call_next`."""

    def __init__(self, request: Request, call_next: RequestResponseEndpoint):
        self.request = request
        self.call_next = call_next

    async def next(self, action: Action, parameters: Any) -> Response:
        self.request.state.gate_outcome = GateOutcome.ACCEPTED
        return await self.call_next(self.request)


class StarletteGateResults(GateResults):
    """
    Builds the responses for blocked requests.

    Args:
        routes: Gated routes by name. The login URL is built from its own route
                when present, otherwise through the application's router.
    """

    def __init__(self, request: Request, routes: Optional[Mapping[str, APIRoute]] = None):
        self.request = request
        self.routes = routes or {}

    def redirect_to(self, action: Action) -> Response:
        self.request.state.gate_outcome = GateOutcome.REDIRECT_ISSUED
        return RedirectResponse(
            url=self.url_for(action), status_code=settings.login_redirect_status
        )

    def url_for(self, action: Action) -> str:
        name = action.route_name
        route = self.routes.get(name)
        if route is None:
            return str(self.request.url_for(name))
        return str(route.url_path_for(name).make_absolute_url(base_url=self.request.base_url))

    def send_status(self, status_code: int) -> Response:
        self.request.state.gate_outcome = GateOutcome.UNAUTHORIZED_ISSUED
        return JSONResponse(
            status_code=status_code,
            content={
                "error": "unauthorized",
                "message": "Authentication required. Please log in and retry.",
                "request_id": request_id_var.get(""),
            },
        )


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Runs the AuthenticationGate in front of every registered controller action.

    Args:
        registry:    The application's ActionExemptionRegistry. Controllers must
                     be handled before the first request.
        controllers: The gated controllers. Their routes are matched here
                     directly and must be mounted without an extra prefix.
    """

    def __init__(
        self,
        app,
        registry: ActionExemptionRegistry,
        controllers: Sequence[Controller] = (),
        **kwargs,
    ):
        super().__init__(app, **kwargs)
        self.registry = registry
        self.routes: List[APIRoute] = [
            route
            for controller in controllers
            for route in controller.router.routes
            if isinstance(route, APIRoute)
        ]
        self.routes_by_name: Dict[str, APIRoute] = {route.name: route for route in self.routes}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        action = self.resolve_action(request)
        if action is None:
            return await call_next(request)

        gate = AuthenticationGate(
            sessions=SessionStateStore(request.session),
            registry=self.registry,
            results=StarletteGateResults(request, self.routes_by_name),
        )
        return await gate.intercept(CallNextPipeline(request, call_next), action, request)

    def resolve_action(self, request: Request) -> Optional[Action]:
        """
        The registered action this request will be routed to, or None.

        Only a full match (path and method) counts. A path match with the wrong
        method is left to the router, which answers 405.
        """
        for route in self.routes:
            match, _ = route.matches(request.scope)
            if match == Match.FULL:
                return self.registry.find(route.name)
        return None
