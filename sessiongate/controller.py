"""
SessionGate — Controller Registration
======================================

What:  Declares a controller's actions and mounts them as named FastAPI routes.
Why:   The gate needs to know, per action, whether it is the login action,
       public, or protected. Declaring that next to the endpoint keeps the
       metadata and the route in one place, and produces an explicit
       ControllerDescriptor for the registry instead of discovering it by
       reflection at request time.
How:   Each decorator records an ActionDescriptor and adds the endpoint to the
       controller's APIRouter with the route name `<controller>.<action>`.
       The AuthenticationMiddleware maps matched route names back to actions.

Usage:
    account = Controller("account", prefix="/account")

    @account.action("/")
    async def index(): ...                       # protected

    @account.login("/login", methods=["GET", "POST"])
    async def login(): ...                       # login action, exempt

    @account.public("/about")
    async def about(): ...                       # no session needed

    registry.handle(account)
    app.include_router(account.router)
"""

from typing import Any, Callable, List, Optional, Sequence

from fastapi import APIRouter

from sessiongate.exceptions import ConfigurationError
from sessiongate.models.action import (
    ActionDescriptor,
    ControllerDescriptor,
    UnauthorizedMode,
    route_name,
)

Endpoint = Callable[..., Any]


class Controller:
    """
    A named group of actions sharing one login action and one unauthorized mode.

    Args:
        name:   Controller name, unique within an application. Must not contain
                dots (it is the first half of every route name).
        prefix: URL prefix for all actions.
        tags:   OpenAPI tags (defaults to [name]).
    """

    def __init__(self, name: str, prefix: str = "", tags: Optional[List[str]] = None):
        if not name or "." in name:
            raise ConfigurationError(f"Invalid controller name '{name}'", controller=name)
        self.name = name
        self.prefix = prefix
        # Full paths on the routes themselves; the middleware matches them as is
        self.router = APIRouter(tags=tags or [name])
        self._actions: List[ActionDescriptor] = []

    def action(
        self,
        path: str,
        *,
        methods: Sequence[str] = ("GET",),
        name: Optional[str] = None,
        **route_kwargs: Any,
    ) -> Callable[[Endpoint], Endpoint]:
        """Register a protected action (requires a session)."""
        return self._register(path, methods, name, route_kwargs)

    def public(
        self,
        path: str,
        *,
        methods: Sequence[str] = ("GET",),
        name: Optional[str] = None,
        **route_kwargs: Any,
    ) -> Callable[[Endpoint], Endpoint]:
        """Register an action reachable without a session."""
        return self._register(path, methods, name, route_kwargs, public=True)

    def login(
        self,
        path: str,
        *,
        unauthorized: UnauthorizedMode = UnauthorizedMode.REDIRECT_TO_LOGIN,
        methods: Sequence[str] = ("GET",),
        name: Optional[str] = None,
        **route_kwargs: Any,
    ) -> Callable[[Endpoint], Endpoint]:
        """
        Register the controller's login action.

        `unauthorized` decides what happens to every OTHER action of this
        controller when the caller has no session. The login route itself must
        not take path parameters, since blocked requests are redirected to it.
        """
        return self._register(
            path, methods, name, route_kwargs, login=True, unauthorized_mode=unauthorized
        )

    def describe(self) -> ControllerDescriptor:
        """Explicit description consumed by ActionExemptionRegistry.handle()."""
        return ControllerDescriptor(name=self.name, actions=tuple(self._actions))

    def _register(
        self,
        path: str,
        methods: Sequence[str],
        name: Optional[str],
        route_kwargs: dict,
        **flags: Any,
    ) -> Callable[[Endpoint], Endpoint]:
        def decorator(endpoint: Endpoint) -> Endpoint:
            descriptor = ActionDescriptor(name=name or endpoint.__name__, **flags)
            self._actions.append(descriptor)
            self.router.add_api_route(
                self.prefix + path,
                endpoint,
                methods=list(methods),
                name=route_name(self.name, descriptor.name),
                **route_kwargs,
            )
            return endpoint

        return decorator
