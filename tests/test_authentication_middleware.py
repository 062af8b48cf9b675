"""
SessionGate — End-to-End Gate Tests over HTTP
==============================================

What:  The gate wired into a real FastAPI app, driven through HTTPX.
Why:   Covers what the unit tests cannot: route resolution, the signed session
       cookie round trip, redirect URLs, and the middleware order.
How:   `make_client` builds create_app(...) behind ASGITransport. The client
       keeps cookies between requests and does not follow redirects.
"""

from types import SimpleNamespace

import pytest
from fastapi import Depends, FastAPI
from starlette.requests import Request

from sessiongate.controller import Controller
from sessiongate.exceptions import ConfigurationError
from sessiongate.main import create_app
from sessiongate.middleware.authentication import AuthenticationMiddleware, StarletteGateResults
from sessiongate.models.action import Action, UnauthorizedMode
from sessiongate.routes import account
from sessiongate.schemas.session import ErrorResponse
from sessiongate.services.gate import GateOutcome
from sessiongate.services.registry import ActionExemptionRegistry
from sessiongate.services.session_store import SessionStateStore, get_session_store


def _api_controller():
    """index (protected) + login in 401 mode + a public action."""
    api = Controller("api", prefix="/api")

    @api.action("/")
    async def index(sessions: SessionStateStore = Depends(get_session_store)):
        return {"principal": sessions.principal}

    @api.login(
        "/login",
        unauthorized=UnauthorizedMode.RETURN_UNAUTHORIZED_STATUS,
        methods=["POST"],
    )
    async def login(sessions: SessionStateStore = Depends(get_session_store)):
        sessions.create_session("X")
        return {"ok": True}

    @api.public("/status")
    async def status():
        return {"up": True}

    return api


class TestAccountController:
    """Scenario A and C against the reference controller."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/account/", "/account/logout"])
    async def test_no_session_redirects_to_login(self, make_client, path):
        client = await make_client()
        response = await client.get(path)

        assert response.status_code == 302
        assert response.headers["location"] == "http://test/account/login"

    @pytest.mark.asyncio
    async def test_login_action_is_reachable_without_session(self, make_client):
        client = await make_client()
        response = await client.get("/account/login")

        assert response.status_code == 200
        assert response.json()["authenticated"] is False

    @pytest.mark.asyncio
    async def test_login_then_index(self, make_client):
        client = await make_client()

        login = await client.post("/account/login", json={"principal": "Sub-Zero"})
        assert login.status_code == 200
        assert login.json()["principal"] == "Sub-Zero"

        response = await client.get("/account/")
        assert response.status_code == 200
        assert response.json() == {
            "authenticated": True,
            "principal": "Sub-Zero",
            "message": "",
        }

    @pytest.mark.asyncio
    async def test_logout_ends_the_session(self, make_client):
        client = await make_client()
        await client.post("/account/login", json={"principal": "Sub-Zero"})

        logout = await client.get("/account/logout")
        assert logout.status_code == 200
        assert logout.json()["authenticated"] is False

        response = await client.get("/account/")
        assert response.status_code == 302

    @pytest.mark.asyncio
    async def test_login_body_is_validated(self, make_client):
        client = await make_client()
        response = await client.post("/account/login", json={"principal": ""})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_forged_cookie_is_not_a_session(self, make_client):
        client = await make_client()
        client.cookies.set("sessiongate_session", "eyJzZXNzaW9uZ2F0ZS5wcmluY2lwYWwiOiAiWCJ9")

        response = await client.get("/account/")
        assert response.status_code == 302


class TestStatusMode:
    """Scenario B: a controller whose login action returns 401 for others."""

    @pytest.mark.asyncio
    async def test_no_session_returns_401(self, make_client):
        client = await make_client([_api_controller()])
        response = await client.get("/api/")

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthorized"
        ErrorResponse.model_validate(body)
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_session_present_is_forwarded(self, make_client):
        client = await make_client([_api_controller()])
        await client.post("/api/login")

        response = await client.get("/api/")
        assert response.status_code == 200
        assert response.json() == {"principal": "X"}

    @pytest.mark.asyncio
    async def test_public_action_is_forwarded(self, make_client):
        client = await make_client([_api_controller()])
        response = await client.get("/api/status")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_method_reaches_the_router(self, make_client):
        client = await make_client([_api_controller()])
        response = await client.get("/api/login")
        assert response.status_code == 405


class TestUngatedRoutes:

    @pytest.mark.asyncio
    async def test_health_is_never_gated(self, make_client):
        client = await make_client()
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["controllers"] == ["account"]

    @pytest.mark.asyncio
    async def test_health_without_controllers(self, make_client):
        client = await make_client([])
        response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_unknown_path_is_404_not_redirect(self, make_client):
        client = await make_client()
        response = await client.get("/nowhere")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, make_client):
        client = await make_client()
        response = await client.get("/account/", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"


class TestCreateApp:

    def test_invalid_controller_fails_at_startup(self):
        broken = Controller("broken")

        @broken.action("/")
        async def index():
            return {}

        with pytest.raises(ConfigurationError, match="exactly one login action"):
            create_app([broken])

    def test_registry_is_exposed_on_app_state(self):
        app = create_app()
        assert app.state.registry.controllers == ["account"]

    def test_error_envelope_is_documented(self):
        schema = create_app().openapi()
        assert "ErrorResponse" in schema["components"]["schemas"]

        responses = schema["paths"]["/account/"]["get"]["responses"]
        assert "302" in responses
        assert (
            responses["500"]["content"]["application/json"]["schema"]["$ref"]
            == "#/components/schemas/ErrorResponse"
        )


def _request(path, method="GET", app=None):
    """A bare Request whose application knows none of the gated routes."""
    return Request(
        {
            "type": "http",
            "method": method,
            "scheme": "http",
            "server": ("test", 80),
            "path": path,
            "root_path": "",
            "query_string": b"",
            "headers": [],
            "app": app if app is not None else FastAPI(),
        }
    )


class TestRouteResolution:
    """Actions resolve from the controllers' routes, not the app's route table."""

    @pytest.fixture
    def middleware(self):
        registry = ActionExemptionRegistry()
        registry.handle(account.controller)
        return AuthenticationMiddleware(
            FastAPI(), registry=registry, controllers=[account.controller]
        )

    @pytest.mark.parametrize(
        "path, method, expected",
        [
            ("/account/", "GET", "account.index"),
            ("/account/logout", "GET", "account.logout"),
            ("/account/login", "POST", "account.login"),
        ],
    )
    def test_resolves_without_app_routes(self, middleware, path, method, expected):
        action = middleware.resolve_action(_request(path, method))
        assert action is not None
        assert action.route_name == expected

    def test_wrapped_app_routes_do_not_hide_actions(self, middleware):
        """An app whose routes carry no names still gets every action gated."""
        opaque = SimpleNamespace(routes=[SimpleNamespace(name=None)])
        action = middleware.resolve_action(_request("/account/", app=opaque))
        assert action.route_name == "account.index"
        assert action.requires_login is True

    @pytest.mark.parametrize(
        "path, method",
        [("/health", "GET"), ("/nowhere", "GET"), ("/account/logout", "DELETE")],
    )
    def test_other_requests_are_not_actions(self, middleware, path, method):
        assert middleware.resolve_action(_request(path, method)) is None

    def test_without_controllers_nothing_resolves(self):
        bare = AuthenticationMiddleware(FastAPI(), registry=ActionExemptionRegistry())
        assert bare.resolve_action(_request("/account/")) is None

    def test_every_protected_app_route_is_resolved(self):
        """Each named controller route mounted by create_app maps to an action."""
        app = create_app()
        registry = app.state.registry
        middleware = AuthenticationMiddleware(
            app, registry=registry, controllers=[account.controller]
        )
        names = {route.name for route in middleware.routes}
        assert names == {"account.index", "account.login", "account.logout"}
        assert all(registry.find(name) is not None for name in names)

    def test_login_url_built_from_login_route(self, middleware):
        request = _request("/account/")
        request.scope["state"] = {}
        results = StarletteGateResults(request, middleware.routes_by_name)

        response = results.redirect_to(Action(controller="account", name="login", login=True))

        assert response.status_code == 302
        assert response.headers["location"] == "http://test/account/login"
        assert request.state.gate_outcome is GateOutcome.REDIRECT_ISSUED
