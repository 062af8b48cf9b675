"""
SessionGate — Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the whole suite.
Why:   Unit tests need a registry with known controllers and mocked gate
       collaborators; HTTP tests need an app and a cookie-keeping client.

Fixture Hierarchy:
    ├── portal_controller / api_controller: descriptors mirroring the two
    │   classic setups (redirect mode with index/login/logout, status mode
    │   with index/login)
    ├── registry:       ActionExemptionRegistry with both handled
    ├── session:        plain dict standing in for request.session
    ├── pipeline:       AsyncMock Pipeline
    ├── results:        MagicMock GateResults
    ├── gate:           AuthenticationGate over the above
    └── make_client:    factory for HTTPX AsyncClients over create_app()
"""

import os
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any sessiongate imports
os.environ["SESSION_SECRET_KEY"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from sessiongate.models.action import ActionDescriptor, ControllerDescriptor, UnauthorizedMode
from sessiongate.services.gate import AuthenticationGate
from sessiongate.services.gate_base import GateResults, Pipeline
from sessiongate.services.registry import ActionExemptionRegistry
from sessiongate.services.session_store import SessionStateStore


@pytest.fixture
def portal_controller():
    """index (protected), login (login action, redirect mode), logout (protected)."""
    return ControllerDescriptor(
        name="portal",
        actions=(
            ActionDescriptor(name="index"),
            ActionDescriptor(name="login", login=True),
            ActionDescriptor(name="logout"),
        ),
    )


@pytest.fixture
def api_controller():
    """index (protected), login (login action, 401 mode)."""
    return ControllerDescriptor(
        name="api",
        actions=(
            ActionDescriptor(name="index"),
            ActionDescriptor(
                name="login",
                login=True,
                unauthorized_mode=UnauthorizedMode.RETURN_UNAUTHORIZED_STATUS,
            ),
        ),
    )


@pytest.fixture
def registry(portal_controller, api_controller):
    registry = ActionExemptionRegistry()
    registry.handle(portal_controller)
    registry.handle(api_controller)
    return registry


@pytest.fixture
def session():
    """A plain dict behaves exactly like request.session for the store."""
    return {}


@pytest.fixture
def sessions(session):
    return SessionStateStore(session)


@pytest.fixture
def pipeline():
    pipeline = MagicMock(spec=Pipeline)
    pipeline.next = AsyncMock(return_value="next-stage")
    return pipeline


@pytest.fixture
def results():
    results = MagicMock(spec=GateResults)
    results.redirect_to.return_value = "redirect"
    results.send_status.return_value = "status"
    return results


@pytest.fixture
def gate(sessions, registry, results):
    return AuthenticationGate(sessions=sessions, registry=registry, results=results)


@pytest_asyncio.fixture
async def make_client():
    """
    Factory for HTTPX AsyncClients talking to create_app(controllers).

    Usage:
        async def test_x(make_client):
            client = await make_client()               # default account controller
            client = await make_client([my_controller])
    """
    from sessiongate.main import create_app

    clients = []

    async def _make(controllers=None):
        app = create_app(controllers)
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
