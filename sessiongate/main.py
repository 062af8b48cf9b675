"""
SessionGate — FastAPI Application Factory
==========================================

What:  Creates and configures a FastAPI application protected by the gate.
Why:   The gate only works when the registry, the session middleware, and the
       authentication middleware are wired together in the right order.
       Doing that in one factory keeps host applications from getting it wrong.
How:   create_app(controllers) registers every controller with a fresh
       ActionExemptionRegistry, mounts its routes, and installs the middleware
       chain and exception handlers.
Who:   uvicorn (`uvicorn sessiongate.main:app`), tests, host applications.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ReqID → Logging → Session → CORS → Authentication  │
    │                                                     │
    │  Routes:                                            │
    │  controllers (gated)          GET /health (open)    │
    │                                                     │
    │  Exception Handlers:                                │
    │  InvalidArgument→400 │ Configuration→500 │ *→500    │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from sessiongate import __version__
from sessiongate.config import settings
from sessiongate.controller import Controller
from sessiongate.exceptions import ConfigurationError, InvalidArgumentError, SessionGateError
from sessiongate.middleware.authentication import AuthenticationMiddleware
from sessiongate.middleware.logging import RequestLoggingMiddleware
from sessiongate.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware, request_id_var
from sessiongate.routes import account, health
from sessiongate.services.registry import ActionExemptionRegistry

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] sessiongate.services.gate [a1b2c3d4] Blocked ...
    Called once at startup, before anything else logs.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("SessionGate %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: a development setup should still come up
        logger.error("Configuration error: %s", str(e))

    registry: ActionExemptionRegistry = app.state.registry
    logger.info("Gated controllers: %s", ", ".join(registry.controllers) or "(none)")

    yield

    logger.info("SessionGate shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map SessionGate exceptions to the JSON error envelope.

    Handler hierarchy:
        InvalidArgumentError → 400 Bad Request
        ConfigurationError   → 500 Internal Server Error (details logged only)
        SessionGateError     → 500 Internal Server Error
        Exception (fallback) → 500 Internal Server Error

    Errors raised inside the authentication middleware run outside FastAPI's
    routing, so only the Exception fallback sees them.
    """

    @app.exception_handler(InvalidArgumentError)
    async def handle_invalid_argument(request: Request, exc: InvalidArgumentError):
        rid = request_id_var.get("")
        logger.warning("Invalid argument: %s", exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "invalid_argument",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        rid = request_id_var.get("")
        logger.error("Configuration error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(SessionGateError)
    async def handle_session_gate_error(request: Request, exc: SessionGateError):
        rid = request_id_var.get("")
        logger.error("SessionGate error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(controllers: Optional[Sequence[Controller]] = None) -> FastAPI:
    """
    Create a FastAPI application whose controller actions are gated.

    Args:
        controllers: Controllers to register and mount. Defaults to the
                     reference `account` controller.

    Raises:
        ConfigurationError: If any controller breaks the registration rules.
                            Raised here, before the app serves anything.
    """
    if controllers is None:
        controllers = [account.controller]

    app = FastAPI(
        title="SessionGate",
        description="Session-based authentication gate for controller actions.",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Registry & Routes ─────────────────────────────────────────────────
    registry = ActionExemptionRegistry()
    for controller in controllers:
        registry.handle(controller)
        app.include_router(controller.router)
    app.include_router(health.router)
    app.state.registry = registry

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added = first to execute
    app.add_middleware(AuthenticationMiddleware, registry=registry, controllers=controllers)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # session cookie
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Location"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        same_site=settings.session_same_site,
        https_only=settings.session_https_only,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    return app


app = create_app()
