"""
SessionGate — Account Controller
=================================

What:  Reference controller wired through the gate.
Why:   Shows the three kinds of action a gated controller has, and gives the
       default application something to serve.

Actions:
    GET       /account/         index   protected
    GET|POST  /account/login    login   login action (exempt), redirect mode
    GET       /account/logout   logout  protected

Without a session, index and logout redirect to /account/login.
"""

import logging
from typing import Optional

from fastapi import Depends, Request

from sessiongate.controller import Controller
from sessiongate.models.action import UnauthorizedMode
from sessiongate.schemas.session import ErrorResponse, LoginRequest, SessionResponse
from sessiongate.services.session_store import SessionStateStore, get_session_store

logger = logging.getLogger(__name__)

controller = Controller("account", prefix="/account")

PROTECTED_RESPONSES = {
    302: {"description": "No session: redirect to the login action"},
    500: {"description": "Server error", "model": ErrorResponse},
}


@controller.action("/", response_model=SessionResponse, responses=PROTECTED_RESPONSES)
async def index(sessions: SessionStateStore = Depends(get_session_store)) -> SessionResponse:
    return SessionResponse(authenticated=True, principal=str(sessions.principal))


@controller.login(
    "/login",
    unauthorized=UnauthorizedMode.REDIRECT_TO_LOGIN,
    methods=["GET", "POST"],
    response_model=SessionResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
)
async def login(
    request: Request,
    credentials: Optional[LoginRequest] = None,
    sessions: SessionStateStore = Depends(get_session_store),
) -> SessionResponse:
    """
    GET reports the current state; POST stores the given principal.

    No credential check happens here (see LoginRequest).
    """
    if request.method == "POST" and credentials is not None:
        sessions.create_session(credentials.principal)
        logger.info("Session created")
        return SessionResponse(
            authenticated=True,
            principal=credentials.principal,
            message="Logged in",
        )

    if sessions.has_session():
        return SessionResponse(authenticated=True, principal=str(sessions.principal))
    return SessionResponse(authenticated=False, message="Login required")


@controller.action("/logout", response_model=SessionResponse, responses=PROTECTED_RESPONSES)
async def logout(sessions: SessionStateStore = Depends(get_session_store)) -> SessionResponse:
    sessions.destroy_session()
    logger.info("Session destroyed")
    return SessionResponse(authenticated=False, message="Logged out")
