"""
SessionGate — Session State Store
==================================

What:  Create / destroy / query the authenticated principal of a session.
Why:   The gate only needs "is somebody logged in?"; it should not know how
       sessions are stored. Wrapping the mapping keeps that one question in one
       place.
How:   Stores the principal under `settings.principal_session_key` in whatever
       MutableMapping the host provides. With Starlette's SessionMiddleware that
       mapping is `request.session`, persisted in a signed cookie.

Principal values:
    Opaque. The store checks presence only and never inspects the value. With
    cookie sessions the value must be JSON-serializable (a user id or login
    name, not an ORM object).
"""

from typing import Any, Generic, MutableMapping, Optional, TypeVar

from fastapi import Request

from sessiongate.config import settings
from sessiongate.exceptions import InvalidArgumentError

P = TypeVar("P")


class SessionStateStore(Generic[P]):
    """Principal presence over an opaque session mapping."""

    def __init__(self, session: MutableMapping[str, Any], key: Optional[str] = None):
        self._session = session
        self._key = key or settings.principal_session_key

    def create_session(self, principal: P) -> None:
        """
        Store `principal`; `has_session()` is True afterwards.

        Calling it again replaces the previous principal.

        Raises:
            InvalidArgumentError: If principal is None.
        """
        if principal is None:
            raise InvalidArgumentError("Principal must not be None", field="principal")
        self._session[self._key] = principal

    def destroy_session(self) -> None:
        """
        Clear the session; `has_session()` is False afterwards.

        The whole mapping is cleared, not just the principal, so nothing from
        the authenticated session survives a logout.
        """
        self._session.clear()

    def has_session(self) -> bool:
        return self._session.get(self._key) is not None

    @property
    def principal(self) -> Optional[P]:
        return self._session.get(self._key)


def get_session_store(request: Request) -> SessionStateStore:
    """
    FastAPI dependency providing a SessionStateStore for the current request.

    Requires Starlette's SessionMiddleware (installed by create_app).

    Usage:
        @router.post("/login")
        async def login(sessions: SessionStateStore = Depends(get_session_store)):
            sessions.create_session("alice")
    """
    return SessionStateStore(request.session)
