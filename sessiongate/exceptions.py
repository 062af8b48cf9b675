"""
SessionGate — Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for the two failure modes of the gate.
Why:   Misconfiguration must fail fast and loudly; bad input to the session
       primitive must be distinguishable from server faults.
How:   Each exception carries a message and optional context dict. Global
       exception handlers (registered in main.py) turn them into structured
       JSON error responses.
Who:   Raised by the registry, the session store, and the controller helpers.

Exception Hierarchy:
    SessionGateError (base)
    ├── ConfigurationError    → 500 Internal Server Error (operator must fix)
    └── InvalidArgumentError  → 400 Bad Request (caller can fix)

Note:
    A blocked request is NOT an exception. Redirects and 401 responses are the
    normal output of the gate and are returned, not raised.
"""

from typing import Any, Dict, Optional


class SessionGateError(Exception):
    """
    Base exception for all SessionGate errors.

    Attributes:
        message:  Human-readable description
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ConfigurationError(SessionGateError):
    """
    Raised when controller registration or registry lookups are inconsistent.

    When:
        - A controller declares zero or more than one login action
        - Two actions of one controller share a name
        - An unauthorized mode is attached to an action that is not the login action
        - The registry is queried for a controller that was never handled
    HTTP:    500 Internal Server Error

    These are programming errors in the host application, so the client only
    ever sees a generic message. The details go to the server log.
    """

    def __init__(
        self,
        message: str = "Authentication gate is misconfigured",
        controller: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if controller:
            ctx["controller"] = controller
        super().__init__(message=message, context=ctx)
        self.controller = controller


class InvalidArgumentError(SessionGateError, ValueError):
    """
    Raised when an argument to a SessionGate primitive is invalid.

    When:    `SessionStateStore.create_session(None)`.
    HTTP:    400 Bad Request

    Also a ValueError so plain `except ValueError` callers keep working.
    """

    def __init__(
        self,
        message: str = "Invalid argument",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
