"""
SessionGate — Abstract Gate Collaborators
==========================================

What:  Abstract base classes for the two things the gate asks of its host:
       continuing the pipeline, and producing a redirect or a status response.
Why:   The gate's decision does not depend on Starlette. The host framework
       supplies concrete implementations (see middleware/authentication.py);
       tests supply mocks.
How:   Concrete classes implement `Pipeline.next()` and the two GateResults
       factories. Whatever they return is passed back to the dispatcher as-is.
"""

from abc import ABC, abstractmethod
from typing import Any

from sessiongate.models.action import Action


class Pipeline(ABC):
    """
    The remainder of the request pipeline after the gate.

    Contract:
        - `next()` is awaited exactly once when the gate admits a request
        - It is never awaited when the gate redirects or returns 401
    """

    @abstractmethod
    async def next(self, action: Action, parameters: Any) -> Any:
        """
        Forward control to the next stage.

        Args:
            action:     The admitted action.
            parameters: Opaque per-request payload from the dispatcher
                        (the Starlette Request in the HTTP binding).

        Returns:
            Whatever the rest of the pipeline produces (a Response over HTTP).
        """
        ...


class GateResults(ABC):
    """Factory for the two responses a blocked request can receive."""

    @abstractmethod
    def redirect_to(self, action: Action) -> Any:
        """Produce a redirect to `action` (the controller's login action)."""
        ...

    @abstractmethod
    def send_status(self, status_code: int) -> Any:
        """Produce a bare status response (401 for blocked requests)."""
        ...
