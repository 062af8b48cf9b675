"""
SessionGate — Authentication Gate
==================================

What:  Decides, for one dispatched action, whether the request proceeds, is
       redirected to the login action, or receives 401 Unauthorized.
Why:   Every protected controller action needs the same guard clause. Putting
       it in one place means no endpoint can forget it.
How:   Consults the ActionExemptionRegistry (is the action protected, and what
       is the controller's policy?) and the SessionStateStore (is a principal
       present?), then acts through the Pipeline / GateResults collaborators.

Per-request state machine:
    Dispatched ──accepts()──► Accepted                    (exempt / public)
         │
         └──► Checking ──session──► Accepted
                   │
                   └──no session──► RedirectIssued         (REDIRECT_TO_LOGIN)
                                    UnauthorizedIssued     (RETURN_UNAUTHORIZED_STATUS)

    All three are terminal. One synchronous decision per request, no retries.
    The gate never mutates the session.
"""

import enum
import logging
from typing import Any

from starlette import status

from sessiongate.models.action import Action, UnauthorizedMode
from sessiongate.services.gate_base import GateResults, Pipeline
from sessiongate.services.registry import ActionExemptionRegistry
from sessiongate.services.session_store import SessionStateStore

logger = logging.getLogger(__name__)


class GateOutcome(str, enum.Enum):
    """Terminal state of one pass through the gate."""

    ACCEPTED = "accepted"
    REDIRECT_ISSUED = "redirect_issued"
    UNAUTHORIZED_ISSUED = "unauthorized_issued"


class AuthenticationGate:
    """
    Admission decision for controller actions.

    Instances are cheap and normally created per request, bound to that
    request's session store and result factory. The registry is shared.
    """

    def __init__(
        self,
        sessions: SessionStateStore,
        registry: ActionExemptionRegistry,
        results: GateResults,
    ):
        self.sessions = sessions
        self.registry = registry
        self.results = results

    def accepts(self, action: Action) -> bool:
        """
        True if `action` bypasses the session check altogether.

        That is the login action itself and any public action. No session
        lookup happens here.
        """
        return self.registry.is_exempt(action) or not self.registry.requires_login(action)

    def decide(self, action: Action) -> GateOutcome:
        """The outcome `intercept()` would act on, without side effects."""
        if self.accepts(action) or self.sessions.has_session():
            return GateOutcome.ACCEPTED

        mode = self.registry.unauthorized_mode_for(action.controller)
        if mode is UnauthorizedMode.RETURN_UNAUTHORIZED_STATUS:
            return GateOutcome.UNAUTHORIZED_ISSUED
        return GateOutcome.REDIRECT_ISSUED

    async def intercept(self, pipeline: Pipeline, action: Action, parameters: Any = None) -> Any:
        """
        Enforce the decision for one dispatched action.

        Returns:
            The pipeline's result when admitted, otherwise the redirect or
            status response produced by GateResults.

        Raises:
            ConfigurationError: If the action's controller is not registered.
                Errors from the result factory propagate.
        """
        outcome = self.decide(action)

        if outcome is GateOutcome.ACCEPTED:
            logger.debug("Admitted %s", action.route_name)
            return await pipeline.next(action, parameters)

        if outcome is GateOutcome.UNAUTHORIZED_ISSUED:
            logger.info("Blocked %s: no session, returning 401", action.route_name)
            return self.results.send_status(status.HTTP_401_UNAUTHORIZED)

        login = self.registry.login_action_for(action.controller)
        logger.info("Blocked %s: no session, redirecting to %s", action.route_name, login.route_name)
        return self.results.redirect_to(login)
