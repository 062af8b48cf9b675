"""
SessionGate — Action Exemption Registry
========================================

What:  Builds, once per controller, the table of its actions with their
       authentication requirement, its login action, and its unauthorized mode.
Why:   The gate runs on every request; the controller metadata it needs is
       fixed at startup. Resolving it once keeps the per-request path to a few
       dict lookups and surfaces misconfiguration before the first request.
How:   `handle()` validates a ControllerDescriptor and records resolved Action
       objects. Queries read the recorded table only.

Rules applied by handle():
    1. Exactly one action is marked as the login action
    2. The login action never requires a session (no redirect loop to itself)
    3. Its unauthorized mode (default REDIRECT_TO_LOGIN) becomes the
       controller-wide mode
    4. Public actions do not require a session; every other action does
    5. An unauthorized mode on any non-login action is rejected

Thread Safety:
    The table is written under a lock and only read afterwards. Concurrent
    first-time registration of the same controller builds it exactly once.
"""

import logging
import threading
from typing import Dict, List, Optional, Union

from sessiongate.exceptions import ConfigurationError
from sessiongate.models.action import (
    DEFAULT_UNAUTHORIZED_MODE,
    Action,
    ControllerDescriptor,
    UnauthorizedMode,
)

logger = logging.getLogger(__name__)


class _ControllerEntry:
    """Resolved registry record of one controller."""

    __slots__ = ("descriptor", "actions", "login_action", "mode")

    def __init__(
        self,
        descriptor: ControllerDescriptor,
        actions: Dict[str, Action],
        login_action: Action,
        mode: UnauthorizedMode,
    ):
        self.descriptor = descriptor
        self.actions = actions
        self.login_action = login_action
        self.mode = mode


class ActionExemptionRegistry:
    """
    Per-controller action table consulted by the AuthenticationGate.

    Queries about a controller or action that was never handled raise
    ConfigurationError. There is no fallback: without a registered login
    action there is nothing to redirect to.
    """

    def __init__(self):
        self._entries: Dict[str, _ControllerEntry] = {}
        self._routes: Dict[str, Action] = {}
        self._lock = threading.Lock()

    # ── Registration ──────────────────────────────────────────────────────

    def handle(self, controller: Union[ControllerDescriptor, object]) -> None:
        """
        Register a controller's actions.

        Args:
            controller: A ControllerDescriptor, or any object with a
                        `describe()` method returning one (e.g. Controller).

        Raises:
            ConfigurationError: If the description breaks the rules above, or a
                different controller was already registered under this name.
        """
        descriptor = self._describe(controller)

        with self._lock:
            existing = self._entries.get(descriptor.name)
            if existing is not None:
                if existing.descriptor != descriptor:
                    raise ConfigurationError(
                        f"Controller '{descriptor.name}' is already registered "
                        "with a different set of actions",
                        controller=descriptor.name,
                    )
                logger.debug("Controller '%s' already registered", descriptor.name)
                return

            entry = self._build(descriptor)
            self._entries[descriptor.name] = entry
            for action in entry.actions.values():
                self._routes[action.route_name] = action

        logger.info(
            "Registered controller '%s': %d actions, login=%s, mode=%s",
            descriptor.name,
            len(entry.actions),
            entry.login_action.name,
            entry.mode.value,
        )

    @staticmethod
    def _describe(controller: Union[ControllerDescriptor, object]) -> ControllerDescriptor:
        if isinstance(controller, ControllerDescriptor):
            return controller
        describe = getattr(controller, "describe", None)
        if describe is None:
            raise ConfigurationError(
                f"Cannot register {controller!r}: expected a ControllerDescriptor "
                "or an object with describe()"
            )
        return describe()

    @staticmethod
    def _build(descriptor: ControllerDescriptor) -> _ControllerEntry:
        name = descriptor.name
        logins = [a for a in descriptor.actions if a.login]
        if len(logins) != 1:
            raise ConfigurationError(
                f"Controller '{name}' must declare exactly one login action, "
                f"found {len(logins)}",
                controller=name,
                context={"login_actions": [a.name for a in logins]},
            )

        login = logins[0]
        mode = login.unauthorized_mode or DEFAULT_UNAUTHORIZED_MODE
        actions: Dict[str, Action] = {}

        for declared in descriptor.actions:
            if declared.name in actions:
                raise ConfigurationError(
                    f"Controller '{name}' declares action '{declared.name}' twice",
                    controller=name,
                )
            if declared.unauthorized_mode is not None and not declared.login:
                raise ConfigurationError(
                    f"Action '{name}.{declared.name}' sets an unauthorized mode "
                    "but is not the login action",
                    controller=name,
                )
            actions[declared.name] = Action(
                controller=name,
                name=declared.name,
                requires_login=not (declared.login or declared.public),
                login=declared.login,
                unauthorized_mode=mode if declared.login else None,
            )

        return _ControllerEntry(
            descriptor=descriptor,
            actions=actions,
            login_action=actions[login.name],
            mode=mode,
        )

    # ── Queries ───────────────────────────────────────────────────────────

    def is_exempt(self, action: Action) -> bool:
        """True only for the designated login action of the action's controller."""
        return self._recorded(action).login

    def requires_login(self, action: Action) -> bool:
        """Whether the gate must check the session before running `action`."""
        return self._recorded(action).requires_login

    def unauthorized_mode_for(self, controller: str) -> UnauthorizedMode:
        """
        The controller-wide policy for blocked requests.

        Raises:
            ConfigurationError: Unknown controller.
        """
        return self._entry(controller).mode

    def login_action_for(self, controller: str) -> Action:
        """The redirect target for blocked requests to `controller`."""
        return self._entry(controller).login_action

    def find(self, route_name: Optional[str]) -> Optional[Action]:
        """The registered action mounted under `route_name`, if any."""
        if not route_name:
            return None
        return self._routes.get(route_name)

    @property
    def controllers(self) -> List[str]:
        return list(self._entries)

    def _entry(self, controller: str) -> _ControllerEntry:
        entry = self._entries.get(controller)
        if entry is None:
            raise ConfigurationError(
                f"Controller '{controller}' was never registered",
                controller=controller,
            )
        return entry

    def _recorded(self, action: Action) -> Action:
        # The table is authoritative, not the flags on the caller's object
        recorded = self._entry(action.controller).actions.get(action.name)
        if recorded is None:
            raise ConfigurationError(
                f"Action '{action.route_name}' is not registered",
                controller=action.controller,
            )
        return recorded
