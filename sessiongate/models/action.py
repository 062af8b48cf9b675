"""
SessionGate — Action & Controller Models
=========================================

What:  Frozen Pydantic models for controller actions and their auth metadata.
Why:   Controllers are described once at startup and never change afterwards.
       Frozen models make that explicit and make the descriptors hashable and
       comparable, which the registry relies on for idempotent registration.
How:   Controllers produce ControllerDescriptor objects (declared metadata);
       the registry turns them into Action objects (resolved metadata).

Declared vs. resolved:
    ActionDescriptor.login / .public / .unauthorized_mode are what the author
    wrote. Action.requires_login is what the registry decided: the login action
    and public actions do not require a session, everything else does.
"""

import enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field


class UnauthorizedMode(str, enum.Enum):
    """
    Controller-wide policy for requests blocked by the gate.

    Declared on the login action, applied to every other action of the same
    controller.
    """

    REDIRECT_TO_LOGIN = "redirect_to_login"
    RETURN_UNAUTHORIZED_STATUS = "return_unauthorized_status"


DEFAULT_UNAUTHORIZED_MODE = UnauthorizedMode.REDIRECT_TO_LOGIN


def route_name(controller: str, action: str) -> str:
    """Route name under which a controller action is mounted (`account.index`)."""
    return f"{controller}.{action}"


class ActionDescriptor(BaseModel):
    """One action as declared by a controller author."""

    name: str = Field(min_length=1, description="Operation name, unique per controller")
    login: bool = Field(default=False, description="This is the controller's login action")
    public: bool = Field(default=False, description="Reachable without a session")
    unauthorized_mode: Optional[UnauthorizedMode] = Field(
        default=None,
        description="Only valid on the login action; defaults to REDIRECT_TO_LOGIN there",
    )

    model_config = {"frozen": True}


class ControllerDescriptor(BaseModel):
    """
    Explicit description of a controller: its name and ordered actions.

    This is what the registry consumes. `Controller.describe()` builds one from
    decorated endpoints, but hand-written descriptors work just as well.
    """

    name: str = Field(min_length=1)
    actions: Tuple[ActionDescriptor, ...] = ()

    model_config = {"frozen": True}


class Action(BaseModel):
    """
    One controller operation as recorded by the ActionExemptionRegistry.

    Attributes:
        controller:        Owning controller name
        name:              Operation name
        requires_login:    Whether the gate checks the session for this action
        login:             Whether this is the controller's login action
        unauthorized_mode: Set on the login action only
    """

    controller: str
    name: str
    requires_login: bool = True
    login: bool = False
    unauthorized_mode: Optional[UnauthorizedMode] = None

    model_config = {"frozen": True}

    @property
    def route_name(self) -> str:
        return route_name(self.controller, self.name)
