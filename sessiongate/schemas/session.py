"""
SessionGate — Pydantic Request/Response Schemas
================================================

What:  API contracts of the reference account controller and health route.
Why:   FastAPI validates request bodies and documents responses from these.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class LoginRequest(BaseModel):
    """
    Body of POST /account/login.

    The principal is stored as-is. Verifying who the caller is belongs to the
    host application, before it calls create_session().
    """
    principal: str = Field(min_length=1, max_length=256, description="Opaque principal identifier")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SessionResponse(BaseModel):
    authenticated: bool
    principal: Optional[str] = None
    message: str = ""


class HealthResponse(BaseModel):
    status: str = Field(description="Overall status: healthy or unhealthy")
    version: str
    controllers: List[str] = Field(description="Controllers registered with the gate")
    uptime_seconds: float


class ErrorResponse(BaseModel):
    """Error envelope shared by every error response."""
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = None
    request_id: Optional[str] = None
