"""
SessionGate — Application Configuration
========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Session cookies are signed with a secret and carry security-relevant
       flags; all of them must be typed and validated before the first request.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the application factory, the session store, and the gate's
       Starlette result factory.
When:  Loaded once at module import time; validated before app starts.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEV_SECRET_KEY = "sessiongate-dev-secret-change-me"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Production deployments MUST override SESSION_SECRET_KEY and should set
    SESSION_HTTPS_ONLY=true.
    """

    # ── Session Cookie ────────────────────────────────────────────────────
    # What: Key used by itsdangerous to sign the session cookie
    # A leaked key lets anyone forge a session, i.e. bypass the gate entirely
    session_secret_key: str = Field(
        default=DEV_SECRET_KEY,
        description="Secret used to sign the session cookie"
    )

    session_cookie: str = Field(default="sessiongate_session")

    # What: Cookie lifetime in seconds (default: 14 days)
    session_max_age: int = Field(default=1_209_600, ge=60, le=31_536_000)

    session_same_site: str = Field(default="lax")
    session_https_only: bool = Field(default=False)

    @field_validator("session_same_site")
    @classmethod
    def validate_same_site(cls, v: str) -> str:
        """Restricts SameSite to the values browsers understand."""
        lower = v.lower()
        if lower not in {"lax", "strict", "none"}:
            raise ValueError(f"Invalid session_same_site '{v}'. Must be lax, strict or none")
        return lower

    # ── Authentication Gate ───────────────────────────────────────────────
    # What: Session key under which the authenticated principal is stored
    principal_session_key: str = Field(default="sessiongate.principal", min_length=1)

    # What: Status code of the redirect issued to unauthenticated callers
    # 302 matches what browsers expect from a classic login redirect
    login_redirect_status: int = Field(default=302)

    @field_validator("login_redirect_status")
    @classmethod
    def validate_redirect_status(cls, v: int) -> int:
        """Only real redirect codes make sense for a login redirect."""
        if v not in {301, 302, 303, 307, 308}:
            raise ValueError(f"Invalid login_redirect_status {v}. Must be a 3xx redirect code")
        return v

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that security-critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises a single ValueError.
        """
        errors = []
        if not self.session_secret_key or self.session_secret_key == DEV_SECRET_KEY:
            errors.append(
                "SESSION_SECRET_KEY is not set. "
                "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        if self.session_same_site == "none" and not self.session_https_only:
            errors.append("SESSION_SAME_SITE=none requires SESSION_HTTPS_ONLY=true")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
